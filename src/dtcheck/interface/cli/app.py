from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates a single check: logging bootstrap, configuration resolution
(defaults, optional file, CLI overrides), tree document loading, the
invariant check itself and result rendering.

Exit codes: 0 tree is valid, 1 invariant violation, 2 unusable input.
"""

import json
import sys
from typing import Any, Dict, List, Optional

from dtcheck.core.checker import run_check
from dtcheck.core.loader import TreeDocument, TreeDocumentError, document_summary, load_tree_document
from dtcheck.core.reporter import create_sink
from dtcheck.core.validator import validate_config
from dtcheck.domain.config import get_default_config, load_config
from dtcheck.domain.violations import CheckResult
from dtcheck.infra.logging import LoggingConfig, configure_logging, get_logger
from dtcheck.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_USAGE = 2

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the dtcheck workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    # 1. Argument parsing
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console on stderr, optional file)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    # 3. Configuration hierarchy
    base_conf = load_config(args.config_file) if args.config_file else get_default_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    try:
        clean_conf, warnings = validate_config(raw_conf, strict=args.strict_config)
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_USAGE

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if clean_conf["log_level"] != log_level:
        configure_logging(
            LoggingConfig(level=clean_conf["log_level"], console=True, log_file=args.log_file),
            force=True,
        )

    # 4. Candidate tree
    try:
        doc = load_tree_document(args.tree_file)
    except TreeDocumentError as e:
        logger.error(str(e))
        return EXIT_USAGE

    logger.debug(f"Checking {args.tree_file}: {document_summary(doc)}")

    # 5. Invariant check
    result = run_check(
        doc.initialized,
        doc.root,
        doc.count,
        sink=create_sink(clean_conf["diagnostics"]),
        max_depth=clean_conf["max_depth"],
    )

    # 6. Rendering
    if args.json_output:
        print(json.dumps(_json_report(args.tree_file, doc, result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(args.tree_file, result)

    return EXIT_VALID if result.ok else EXIT_INVALID

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge of non-None overrides into the base configuration."""
    out = dict(base)
    for k, v in overrides.items():
        if v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _json_report(tree_file: str, doc: TreeDocument, result: CheckResult) -> Dict[str, Any]:
    report = result.as_dict()
    report["file"] = tree_file
    report["document"] = document_summary(doc)
    return report


def _print_human_summary(tree_file: str, result: CheckResult) -> None:
    if result.ok:
        print(f"{tree_file}: valid ({result.nodes_visited} node(s))")
        return
    violation = result.violation
    print(f"{tree_file}: INVALID [{violation.kind.value} {violation.kind.name}]")
    print(f"Nodes visited before stopping: {result.nodes_visited}")
    for p in violation.paths:
        print(f"  - {p}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
