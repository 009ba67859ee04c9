from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema of ``dtcheck`` and translates the parsed
namespace into configuration overrides.
"""

import argparse
from typing import Any, Dict

from dtcheck.domain.config import DIAGNOSTIC_SINKS

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the dtcheck CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="dtcheck",
        description="Check a directory tree document against its structural invariants.",
    )

    p.add_argument(
        "tree_file",
        help="JSON document describing the tree (initialized, count, root).",
    )

    # --- Configuration ---
    p.add_argument(
        "-c", "--config",
        dest="config_file",
        default=None,
        help="JSON configuration file merged over the defaults.",
    )
    p.add_argument(
        "--max-depth",
        dest="max_depth",
        type=int,
        default=None,
        help="Abort the traversal beyond this depth (cycle safeguard).",
    )
    p.add_argument(
        "--diagnostics",
        choices=DIAGNOSTIC_SINKS,
        default=None,
        help="Where diagnostic lines are written (default: stderr).",
    )
    p.add_argument(
        "--strict-config",
        action="store_true",
        help="Reject invalid configuration values instead of coercing them.",
    )

    # --- Output and diagnostics ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the check result as JSON.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write log records to this rotating file.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Only options the user actually passed are returned.
    """
    overrides: Dict[str, Any] = {}
    if args.max_depth is not None:
        overrides["max_depth"] = args.max_depth
    if args.diagnostics is not None:
        overrides["diagnostics"] = args.diagnostics
    if args.debug:
        overrides["log_level"] = "DEBUG"
    return overrides
