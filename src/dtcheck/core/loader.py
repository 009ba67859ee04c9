from __future__ import annotations

"""
Tree Document Loader.

Reconstructs a candidate directory tree from its JSON description exactly
as written: children keep document order, duplicates survive and the
claimed count is taken verbatim. This makes malformed trees reproducible
from plain files so they can be fed to the checker.

Document shape::

    {
      "initialized": true,
      "count": 3,
      "root": {"path": "a", "children": [{"path": "a/b"}, {"path": "a/c"}]}
    }
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from dtcheck.domain.node import Node
from dtcheck.domain.path import InvalidPathError, Path

logger = logging.getLogger(__name__)


class TreeDocumentError(ValueError):
    """Raised when a tree document cannot be read or is malformed."""


@dataclass(frozen=True)
class TreeDocument:
    """
    Candidate tree instance as described by a document.

    Attributes:
        initialized: Lifecycle flag to present to the checker.
        root: Root node, None for an empty tree.
        count: Claimed node count.
        nodes_declared: Number of node entries found in the document.
    """
    initialized: bool
    root: Optional[Node]
    count: int
    nodes_declared: int

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def load_tree_document(file_path: str) -> TreeDocument:
    """
    Read and parse a JSON tree document from disk.

    Args:
        file_path: Location of the JSON file.

    Returns:
        TreeDocument: The reconstructed candidate tree.

    Raises:
        TreeDocumentError: On I/O failure, invalid JSON or invalid structure.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise TreeDocumentError(f"Cannot read tree document '{file_path}': {e}") from e
    except json.JSONDecodeError as e:
        raise TreeDocumentError(f"Invalid JSON in '{file_path}': {e}") from e
    except RecursionError as e:
        raise TreeDocumentError(f"Tree document '{file_path}' is nested too deeply to decode.") from e

    logger.debug(f"Loaded tree document from {file_path}")
    return parse_tree_document(data)


def parse_tree_document(data: Any) -> TreeDocument:
    """
    Build a TreeDocument from already decoded JSON data.

    Missing ``initialized`` defaults to True, missing ``count`` to the
    number of nodes declared in the document.
    """
    if not isinstance(data, dict):
        raise TreeDocumentError(
            f"Tree document must be an object, received {type(data).__name__}."
        )

    initialized = data.get("initialized", True)
    if not isinstance(initialized, bool):
        raise TreeDocumentError("'initialized' must be a boolean.")

    root_spec = data.get("root")
    root, declared = (None, 0) if root_spec is None else _build_tree(root_spec)

    count = data.get("count", declared)
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise TreeDocumentError("'count' must be a non-negative integer.")

    return TreeDocument(initialized=initialized, root=root, count=count, nodes_declared=declared)


def document_summary(doc: TreeDocument) -> Dict[str, Any]:
    """Describe a loaded document for reports."""
    root_path = doc.root.path if doc.root is not None else None
    return {
        "initialized": doc.initialized,
        "count": doc.count,
        "nodes_declared": doc.nodes_declared,
        "root": root_path.pathname if root_path is not None else None,
    }

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _build_tree(spec: Any) -> Tuple[Node, int]:
    """Materialize the root entry and its descendants, returning the root and the node total."""
    root = _make_node(spec, None, "root")
    total = 1
    pending = [(root, spec, "root")]
    while pending:
        node, node_spec, where = pending.pop()
        children = node_spec.get("children", [])
        if not isinstance(children, list):
            raise TreeDocumentError(f"'children' at {where} must be a list.")

        for i, child_spec in enumerate(children):
            child_where = f"{where}.children[{i}]"
            child = _make_node(child_spec, node, child_where)
            node.link_child(child)
            total += 1
            pending.append((child, child_spec, child_where))

    return root, total


def _make_node(spec: Any, parent: Optional[Node], where: str) -> Node:
    if not isinstance(spec, dict):
        raise TreeDocumentError(f"Node entry at {where} must be an object.")
    return Node(_parse_path(spec.get("path"), where), parent)


def _parse_path(raw: Any, where: str) -> Optional[Path]:
    # An explicit null reproduces a node without a path.
    if raw is None:
        return None
    try:
        return Path.parse(raw)
    except InvalidPathError as e:
        raise TreeDocumentError(f"Invalid path at {where}: {e}") from e

