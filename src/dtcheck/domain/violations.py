from __future__ import annotations

"""
Invariant Violation Data Models.

Defines the taxonomy of structural violations the checker can report and
the result objects exchanged between the checker, the reference directory
tree and the interface layer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ViolationKind(Enum):
    """Every structural invariant the checker enforces."""
    # Per-node
    NULL_NODE = "I1"
    MISSING_PATH = "I2"
    DEPTH_ONE_HAS_PARENT = "I3a"
    DEPTH_ONE_PATH_HAS_SEPARATOR = "I3b"
    MISSING_PARENT = "I4"
    PARENT_PATH_MISMATCH = "I5"
    CHILD_PARENT_MISMATCH = "I6"
    PARENT_MISSING_CHILD = "I6p"
    CHILDREN_OUT_OF_ORDER = "I7"
    DUPLICATE_CHILDREN = "I8"
    CHILD_INDEX_MISMATCH = "I9"
    # Whole tree
    UNINITIALIZED_NOT_EMPTY = "G1"
    EMPTY_TREE_NONZERO_COUNT = "G2"
    ROOT_HAS_PARENT = "G3"
    COUNT_MISMATCH = "G4"
    # Hardening
    DEPTH_LIMIT_EXCEEDED = "D1"


# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Violation:
    """
    One broken invariant.

    Attributes:
        kind: Which invariant failed.
        message: Human readable diagnostic line (no trailing newline).
        paths: Rendered pathnames of the offending node(s).
    """
    kind: ViolationKind
    message: str
    paths: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.name,
            "invariant": self.kind.value,
            "message": self.message,
            "paths": list(self.paths),
        }


@dataclass(frozen=True)
class CheckResult:
    """
    Outcome of a whole-tree check.

    Attributes:
        violation: First violation found, None when the tree is well formed.
        nodes_visited: Nodes counted by the traversal before it stopped.
    """
    violation: Optional[Violation] = None
    nodes_visited: int = 0

    @property
    def ok(self) -> bool:
        return self.violation is None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.ok,
            "nodes_visited": self.nodes_visited,
            "violation": self.violation.as_dict() if self.violation else None,
        }


@dataclass
class TraversalCounter:
    """Mutable tally of nodes seen by a pre-order walk."""
    value: int = 0
