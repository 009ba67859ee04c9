from __future__ import annotations

"""
Directory Tree Node Model.

A node owns an ordered list of children and keeps a non-owning reference
to its parent. The record performs no validation of its own: keeping the
children sorted and the parent links reciprocal is the job of the
directory tree, and verifying it is the job of the checker.
"""

from enum import Enum
from typing import List, Optional, Tuple

from dtcheck.domain.path import Path


class Status(Enum):
    """Outcome codes shared by node accessors and directory tree operations."""
    SUCCESS = "success"
    INITIALIZATION_ERROR = "initialization_error"
    BAD_PATH = "bad_path"
    CONFLICTING_PATH = "conflicting_path"
    NO_SUCH_PATH = "no_such_path"
    ALREADY_IN_TREE = "already_in_tree"


# -----------------------------------------------------------------------------
# NODE RECORD
# -----------------------------------------------------------------------------

class Node:
    """
    Represents one entry of the directory tree.

    Attributes:
        path: Pathname of the entry (None only on a malformed node).
        parent: Enclosing node, None for the root.
    """

    __slots__ = ("path", "parent", "_children")

    def __init__(self, path: Optional[Path], parent: Optional[Node] = None) -> None:
        self.path = path
        self.parent = parent
        self._children: List[Optional[Node]] = []

    def __repr__(self) -> str:
        name = self.path.pathname if self.path is not None else None
        return f"Node({name!r}, children={len(self._children)})"

    # --- Child access ---

    @property
    def num_children(self) -> int:
        return len(self._children)

    def get_child(self, index: int) -> Tuple[Status, Optional[Node]]:
        """
        Retrieve the child stored at ``index``.

        Args:
            index: Position in the ordered child list.

        Returns:
            Tuple[Status, Optional[Node]]: (SUCCESS, child) when the index
            is in range, (NO_SUCH_PATH, None) otherwise.
        """
        if index < 0 or index >= len(self._children):
            return Status.NO_SUCH_PATH, None
        return Status.SUCCESS, self._children[index]

    def find_child(self, path: Path) -> Tuple[bool, int]:
        """
        Binary search the child list for ``path``.

        Assumes the children are in lexicographic order, which holds for
        any node the directory tree maintains.

        Returns:
            Tuple[bool, int]: Whether a child with that path exists, and
            its index or the index where it would be inserted.
        """
        lo, hi = 0, len(self._children)
        while lo < hi:
            mid = (lo + hi) // 2
            child = self._children[mid]
            cmp = child.path.compare(path)
            if cmp == 0:
                return True, mid
            if cmp < 0:
                lo = mid + 1
            else:
                hi = mid
        return False, lo

    # --- Raw linking ---

    def link_child(self, child: Optional[Node], index: Optional[int] = None) -> None:
        """
        Place ``child`` in the child list without any consistency checks.

        Args:
            child: Node to link (its parent reference is left untouched).
            index: Insertion position; appended when omitted.
        """
        if index is None:
            self._children.append(child)
        else:
            self._children.insert(index, child)

    def unlink_child(self, index: int) -> Optional[Node]:
        """Detach and return the child at ``index``."""
        return self._children.pop(index)
