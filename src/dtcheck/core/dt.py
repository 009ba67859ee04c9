from __future__ import annotations

"""
Reference Directory Tree.

Minimal in-memory directory tree whose every operation is bracketed by the
invariant checker. It is the canonical producer of well-formed trees and
doubles as the harness that exercises the checker in assertion mode
(violations raise) or logging mode (violations are only reported).
"""

import logging
from typing import Any, Dict, List, Optional

from dtcheck.core.checker import check_tree, run_check
from dtcheck.core.reporter import DiagnosticSink
from dtcheck.domain.config import VIOLATION_MODES
from dtcheck.domain.node import Node, Status
from dtcheck.domain.path import InvalidPathError, Path
from dtcheck.domain.violations import CheckResult, Violation

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# ERRORS
# -----------------------------------------------------------------------------

class DTError(Exception):
    """Base error of directory tree operations."""
    status: Status = Status.SUCCESS


class InitializationError(DTError):
    status = Status.INITIALIZATION_ERROR


class BadPathError(DTError):
    status = Status.BAD_PATH


class ConflictingPathError(DTError):
    status = Status.CONFLICTING_PATH


class NoSuchPathError(DTError):
    status = Status.NO_SUCH_PATH


class AlreadyInTreeError(DTError):
    status = Status.ALREADY_IN_TREE


class InvariantViolationError(AssertionError):
    """Raised in assertion mode when the tree fails an invariant check."""

    def __init__(self, violation: Violation, stage: str) -> None:
        super().__init__(f"{stage}: {violation.message}")
        self.violation = violation
        self.stage = stage

# -----------------------------------------------------------------------------
# DIRECTORY TREE
# -----------------------------------------------------------------------------

class DirectoryTree:
    """
    Directory tree holding one root and its descendants.

    Args:
        check_invariants: Run the checker on entry and exit of every operation.
        on_violation: 'raise' to abort with InvariantViolationError, 'log' to
            keep going after reporting.
        sink: Diagnostic sink used when a check fails.
        max_depth: Optional traversal depth cap forwarded to the checker.
    """

    def __init__(
            self,
            check_invariants: bool = True,
            on_violation: str = "raise",
            sink: Optional[DiagnosticSink] = None,
            max_depth: Optional[int] = None,
    ) -> None:
        if on_violation not in VIOLATION_MODES:
            raise ValueError(f"Invalid on_violation mode '{on_violation}'.")
        self.check_invariants = check_invariants
        self.on_violation = on_violation
        self.max_depth = max_depth
        self._sink = sink
        self._initialized = False
        self._root: Optional[Node] = None
        self._count = 0

    @classmethod
    def from_config(cls, config: Dict[str, Any], sink: Optional[DiagnosticSink] = None) -> DirectoryTree:
        """Build a tree from a validated configuration dictionary."""
        return cls(
            check_invariants=config["check_invariants"],
            on_violation=config["on_violation"],
            sink=sink,
            max_depth=config["max_depth"],
        )

    # --- State observers ---

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def root(self) -> Optional[Node]:
        return self._root

    @property
    def size(self) -> int:
        return self._count

    def check(self) -> CheckResult:
        """Run the invariant checker over the current state."""
        return check_tree(self._initialized, self._root, self._count, max_depth=self.max_depth)

    # --- Lifecycle ---

    def init(self) -> None:
        self._verify("init:entry")
        if self._initialized:
            raise InitializationError("Directory tree is already initialized.")
        self._initialized = True
        self._root = None
        self._count = 0
        self._verify("init:exit")

    def destroy(self) -> None:
        self._verify("destroy:entry")
        self._require_initialized()
        self._root = None
        self._count = 0
        self._initialized = False
        self._verify("destroy:exit")

    # --- Operations ---

    def insert(self, pathname: str) -> None:
        """
        Insert ``pathname`` and every missing ancestor.

        Raises:
            InitializationError: If the tree is not initialized.
            BadPathError: If the pathname is malformed.
            ConflictingPathError: If the path lives under a different root.
            AlreadyInTreeError: If the path is already present.
        """
        self._verify("insert:entry")
        self._require_initialized()
        path = _parse(pathname)

        if self._root is not None and self._root.path.components[0] != path.components[0]:
            raise ConflictingPathError(
                f"'{path.pathname}' is not under root '{self._root.path.pathname}'."
            )

        closest = self._find_closest(path)
        if closest is not None and closest.path.depth == path.depth:
            raise AlreadyInTreeError(f"'{path.pathname}' is already in the tree.")

        start = closest.path.depth + 1 if closest is not None else 1
        parent = closest
        created = 0
        for depth in range(start, path.depth + 1):
            node = Node(path.prefix(depth), parent)
            if parent is None:
                self._root = node
            else:
                _, index = parent.find_child(node.path)
                parent.link_child(node, index)
            parent = node
            created += 1

        self._count += created
        logger.debug(f"Inserted '{path.pathname}' ({created} new node(s), size {self._count}).")
        self._verify("insert:exit")

    def contains(self, pathname: str) -> bool:
        """
        Report whether ``pathname`` is in the tree.

        An uninitialized tree or a malformed pathname yields False.
        """
        self._verify("contains:entry")
        found = False
        if self._initialized:
            try:
                path = _parse(pathname)
            except BadPathError:
                path = None
            if path is not None:
                found = self._find(path) is not None
        self._verify("contains:exit")
        return found

    def remove(self, pathname: str) -> None:
        """
        Remove ``pathname`` together with its whole subtree.

        Raises:
            InitializationError: If the tree is not initialized.
            BadPathError: If the pathname is malformed.
            NoSuchPathError: If the path is not in the tree.
        """
        self._verify("remove:entry")
        self._require_initialized()
        path = _parse(pathname)

        node = self._find(path)
        if node is None:
            raise NoSuchPathError(f"'{path.pathname}' is not in the tree.")

        removed = _subtree_size(node)
        parent = node.parent
        if parent is None:
            self._root = None
        else:
            _, index = parent.find_child(path)
            parent.unlink_child(index)
            node.parent = None

        self._count -= removed
        logger.debug(f"Removed '{path.pathname}' ({removed} node(s), size {self._count}).")
        self._verify("remove:exit")

    def to_string(self) -> str:
        """
        Render every pathname in pre-order, one per line.

        Returns:
            str: The listing, empty for an empty or uninitialized tree.
        """
        self._verify("to_string:entry")
        lines: List[str] = []
        _preorder(self._root, lines)
        return "".join(f"{line}\n" for line in lines)

    # --- Internals ---

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise InitializationError("Directory tree is not initialized.")

    def _find_closest(self, path: Path) -> Optional[Node]:
        """Return the deepest node whose path is a prefix of ``path``."""
        curr = self._root
        if curr is None or curr.path.components[0] != path.components[0]:
            return None
        for depth in range(2, path.depth + 1):
            found, index = curr.find_child(path.prefix(depth))
            if not found:
                break
            _, curr = curr.get_child(index)
        return curr

    def _find(self, path: Path) -> Optional[Node]:
        closest = self._find_closest(path)
        if closest is None or closest.path.depth != path.depth:
            return None
        return closest

    def _verify(self, stage: str) -> None:
        if not self.check_invariants:
            return
        result = run_check(
            self._initialized, self._root, self._count,
            sink=self._sink, max_depth=self.max_depth,
        )
        if result.ok:
            return
        if self.on_violation == "raise":
            raise InvariantViolationError(result.violation, stage)
        logger.error(f"Invariant check failed at {stage}: {result.violation.kind.name}")

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _parse(pathname: str) -> Path:
    try:
        return Path.parse(pathname)
    except InvalidPathError as e:
        raise BadPathError(str(e)) from e


def _subtree_size(node: Node) -> int:
    total = 0
    stack = [node]
    while stack:
        current = stack.pop()
        total += 1
        for index in range(current.num_children):
            _, child = current.get_child(index)
            stack.append(child)
    return total


def _preorder(node: Optional[Node], lines: List[str]) -> None:
    stack = [node] if node is not None else []
    while stack:
        current = stack.pop()
        lines.append(current.path.pathname)
        # Reversed so the leftmost child is popped first
        for index in reversed(range(current.num_children)):
            _, child = current.get_child(index)
            stack.append(child)
