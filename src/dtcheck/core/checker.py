from __future__ import annotations

"""
Directory Tree Invariant Checker.

Structural oracle for the directory tree: given a candidate instance it
decides whether every structural invariant holds. Checks run in a fixed
order and stop at the first violation, which is reported as exactly one
diagnostic line on the configured sink.

Internally every check produces ``Optional[Violation]``; the boolean
surface (``node_is_valid``, ``tree_check``, ``is_valid``) is only a thin
layer that forwards the violation message to a sink.
"""

import logging
from typing import Any, List, Optional, Tuple

from dtcheck.core.reporter import DiagnosticSink, StreamSink
from dtcheck.domain.node import Node, Status
from dtcheck.domain.path import SEPARATOR, Path
from dtcheck.domain.violations import (
    CheckResult,
    TraversalCounter,
    Violation,
    ViolationKind,
)

logger = logging.getLogger(__name__)

_NO_PATH = "<no path>"

# -----------------------------------------------------------------------------
# PUBLIC API (BOOLEAN SURFACE)
# -----------------------------------------------------------------------------

def node_is_valid(node: Optional[Node], sink: Optional[DiagnosticSink] = None) -> bool:
    """
    Validate a single node against its parent and immediate children.

    Args:
        node: Node under inspection (may be None, which is a violation).
        sink: Destination of the diagnostic line; stderr when omitted.

    Returns:
        bool: True if every local invariant holds.
    """
    violation = check_node(node)
    if violation is not None:
        _report(violation, sink)
        return False
    return True


def tree_check(
        node: Optional[Node],
        counter: TraversalCounter,
        sink: Optional[DiagnosticSink] = None,
        max_depth: Optional[int] = None,
) -> bool:
    """
    Pre-order walk of the subtree rooted at ``node``.

    ``counter`` is incremented once per visited node, before that node is
    validated, so after a failure it still accounts for the offending node.

    Returns:
        bool: False on the first violation found in the subtree.
    """
    violation = _walk(node, counter, max_depth)
    if violation is not None:
        _report(violation, sink)
        return False
    return True


def is_valid(
        initialized: bool,
        root: Optional[Node],
        claimed_count: int,
        sink: Optional[DiagnosticSink] = None,
        max_depth: Optional[int] = None,
) -> bool:
    """
    Decide whether a directory tree instance is well formed.

    Args:
        initialized: Lifecycle flag of the directory tree.
        root: Root node, None for an empty tree.
        claimed_count: Number of nodes the tree believes it holds.
        sink: Destination of the diagnostic line; stderr when omitted.
        max_depth: Optional traversal depth cap.

    Returns:
        bool: True iff every global and per-node invariant holds.
    """
    return run_check(initialized, root, claimed_count, sink=sink, max_depth=max_depth).ok


def run_check(
        initialized: bool,
        root: Optional[Node],
        claimed_count: int,
        sink: Optional[DiagnosticSink] = None,
        max_depth: Optional[int] = None,
) -> CheckResult:
    """
    Same as ``is_valid`` but hands back the structured result.

    The diagnostic line is emitted on the sink before returning.
    """
    result = check_tree(initialized, root, claimed_count, max_depth=max_depth)
    if not result.ok:
        _report(result.violation, sink)
    return result

# -----------------------------------------------------------------------------
# PUBLIC API (STRUCTURED RESULTS)
# -----------------------------------------------------------------------------

def check_tree(
        initialized: bool,
        root: Optional[Node],
        claimed_count: int,
        max_depth: Optional[int] = None,
) -> CheckResult:
    """
    Run the global checks, the traversal and the count reconciliation.

    Order: lifecycle coherence, empty-tree count, root parent, per-node
    traversal, node count.

    Returns:
        CheckResult: First violation (if any) and the number of nodes seen.
    """
    if not initialized:
        if claimed_count != 0 or root is not None:
            return CheckResult(_violation(
                ViolationKind.UNINITIALIZED_NOT_EMPTY,
                f"Tree is not initialized but holds count {claimed_count} "
                f"and {'a' if root is not None else 'no'} root",
            ))
        return CheckResult()

    if root is None and claimed_count != 0:
        return CheckResult(_violation(
            ViolationKind.EMPTY_TREE_NONZERO_COUNT,
            f"Root is absent but the tree claims {claimed_count} node(s)",
        ))

    if root is not None and root.parent is not None:
        return CheckResult(_violation(
            ViolationKind.ROOT_HAS_PARENT,
            f"Root ({_name(root.path)}) has a parent ({_name(root.parent.path)})",
            root.path, root.parent.path,
        ))

    counter = TraversalCounter()
    logger.debug(f"Traversing tree for invariant check (claimed count {claimed_count}).")
    violation = _walk(root, counter, max_depth)
    if violation is not None:
        return CheckResult(violation, counter.value)

    if counter.value != claimed_count:
        return CheckResult(_violation(
            ViolationKind.COUNT_MISMATCH,
            f"Node count mismatch: tree claims {claimed_count}, traversal found {counter.value}",
        ), counter.value)

    logger.debug(f"Tree is well formed ({counter.value} node(s)).")
    return CheckResult(None, counter.value)


def check_node(node: Optional[Node]) -> Optional[Violation]:
    """
    Evaluate the local invariants of ``node`` in their fixed order.

    The parent check requires both a shared prefix of ``depth - 1``
    components and a parent path of exactly ``depth - 1`` components, so
    the parent must be the direct prefix and not merely share one.

    Returns:
        Optional[Violation]: The first broken invariant, or None.
    """
    # 1. Presence
    if node is None:
        return _violation(ViolationKind.NULL_NODE, "A node is absent (hole in the tree)")

    # 2. Path presence and depth
    path = node.path
    if path is None or path.depth < 1:
        return _violation(ViolationKind.MISSING_PATH, "A node has no path or an empty path", path)

    # 3-4. Depth versus parent presence
    depth = path.depth
    parent = node.parent
    if depth == 1 and parent is not None:
        return _violation(
            ViolationKind.DEPTH_ONE_HAS_PARENT,
            f"Depth-1 node ({path.pathname}) has a parent ({_name(parent.path)})",
            path, parent.path,
        )
    if depth == 1 and SEPARATOR in path.pathname:
        return _violation(
            ViolationKind.DEPTH_ONE_PATH_HAS_SEPARATOR,
            f"Depth-1 node renders with a separator: ({path.pathname})",
            path,
        )
    if depth > 1 and parent is None:
        return _violation(
            ViolationKind.MISSING_PARENT,
            f"Node at depth {depth} ({path.pathname}) has no parent",
            path,
        )

    # 5. Parent path is the longest proper prefix
    if parent is not None:
        violation = _check_parent_path(path, parent)
        if violation is not None:
            return violation

    # 6. Every child points back at this node
    children, violation = _collect_children(node)
    if violation is not None:
        return violation
    for child in children:
        if child is None:
            return _violation(
                ViolationKind.NULL_NODE,
                f"Node ({path.pathname}) holds an absent child",
                path,
            )
        if child.parent is not node:
            return _violation(
                ViolationKind.CHILD_PARENT_MISMATCH,
                f"Child's parent doesn't match parent node: ({_name(child.path)}) under ({path.pathname})",
                child.path, path,
            )

    # 7. This node is listed by its parent
    if parent is not None:
        siblings, violation = _collect_children(parent)
        if violation is not None:
            return violation
        if not any(sibling is node for sibling in siblings):
            return _violation(
                ViolationKind.PARENT_MISSING_CHILD,
                f"Parent ({_name(parent.path)}) does not list child ({path.pathname})",
                parent.path, path,
            )

    for child in children:
        if child.path is None:
            return _violation(
                ViolationKind.MISSING_PATH,
                f"A child of ({path.pathname}) has no path",
                path,
            )

    # 8. Strict sibling ordering
    for prev, curr in zip(children, children[1:]):
        if prev.path.compare(curr.path) >= 0:
            return _violation(
                ViolationKind.CHILDREN_OUT_OF_ORDER,
                f"Node's children are out of lexicographic order: "
                f"({prev.path.pathname}) >= ({curr.path.pathname})",
                prev.path, curr.path,
            )

    # 9. No duplicates, independent of the ordering check
    for i, first in enumerate(children):
        for second in children[i + 1:]:
            if first.path.compare(second.path) == 0:
                return _violation(
                    ViolationKind.DUPLICATE_CHILDREN,
                    f"Node ({path.pathname}) has duplicate children: ({first.path.pathname})",
                    first.path, second.path,
                )

    return None

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _walk(
        root: Optional[Node],
        counter: TraversalCounter,
        max_depth: Optional[int],
) -> Optional[Violation]:
    """
    Pre-order, left-to-right traversal returning the first violation.

    Runs on an explicit stack of frames so tree depth is not bounded by
    the interpreter recursion limit. A frame holds the node, the index of
    the next child to fetch, the child count read on entry and the level.
    Each child is fetched only after the previous sibling's subtree is
    done, the same order a recursive walk would use.
    """
    violation = _visit(root, counter, max_depth, 1)
    if violation is not None or root is None:
        return violation

    stack: List[List[Any]] = [[root, 0, root.num_children, 1]]
    while stack:
        frame = stack[-1]
        node, index, count, level = frame
        if index >= count:
            stack.pop()
            continue
        frame[1] = index + 1

        status, child = node.get_child(index)
        if status is not Status.SUCCESS:
            return _violation(
                ViolationKind.CHILD_INDEX_MISMATCH,
                f"Child count exceeds retrievable children "
                f"at ({_name(node.path)}), index {index}",
                node.path,
            )
        if child is None:
            continue

        violation = _visit(child, counter, max_depth, level + 1)
        if violation is not None:
            return violation
        stack.append([child, 0, child.num_children, level + 1])

    return None


def _visit(
        node: Optional[Node],
        counter: TraversalCounter,
        max_depth: Optional[int],
        level: int,
) -> Optional[Violation]:
    """Count ``node`` and run its depth cap and local checks."""
    if node is None:
        return None

    counter.value += 1

    if max_depth is not None and level > max_depth:
        return _violation(
            ViolationKind.DEPTH_LIMIT_EXCEEDED,
            f"Traversal exceeded max depth {max_depth} at ({_name(node.path)})",
            node.path,
        )

    return check_node(node)


def _check_parent_path(path: Path, parent: Node) -> Optional[Violation]:
    """Verify that the parent's path is exactly the node's path minus one component."""
    parent_path = parent.path
    if parent_path is None:
        return _violation(
            ViolationKind.MISSING_PATH,
            f"Parent of ({path.pathname}) has no path",
            path,
        )
    expected = path.depth - 1
    if (path.shared_prefix_depth(parent_path) != expected
            or parent_path.depth != expected):
        return _violation(
            ViolationKind.PARENT_PATH_MISMATCH,
            f"P-C nodes don't have P-C paths: ({parent_path.pathname}) ({path.pathname})",
            parent_path, path,
        )
    return None


def _collect_children(node: Node) -> Tuple[List[Optional[Node]], Optional[Violation]]:
    """Fetch every child through the indexed accessor, flagging accessor failures."""
    children: List[Optional[Node]] = []
    for index in range(node.num_children):
        status, child = node.get_child(index)
        if status is not Status.SUCCESS:
            return children, _violation(
                ViolationKind.CHILD_INDEX_MISMATCH,
                f"Node ({_name(node.path)}) claims {node.num_children} children "
                f"but index {index} cannot be retrieved",
                node.path,
            )
        children.append(child)
    return children, None


def _violation(kind: ViolationKind, message: str, *paths: Optional[Path]) -> Violation:
    logger.debug(f"Invariant {kind.value} ({kind.name}) violated: {message}")
    return Violation(kind, message, tuple(_name(p) for p in paths))


def _name(path: Optional[Path]) -> str:
    return path.pathname if path is not None else _NO_PATH


def _report(violation: Violation, sink: Optional[DiagnosticSink]) -> None:
    (sink or StreamSink()).emit(violation.message)
