from __future__ import annotations

"""
Unit tests for the whole-tree checker.

Verifies:
1. Global invariants (lifecycle, empty tree, root parent, node count).
2. The concrete scenarios and boundary behaviours of the checker contract.
3. Pre-order counting, short-circuiting and the single-diagnostic rule.
4. Purity: repeated checks agree and leave the tree untouched.
"""

from typing import Callable, List, Tuple

import pytest

from dtcheck.core.checker import check_tree, is_valid, run_check, tree_check
from dtcheck.domain.node import Node
from dtcheck.domain.path import Path
from dtcheck.domain.violations import TraversalCounter, ViolationKind

from dt_fakes import FakePath, FlakyNode


def _snapshot(node) -> List[Tuple[str, object, int]]:
    """Flatten a tree into (pathname, parent id, child count) tuples."""
    out = []
    stack = [node]
    while stack:
        n = stack.pop()
        out.append((n.path.pathname, id(n.parent), n.num_children))
        stack.extend(n.get_child(i)[1] for i in range(n.num_children))
    return out

# -----------------------------------------------------------------------------
# 1. Boundary behaviours
# -----------------------------------------------------------------------------

def test_empty_initialized_tree_is_valid(sink) -> None:
    assert is_valid(True, None, 0, sink) is True
    assert sink.lines == []


def test_uninitialized_empty_tree_is_valid(sink) -> None:
    assert is_valid(False, None, 0, sink) is True


def test_uninitialized_with_count(sink) -> None:
    assert is_valid(False, None, 2, sink) is False
    assert check_tree(False, None, 2).violation.kind is ViolationKind.UNINITIALIZED_NOT_EMPTY
    assert len(sink.lines) == 1


def test_uninitialized_with_root(add_node) -> None:
    result = check_tree(False, add_node("a"), 0)
    assert result.violation.kind is ViolationKind.UNINITIALIZED_NOT_EMPTY


def test_single_root_is_valid(add_node) -> None:
    assert is_valid(True, add_node("a"), 1)


def test_single_root_rendering_with_separator_is_invalid(sink) -> None:
    root = Node(FakePath("a/b", depth=1))
    assert is_valid(True, root, 1, sink) is False
    assert check_tree(True, root, 1).violation.kind is ViolationKind.DEPTH_ONE_PATH_HAS_SEPARATOR

# -----------------------------------------------------------------------------
# 2. Global invariants
# -----------------------------------------------------------------------------

def test_absent_root_with_count() -> None:
    assert check_tree(True, None, 3).violation.kind is ViolationKind.EMPTY_TREE_NONZERO_COUNT


def test_root_with_parent(add_node) -> None:
    other = add_node("z")
    root = Node(Path.parse("a"), other)
    assert check_tree(True, root, 1).violation.kind is ViolationKind.ROOT_HAS_PARENT


@pytest.mark.parametrize("claimed", [0, 4, 6, 100])
def test_count_mismatch(sample_tree, claimed) -> None:
    result = check_tree(True, sample_tree, claimed)
    assert result.violation.kind is ViolationKind.COUNT_MISMATCH
    assert result.nodes_visited == 5


def test_sample_tree_is_valid(sample_tree) -> None:
    result = check_tree(True, sample_tree, 5)
    assert result.ok
    assert result.nodes_visited == 5

# -----------------------------------------------------------------------------
# 3. Concrete scenarios
# -----------------------------------------------------------------------------

def test_scenario_single_root(add_node) -> None:
    assert is_valid(True, add_node("a"), 1)


def test_scenario_ordered_children(add_node) -> None:
    root = add_node("a")
    add_node("a/b", root)
    add_node("a/c", root)
    assert is_valid(True, root, 3)


def test_scenario_wrong_order(add_node) -> None:
    root = add_node("a")
    add_node("a/c", root)
    add_node("a/b", root)
    assert check_tree(True, root, 3).violation.kind is ViolationKind.CHILDREN_OUT_OF_ORDER


def test_scenario_duplicate_children(add_node) -> None:
    root = add_node("a")
    add_node("a/b", root)
    add_node("a/b", root)
    assert check_tree(True, root, 3).violation.kind is ViolationKind.CHILDREN_OUT_OF_ORDER


def test_scenario_overclaimed_count(add_node) -> None:
    root = add_node("a")
    add_node("a/b", root)
    add_node("a/c", root)
    assert check_tree(True, root, 5).violation.kind is ViolationKind.COUNT_MISMATCH


def test_scenario_parent_pointer_skips_level(add_node) -> None:
    root = add_node("a")
    add_node("a/b", root)
    add_node("a/b/c", root)
    result = check_tree(True, root, 3)
    assert result.violation.kind is ViolationKind.PARENT_PATH_MISMATCH
    assert result.violation.paths == ("a", "a/b/c")


def test_scenario_child_listed_under_b_but_pointing_at_a(add_node, sink) -> None:
    root = add_node("a")
    b = add_node("a/b", root)
    c = Node(Path.parse("a/b/c"), root)
    b.link_child(c)
    assert is_valid(True, root, 3, sink) is False
    assert len(sink.lines) == 1

# -----------------------------------------------------------------------------
# 4. Traversal contract
# -----------------------------------------------------------------------------

def test_tree_check_counts_every_node(sample_tree, sink) -> None:
    counter = TraversalCounter()
    assert tree_check(sample_tree, counter, sink) is True
    assert counter.value == 5


def test_tree_check_on_absent_node_leaves_counter(sink) -> None:
    counter = TraversalCounter()
    assert tree_check(None, counter, sink) is True
    assert counter.value == 0


def test_counter_includes_failing_node(sample_tree, sink) -> None:
    # Pre-order: a, a/b, a/b/d, a/c -> the violation is found at the fourth node.
    c = sample_tree.get_child(1)[1]
    c.link_child(Node(Path.parse("a/c/a"), c))

    counter = TraversalCounter()
    assert tree_check(sample_tree, counter, sink) is False
    assert counter.value == 4
    assert len(sink.lines) == 1


def test_traversal_reports_unretrievable_child(sink) -> None:
    root = FlakyNode(Path.parse("a"))
    root.link_child(Node(Path.parse("a/b"), root))

    result = check_tree(True, root, 2)
    assert result.violation.kind is ViolationKind.CHILD_INDEX_MISMATCH
    assert result.nodes_visited == 1


def test_cyclic_child_list_terminates(add_node) -> None:
    root = add_node("a")
    b = add_node("a/b", root)
    b.link_child(root)
    result = check_tree(True, root, 2)
    assert result.violation.kind is ViolationKind.CHILD_PARENT_MISMATCH


def test_max_depth_cap(sample_tree) -> None:
    assert check_tree(True, sample_tree, 5, max_depth=3).ok
    result = check_tree(True, sample_tree, 5, max_depth=2)
    assert result.violation.kind is ViolationKind.DEPTH_LIMIT_EXCEEDED

# -----------------------------------------------------------------------------
# 5. Single diagnostic per corruption
# -----------------------------------------------------------------------------

def _orphan_child(tree: Node) -> None:
    tree.link_child(Node(Path.parse("a/z")))


def _unlisted_node(tree: Node) -> None:
    b = tree.get_child(0)[1]
    b.unlink_child(0)


def _swap_children(tree: Node) -> None:
    tree.link_child(tree.unlink_child(0))


def _hole(tree: Node) -> None:
    tree.link_child(None)


def _wrong_parent_path(tree: Node) -> None:
    tree.link_child(Node(Path.parse("x/y"), tree))


CORRUPTIONS: List[Callable[[Node], None]] = [
    _orphan_child, _unlisted_node, _swap_children, _hole, _wrong_parent_path,
]


@pytest.mark.parametrize("corrupt", CORRUPTIONS, ids=lambda f: f.__name__.strip("_"))
def test_each_corruption_emits_exactly_one_line(sample_tree, sink, corrupt) -> None:
    corrupt(sample_tree)
    assert is_valid(True, sample_tree, 5, sink) is False
    assert len(sink.lines) == 1


def test_unlisted_node_still_fails_count(sample_tree) -> None:
    # a/b/d keeps its parent pointer but is no longer reachable.
    _unlisted_node(sample_tree)
    assert check_tree(True, sample_tree, 5).violation.kind is ViolationKind.COUNT_MISMATCH

# -----------------------------------------------------------------------------
# 6. Purity and idempotence
# -----------------------------------------------------------------------------

def test_repeated_checks_agree_and_do_not_mutate(sample_tree, sink) -> None:
    _swap_children(sample_tree)
    before = _snapshot(sample_tree)

    first = is_valid(True, sample_tree, 5, sink)
    second = is_valid(True, sample_tree, 5, sink)

    assert first is second is False
    assert len(sink.lines) == 2
    assert sink.lines[0] == sink.lines[1]
    assert _snapshot(sample_tree) == before


def test_run_check_returns_result_and_emits(sample_tree, sink) -> None:
    result = run_check(True, sample_tree, 9, sink)
    assert not result.ok
    assert result.as_dict()["violation"]["invariant"] == "G4"
    assert sink.lines == [result.violation.message]

