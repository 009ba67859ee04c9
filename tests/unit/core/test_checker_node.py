from __future__ import annotations

"""
Unit tests for the per-node invariant predicate.

Each test breaks exactly one local invariant and asserts on the violation
kind reported by check_node, plus the single diagnostic line emitted by
node_is_valid.
"""

import pytest

from dtcheck.core.checker import check_node, node_is_valid
from dtcheck.domain.node import Node
from dtcheck.domain.path import Path
from dtcheck.domain.violations import ViolationKind

from dt_fakes import FakePath, OvercountingNode


def _kind(node):
    violation = check_node(node)
    return violation.kind if violation else None


# -----------------------------------------------------------------------------
# 1. Well-formed nodes
# -----------------------------------------------------------------------------

def test_every_node_of_sample_tree_is_valid(sample_tree, sink) -> None:
    stack = [sample_tree]
    while stack:
        node = stack.pop()
        assert node_is_valid(node, sink)
        stack.extend(node.get_child(i)[1] for i in range(node.num_children))
    assert sink.lines == []


def test_single_root_is_valid(add_node) -> None:
    assert check_node(add_node("a")) is None

# -----------------------------------------------------------------------------
# 2. Presence, path and depth (I1-I4)
# -----------------------------------------------------------------------------

def test_absent_node(sink) -> None:
    assert check_node(None).kind is ViolationKind.NULL_NODE
    assert node_is_valid(None, sink) is False
    assert len(sink.lines) == 1


def test_node_without_path() -> None:
    assert _kind(Node(None)) is ViolationKind.MISSING_PATH


def test_node_with_zero_depth_path() -> None:
    assert _kind(Node(FakePath("a", depth=0))) is ViolationKind.MISSING_PATH


def test_depth_one_node_with_parent(add_node) -> None:
    root = add_node("a")
    stray = Node(Path.parse("b"), root)
    root.link_child(stray)
    assert _kind(stray) is ViolationKind.DEPTH_ONE_HAS_PARENT


def test_depth_one_path_rendering_with_separator() -> None:
    assert _kind(Node(FakePath("a/b", depth=1))) is ViolationKind.DEPTH_ONE_PATH_HAS_SEPARATOR


def test_deep_node_without_parent() -> None:
    assert _kind(Node(Path.parse("a/b"))) is ViolationKind.MISSING_PARENT

# -----------------------------------------------------------------------------
# 3. Parent path (I5)
# -----------------------------------------------------------------------------

def test_parent_path_not_a_prefix(add_node) -> None:
    root = add_node("a")
    wrong = add_node("x/b", root)
    assert _kind(wrong) is ViolationKind.PARENT_PATH_MISMATCH


def test_parent_path_skips_a_level(add_node) -> None:
    root = add_node("a")
    grandchild = add_node("a/b/c", root)
    assert _kind(grandchild) is ViolationKind.PARENT_PATH_MISMATCH


def test_parent_deeper_than_expected(add_node) -> None:
    # Shares one component with 'a/b' but is not its direct prefix.
    root = add_node("a")
    x = add_node("a/x", root)
    y = add_node("a/x/y", x)
    node = add_node("a/b", y)
    assert _kind(node) is ViolationKind.PARENT_PATH_MISMATCH


def test_parent_without_path(add_node) -> None:
    parent = Node(None)
    child = add_node("a/b", parent)
    assert _kind(child) is ViolationKind.MISSING_PATH

# -----------------------------------------------------------------------------
# 4. Reciprocity (I6)
# -----------------------------------------------------------------------------

def test_child_points_to_another_parent(add_node) -> None:
    root = add_node("a")
    orphan = Node(Path.parse("a/b"))
    root.link_child(orphan)
    assert _kind(root) is ViolationKind.CHILD_PARENT_MISMATCH


def test_parent_does_not_list_node(add_node) -> None:
    root = add_node("a")
    unlisted = Node(Path.parse("a/b"), root)
    assert _kind(unlisted) is ViolationKind.PARENT_MISSING_CHILD


def test_hole_in_child_list(add_node) -> None:
    root = add_node("a")
    add_node("a/b", root)
    root.link_child(None)
    assert _kind(root) is ViolationKind.NULL_NODE


def test_child_without_path(add_node) -> None:
    root = add_node("a")
    root.link_child(Node(None, root))
    assert _kind(root) is ViolationKind.MISSING_PATH

# -----------------------------------------------------------------------------
# 5. Sibling ordering and uniqueness (I7, I8)
# -----------------------------------------------------------------------------

def test_children_out_of_order(add_node) -> None:
    root = add_node("a")
    add_node("a/c", root)
    add_node("a/b", root)
    assert _kind(root) is ViolationKind.CHILDREN_OUT_OF_ORDER


def test_duplicate_children_caught_by_ordering_first(add_node) -> None:
    root = add_node("a")
    add_node("a/b", root)
    add_node("a/b", root)
    assert _kind(root) is ViolationKind.CHILDREN_OUT_OF_ORDER


def test_duplicates_caught_despite_broken_comparator(add_node) -> None:
    root = add_node("a")
    for name in ("a/x", "a/y", "a/x"):
        root.link_child(Node(FakePath(name), root))
    assert _kind(root) is ViolationKind.DUPLICATE_CHILDREN

# -----------------------------------------------------------------------------
# 6. Child index integrity (I9)
# -----------------------------------------------------------------------------

def test_child_count_exceeds_retrievable_children() -> None:
    root = OvercountingNode(Path.parse("a"))
    root.link_child(Node(Path.parse("a/b"), root))
    assert _kind(root) is ViolationKind.CHILD_INDEX_MISMATCH

# -----------------------------------------------------------------------------
# 7. Reporting
# -----------------------------------------------------------------------------

def test_diagnostic_names_offending_paths(add_node, sink) -> None:
    root = add_node("a")
    add_node("a/c", root)
    add_node("a/b", root)

    assert node_is_valid(root, sink) is False
    assert len(sink.lines) == 1
    assert "a/c" in sink.lines[0] and "a/b" in sink.lines[0]


def test_default_sink_is_stderr(capsys) -> None:
    assert node_is_valid(None) is False
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.count("\n") == 1


@pytest.mark.parametrize("pathname", ["a", "a/b"])
def test_check_node_does_not_mutate(add_node, pathname) -> None:
    root = add_node("a")
    child = add_node("a/b", root)
    node = root if pathname == "a" else child
    before = (node.path, node.parent, node.num_children)
    check_node(node)
    assert (node.path, node.parent, node.num_children) == before
