from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

1. Puts the 'src' directory on sys.path so tests run without installation.
2. Provides tree builders and a collecting diagnostic sink.
"""

import os
import sys
from typing import Callable, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

# Test doubles shared across test packages (dt_fakes)
_TESTS_PATH = os.path.abspath(os.path.dirname(__file__))
if _TESTS_PATH not in sys.path:
    sys.path.insert(0, _TESTS_PATH)

from dtcheck.core.reporter import CollectingSink  # noqa: E402
from dtcheck.domain.node import Node  # noqa: E402
from dtcheck.domain.path import Path  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def sink() -> CollectingSink:
    """In-memory diagnostic sink."""
    return CollectingSink()


@pytest.fixture
def add_node() -> Callable[..., Node]:
    """
    Return a helper creating a node and appending it to its parent.

    The child list keeps call order, so tests control sibling ordering
    (and can break it on purpose).
    """
    def _add(pathname: str, parent: Optional[Node] = None) -> Node:
        node = Node(Path.parse(pathname), parent)
        if parent is not None:
            parent.link_child(node)
        return node

    return _add


@pytest.fixture
def sample_tree(add_node):
    """
    Well-formed tree of five nodes.

    Structure:
    a
      a/b
        a/b/d
      a/c
        a/c/e
    """
    root = add_node("a")
    b = add_node("a/b", root)
    add_node("a/b/d", b)
    c = add_node("a/c", root)
    add_node("a/c/e", c)
    return root
