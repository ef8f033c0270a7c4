"""Fixture discovery over suite and result trees.

A fixture is the lowest-level suite that directly contains test cases. The
decision is made from the first child only: once a suite's first child is a
test method or parameterized method, the whole suite is taken as a fixture
and its remaining children are not inspected. Suites mixing sub-suites and
test cases at the same level are therefore classified by whichever comes
first.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from suitekit.model.tree import TEST_CASE_KINDS, BaseTree, ResultNode, ResultTree, TestNode

N = TypeVar("N", bound=TestNode)


def is_fixture_shaped(tree: BaseTree[N], node: N) -> bool:
    """Check whether a suite node's first child is a test case."""
    if not node.is_suite:
        return False
    first = tree.first_child(node)
    return first is not None and first.kind in TEST_CASE_KINDS


def _locate(
    tree: BaseTree[N],
    node: N,
    accept: Callable[[N], bool],
    found: list[N],
) -> None:
    stack = [node]
    while stack:
        current = stack.pop()
        if accept(current) and is_fixture_shaped(tree, current):
            found.append(current)
            continue
        stack.extend(reversed(tree.children(current)))


def locate_fixtures(tree: BaseTree[N], start: N | None = None) -> list[N]:
    """Find fixture nodes in pre-order.

    Args:
        tree: Suite or result tree.
        start: Node to search from (defaults to the root).

    Returns:
        Non-overlapping fixture nodes. Empty for an empty tree.
    """
    node = start if start is not None else tree.root
    if node is None:
        return []
    found: list[N] = []
    _locate(tree, node, lambda _n: True, found)
    return found


def locate_failed_fixtures(tree: ResultTree) -> list[ResultNode]:
    """Find fixtures that contain at least one failed test case.

    A suite that has failures but whose first child is another suite is
    descended into, so failures are attributed to the nearest enclosing
    fixture rather than to an ancestor suite.
    """
    root = tree.root
    if root is None:
        return []
    found: list[ResultNode] = []
    _locate(tree, root, lambda n: n.fail_count > 0, found)
    return found
