"""Decides whether a test may run concurrently with its siblings.

A test is parallel when any of these hold:

- its enclosing context declares a scope other than None. The context is
  the parent, and when the parent is a parameterized method also the
  fixture above it;
- the fixture declares ``All|Children``;
- the live dispatch snapshot holds the fixture and every work item
  dispatched directly under it has a non-None scope;
- the test itself declares a scope other than None.

Declared scopes are read through the dispatcher so the lazily populated
store is only touched under its lock. Each context takes a single snapshot;
no result is cached between calls.
"""

from __future__ import annotations

from suitekit.model.tree import PARAMETERIZED_METHOD, BaseTree, StructuralIntegrityError, TestNode
from suitekit.scheduling.dispatcher import DispatchView
from suitekit.scheduling.scope import ALL_WITH_CHILDREN, has_parallel_scope


def enclosing_contexts(tree: BaseTree, test: TestNode) -> list[TestNode]:
    """Return the nodes whose scope governs a test, innermost first.

    Raises:
        StructuralIntegrityError: If the test has no enclosing fixture.
    """
    parent = tree.parent(test)
    if parent is None:
        raise StructuralIntegrityError(
            f"Test '{test.full_name}' has no enclosing fixture"
        )
    contexts = [parent]
    if parent.kind == PARAMETERIZED_METHOD:
        fixture = tree.parent(parent)
        if fixture is None:
            raise StructuralIntegrityError(
                f"Parameterized method '{parent.full_name}' has no enclosing fixture"
            )
        contexts.append(fixture)
    return contexts


def live_children_parallel(view: DispatchView, context: TestNode) -> bool:
    """Check the dispatched work items under a context's fixture item."""
    snapshot = view.snapshot()
    if snapshot is None:
        return False
    item = snapshot.find_fixture_item(context.full_name)
    if item is None:
        return False
    return all(has_parallel_scope(child.scope) for child in item.children)


def context_is_parallel(view: DispatchView, context: TestNode) -> bool:
    scope = view.declared_scope(context)
    if scope == ALL_WITH_CHILDREN:
        return True
    if has_parallel_scope(scope):
        return True
    return live_children_parallel(view, context)


def is_parallel(tree: BaseTree, test: TestNode, view: DispatchView) -> bool:
    """Decide whether a test may run in parallel with its siblings.

    Args:
        tree: Tree the test belongs to.
        test: Test node to decide for.
        view: Dispatcher collaborator providing declared scopes and the
            live dispatch snapshot.

    Returns:
        True if the test is parallel-safe.

    Raises:
        StructuralIntegrityError: If the test has no enclosing fixture.
    """
    for context in enclosing_contexts(tree, test):
        if context_is_parallel(view, context):
            return True
    return has_parallel_scope(view.declared_scope(test))
