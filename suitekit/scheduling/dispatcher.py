"""Dispatcher collaborator: live view of dispatched work items.

The scheduler that actually runs tests publishes the work items it has
dispatched as an immutable, versioned snapshot. Readers take one snapshot
per decision and never see a partially updated tree.

The dispatcher also owns the declared-scope store. An empty entry is
materialised the first time a node's scope is read, and explicit overrides
are stored in it; every read and write goes through the single lock. Node
properties are read on every call, so reloading a suite is seen at once.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Iterator, Protocol

from suitekit.model.properties import PARALLEL_SCOPE
from suitekit.model.tree import SUITE, TEST_CASE_KINDS, VALID_KINDS, SuiteTree, TestNode
from suitekit.scheduling.scope import ParallelScope, first_declared_scope, parse_scope


@dataclass(frozen=True)
class WorkItem:
    """A dispatched unit of work and its resolved parallel scope."""

    full_name: str
    kind: str = SUITE
    scope: ParallelScope = ParallelScope.NONE
    children: tuple[WorkItem, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkItem:
        """Build a work item tree from a parsed snapshot manifest.

        Raises:
            ValueError: On a missing full name, unknown kind or scope.
        """
        if not isinstance(data, dict) or not data.get("full_name"):
            raise ValueError(f"Work item must be a mapping with a full_name: {data!r}")
        kind = data.get("kind", SUITE)
        if kind not in VALID_KINDS:
            raise ValueError(f"Unknown work item kind '{kind}' for '{data['full_name']}'")
        return cls(
            full_name=str(data["full_name"]),
            kind=kind,
            scope=parse_scope(data.get("scope", "None")),
            children=tuple(cls.from_dict(c) for c in data.get("children") or []),
        )

    @property
    def is_fixture_shaped(self) -> bool:
        return (
            self.kind == SUITE
            and bool(self.children)
            and self.children[0].kind in TEST_CASE_KINDS
        )


@dataclass(frozen=True)
class DispatchSnapshot:
    """Point-in-time copy of the dispatched work item tree."""

    version: int
    top_level: WorkItem

    def fixture_items(self) -> Iterator[WorkItem]:
        """Yield fixture-level work items in pre-order."""
        stack = [self.top_level]
        while stack:
            item = stack.pop()
            if item.is_fixture_shaped:
                yield item
                continue
            stack.extend(reversed(item.children))

    def find_fixture_item(self, full_name: str) -> WorkItem | None:
        """Find the fixture-level item that is, or directly holds, a node."""
        for item in self.fixture_items():
            if item.full_name == full_name:
                return item
            if any(child.full_name == full_name for child in item.children):
                return item
        return None


class DispatchView(Protocol):
    """What the eligibility resolver needs from the scheduler."""

    def snapshot(self) -> DispatchSnapshot | None: ...

    def declared_scope(self, node: TestNode) -> ParallelScope: ...


class LiveDispatcher:
    """In-process dispatcher state shared between scheduler and readers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._version = 0
        self._top_level: WorkItem | None = None
        # full name -> override values, None for an entry without an override
        self._declared: dict[str, list[str] | None] = {}

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def publish(self, top_level: WorkItem) -> int:
        """Replace the dispatched work item tree.

        Returns:
            The new snapshot version.
        """
        with self._lock:
            self._top_level = top_level
            self._version += 1
            return self._version

    def clear(self) -> None:
        """Drop the dispatched tree (the run has finished)."""
        with self._lock:
            self._top_level = None
            self._version += 1

    def snapshot(self) -> DispatchSnapshot | None:
        with self._lock:
            if self._top_level is None:
                return None
            return DispatchSnapshot(self._version, self._top_level)

    def declare(self, full_name: str, *values: str) -> None:
        """Override the declared scope values for a node."""
        with self._lock:
            self._declared[full_name] = list(values)

    def declared_scope(self, node: TestNode) -> ParallelScope:
        """Read a node's declared scope, materialising its entry if needed.

        An override set with declare() wins; otherwise the node's own
        properties are read. The lock covers the store access only; parsing
        happens outside it.
        """
        with self._lock:
            override = self._declared.setdefault(node.full_name, None)
            if override is not None:
                values = list(override)
            else:
                values = node.properties.get(PARALLEL_SCOPE)
        return first_declared_scope(values)

    def declared_entries(self) -> int:
        """Number of materialised declared-scope entries."""
        with self._lock:
            return len(self._declared)


def work_item_from_tree(
    tree: SuiteTree, node: TestNode, dispatcher: LiveDispatcher | None = None,
) -> WorkItem:
    """Build the work item tree a scheduler would dispatch for a subtree.

    Scopes are resolved from declared properties, through the dispatcher's
    store when one is given.
    """
    if dispatcher is not None:
        scope = dispatcher.declared_scope(node)
    else:
        scope = first_declared_scope(node.properties.get(PARALLEL_SCOPE))
    return WorkItem(
        full_name=node.full_name,
        kind=node.kind,
        scope=scope,
        children=tuple(
            work_item_from_tree(tree, child, dispatcher) for child in tree.children(node)
        ),
    )
