"""Suite and result tree data structures.

Trees are stored as an arena: every node lives in a flat list and refers to
its parent and children by index. Root is always index 0. Trees are built
once from a manifest (see :mod:`suitekit.discovery.loader`) and treated as
read-only afterwards, so they can be shared between threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, TypeVar

from suitekit.model.properties import PropertyBag

# Node kinds
SUITE = "Suite"
PARAMETERIZED_METHOD = "ParameterizedMethod"
TEST_METHOD = "TestMethod"

VALID_KINDS = frozenset({SUITE, PARAMETERIZED_METHOD, TEST_METHOD})

# Kinds that mark their parent suite as a fixture
TEST_CASE_KINDS = frozenset({PARAMETERIZED_METHOD, TEST_METHOD})

# Result outcomes
PASSED = "Passed"
FAILED = "Failed"
SKIPPED = "Skipped"
INCONCLUSIVE = "Inconclusive"

VALID_OUTCOMES = frozenset({PASSED, FAILED, SKIPPED, INCONCLUSIVE})


class StructuralIntegrityError(Exception):
    """Raised when a tree does not have the shape its invariants promise."""


@dataclass
class TestNode:
    """A single node of a suite definition tree."""

    index: int
    name: str
    full_name: str
    kind: str
    properties: PropertyBag = field(default_factory=PropertyBag)
    parent: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def is_suite(self) -> bool:
        return self.kind == SUITE

    @property
    def has_children(self) -> bool:
        return bool(self.children)


@dataclass
class ResultNode(TestNode):
    """A node of a run result tree."""

    outcome: str = PASSED
    fail_count: int = 0


N = TypeVar("N", bound=TestNode)


class BaseTree(Generic[N]):
    """Arena-backed tree with navigation helpers."""

    # Whether a repeated full name is a manifest error
    unique_names = True

    def __init__(self) -> None:
        self.nodes: list[N] = []
        self._by_full_name: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def root(self) -> N | None:
        return self.nodes[0] if self.nodes else None

    def node(self, index: int) -> N:
        return self.nodes[index]

    def children(self, node: N) -> list[N]:
        return [self.nodes[i] for i in node.children]

    def first_child(self, node: N) -> N | None:
        if not node.children:
            return None
        return self.nodes[node.children[0]]

    def parent(self, node: N) -> N | None:
        if node.parent is None:
            return None
        return self.nodes[node.parent]

    def ancestors(self, node: N) -> list[N]:
        """Return the ancestors of a node, root first."""
        chain: list[N] = []
        current = self.parent(node)
        while current is not None:
            chain.append(current)
            current = self.parent(current)
        chain.reverse()
        return chain

    def find(self, full_name: str) -> N | None:
        index = self._by_full_name.get(full_name)
        if index is None:
            return None
        return self.nodes[index]

    def walk(self, node: N | None = None) -> Iterator[N]:
        """Iterate over a subtree in pre-order."""
        if node is None:
            node = self.root
            if node is None:
                return
        stack = [node.index]
        while stack:
            current = self.nodes[stack.pop()]
            yield current
            stack.extend(reversed(current.children))

    def leaves(self, node: N | None = None) -> list[N]:
        return [n for n in self.walk(node) if not n.children]

    def _add(self, node: N) -> N:
        if self.unique_names and node.full_name in self._by_full_name:
            raise ValueError(f"Duplicate full name in tree: {node.full_name}")
        self.nodes.append(node)
        self._by_full_name.setdefault(node.full_name, node.index)
        if node.parent is not None:
            self.nodes[node.parent].children.append(node.index)
        return node

    def _build(self, data: dict[str, Any]) -> None:
        """Populate the arena from a nested manifest dict (pre-order)."""
        # (data, parent index) pairs; children are pushed reversed to keep order
        stack: list[tuple[dict[str, Any], int | None]] = [(data, None)]
        while stack:
            entry, parent_index = stack.pop()
            if not isinstance(entry, dict):
                raise ValueError(f"Tree node must be a mapping, got: {entry!r}")
            name = str(entry.get("name", ""))
            kind = entry.get("kind", SUITE)
            if kind not in VALID_KINDS:
                raise ValueError(f"Unknown node kind '{kind}' for node '{name}'")

            parent = self.nodes[parent_index] if parent_index is not None else None
            if parent is not None and parent.kind == PARAMETERIZED_METHOD and kind != TEST_METHOD:
                raise ValueError(
                    f"Parameterized method '{parent.full_name}' may only "
                    f"contain test cases, found {kind} '{name}'"
                )
            full_name = entry.get("full_name") or self._derive_full_name(name, parent)

            node = self._make_node(
                entry,
                index=len(self.nodes),
                name=name,
                full_name=str(full_name),
                kind=kind,
                properties=PropertyBag.from_mapping(entry.get("properties")),
                parent=parent_index,
            )
            self._add(node)

            children = entry.get("children") or []
            for child in reversed(children):
                stack.append((child, node.index))

    def _derive_full_name(self, name: str, parent: N | None) -> str:
        if parent is None:
            return name
        # Test cases are named after the fixture, not the parameterized method
        if parent.kind == PARAMETERIZED_METHOD and parent.parent is not None:
            parent = self.nodes[parent.parent]
        if not parent.full_name:
            return name
        return f"{parent.full_name}.{name}"

    def _make_node(self, entry: dict[str, Any], **fields: Any) -> N:
        raise NotImplementedError


class SuiteTree(BaseTree[TestNode]):
    """Suite definition tree: suites, parameterized methods and test cases."""

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any] | None) -> SuiteTree:
        """Construct a SuiteTree from a parsed manifest.

        Args:
            manifest: Nested dict with name, kind, properties and children
                keys. An empty or missing manifest gives an empty tree.

        Returns:
            A fully constructed SuiteTree.

        Raises:
            ValueError: If the manifest has unknown kinds, duplicate full
                names or a parameterized method containing non-test nodes.
        """
        tree = cls()
        if manifest:
            tree._build(manifest)
        return tree

    def _make_node(self, entry: dict[str, Any], **fields: Any) -> TestNode:
        return TestNode(**fields)


class ResultTree(BaseTree[ResultNode]):
    """Result tree of a completed run, with outcomes and failure counts.

    Runners report identically parameterized cases under the same full
    name, so repeated names are accepted; find() returns the first.
    """

    unique_names = False

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any] | None) -> ResultTree:
        """Construct a ResultTree from a parsed result manifest.

        Each node may carry ``outcome`` (default Passed) and ``fail_count``.
        Missing failure counts are computed bottom-up: a leaf counts itself
        when Failed, a parent sums its children.

        Raises:
            ValueError: On the same conditions as SuiteTree.from_manifest,
                or on an unknown outcome.
        """
        tree = cls()
        if manifest:
            tree._build(manifest)
            tree._fill_fail_counts()
        return tree

    def _make_node(self, entry: dict[str, Any], **fields: Any) -> ResultNode:
        outcome = entry.get("outcome", PASSED)
        if outcome not in VALID_OUTCOMES:
            raise ValueError(
                f"Unknown outcome '{outcome}' for node '{fields['full_name']}'"
            )
        node = ResultNode(**fields, outcome=outcome)
        if entry.get("fail_count") is not None:
            node.fail_count = int(entry["fail_count"])
        else:
            node.fail_count = -1  # computed after the whole tree is built
        return node

    def _fill_fail_counts(self) -> None:
        # Children always have higher indices than their parent
        for node in reversed(self.nodes):
            if node.fail_count >= 0:
                continue
            if node.children:
                node.fail_count = sum(
                    self.nodes[i].fail_count for i in node.children
                )
            else:
                node.fail_count = 1 if node.outcome == FAILED else 0
