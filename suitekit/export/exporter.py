"""Tab-delimited export of a suite tree with inherited properties.

Every test method of every fixture becomes one row; empty suites and
parameterized methods without cases produce none. Property values are
inherited down the tree: the effective bag of a node is its parent's
effective bag merged with the node's own properties.

Output format::

    FullName<TAB>TestType<TAB>Category<TAB>Description
    Suite.Fixture.Case<TAB>TestMethod<TAB>"Smoke
    UI"<TAB>"Opens the login page"

Value cells are always double-quoted. Keys listed in the joiner table are
joined with their separator (``Category`` with a newline); all other keys
have their values concatenated. Trailing delimiters are trimmed.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from suitekit.discovery.fixtures import locate_fixtures
from suitekit.model.properties import CATEGORY, PropertyBag, merge_along_path
from suitekit.model.tree import TEST_METHOD, SuiteTree, TestNode

DELIMITER = "\t"

DEFAULT_EXPORT_FILE = "ExportedTests.csv"

# Per-key value separators; keys not listed are concatenated
DEFAULT_JOINERS: dict[str, str] = {CATEGORY: "\n"}

HEADER_PREFIX = ("FullName", "TestType")


@dataclass
class ExportTable:
    """In-memory export: a header and one row per leaf."""

    header: list[str]
    rows: list[list[str]] = field(default_factory=list)

    def render(self) -> str:
        """Render the table as tab-delimited text, one line per row."""
        lines = [_render_line(self.header)]
        lines.extend(_render_line(row) for row in self.rows)
        return "\n".join(lines) + "\n"


class ExportSink(Protocol):
    """Destination the rendered export is written to."""

    def write(self, text: str) -> None: ...


class FileExportSink:
    """Writes the export to a UTF-8 file, creating parent directories."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8", newline="") as f:
            f.write(text)


def _render_line(cells: Sequence[str]) -> str:
    return DELIMITER.join(cells).rstrip(DELIMITER)


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def format_cell(
    key: str, bag: PropertyBag, joiners: Mapping[str, str] | None = None,
) -> str:
    """Format the values of one key as a quoted cell.

    Args:
        key: Property key.
        bag: Effective property bag of the leaf.
        joiners: Per-key separators (defaults to DEFAULT_JOINERS).

    Returns:
        The quoted cell; ``""`` when the key is absent.
    """
    if joiners is None:
        joiners = DEFAULT_JOINERS
    separator = joiners.get(key, "")
    return _quote(separator.join(bag.get(key)))


def _append_rows(
    tree: SuiteTree,
    fixture: TestNode,
    inherited: PropertyBag,
    keys: Sequence[str],
    joiners: Mapping[str, str],
    table: ExportTable,
) -> None:
    # Pre-order with an explicit stack; each entry carries its parent's bag
    stack: list[tuple[TestNode, PropertyBag]] = [(fixture, inherited)]
    while stack:
        node, parent_bag = stack.pop()
        bag = parent_bag.merge(node.properties)
        if node.kind == TEST_METHOD:
            row = [node.full_name, node.kind]
            row.extend(format_cell(key, bag, joiners) for key in keys)
            table.rows.append(row)
            continue
        for child in reversed(tree.children(node)):
            stack.append((child, bag))


def build_export_table(
    tree: SuiteTree,
    requested_keys: Sequence[str],
    joiners: Mapping[str, str] | None = None,
) -> ExportTable:
    """Flatten a suite tree into an export table.

    Args:
        tree: Suite definition tree.
        requested_keys: Property keys to export, one column each, in order.
        joiners: Per-key separators (defaults to DEFAULT_JOINERS).

    Returns:
        ExportTable with one row per leaf of every fixture, in pre-order.
    """
    if joiners is None:
        joiners = DEFAULT_JOINERS
    keys = list(requested_keys)
    table = ExportTable(header=[*HEADER_PREFIX, *keys])
    print(f"export: headers: {', '.join(table.header)}", file=sys.stderr)

    fixtures = locate_fixtures(tree)
    print(f"export: fixtures discovered: {len(fixtures)}", file=sys.stderr)

    for fixture in fixtures:
        inherited = merge_along_path(n.properties for n in tree.ancestors(fixture))
        _append_rows(tree, fixture, inherited, keys, joiners, table)
        print(f"export: fixture processed: {fixture.full_name}", file=sys.stderr)

    return table


def export(
    tree: SuiteTree,
    requested_keys: Sequence[str],
    joiners: Mapping[str, str] | None = None,
) -> str:
    """Flatten a suite tree into tab-delimited text."""
    return build_export_table(tree, requested_keys, joiners).render()


def export_tree_to_sink(
    tree: SuiteTree,
    sink: ExportSink,
    requested_keys: Sequence[str],
    joiners: Mapping[str, str] | None = None,
) -> ExportTable:
    """Build the export and hand the rendered text to a sink."""
    table = build_export_table(tree, requested_keys, joiners)
    sink.write(table.render())
    return table


def export_tree_to_file(
    tree: SuiteTree,
    path: str | Path = DEFAULT_EXPORT_FILE,
    requested_keys: Sequence[str] = (),
    joiners: Mapping[str, str] | None = None,
) -> ExportTable:
    """Export a suite tree into a UTF-8 tab-delimited file.

    Args:
        tree: Suite definition tree.
        path: Destination file (default: ExportedTests.csv).
        requested_keys: Property keys to export.
        joiners: Per-key separators (defaults to DEFAULT_JOINERS).

    Returns:
        The exported table.
    """
    table = export_tree_to_sink(tree, FileExportSink(path), requested_keys, joiners)
    print(f"export: saved at: {path}", file=sys.stderr)
    return table
