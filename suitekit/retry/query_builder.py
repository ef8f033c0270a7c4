"""Retry query generation from a run result tree.

Builds a test selection query that re-targets exactly the failed test cases
of a completed run, for example::

    test==Suite.Login.Opens | test=="Suite.Search.Finds(3)"

Names containing ``(`` belong to parameterized cases and are quoted so the
runner matches them literally.
"""

from __future__ import annotations

import sys
from pathlib import Path

from suitekit.discovery.fixtures import locate_failed_fixtures
from suitekit.model.tree import (
    FAILED,
    PARAMETERIZED_METHOD,
    PASSED,
    TEST_METHOD,
    ResultNode,
    ResultTree,
)

SEPARATOR = " | "


def format_clause(full_name: str, escape_quotes: bool = False) -> str:
    """Format a single selection clause for a test.

    Args:
        full_name: Full name of the test case.
        escape_quotes: Backslash-escape the quotes around parameterized
            names, for queries passed through a shell argument.

    Returns:
        ``test==<full_name>``, with the name quoted when it contains ``(``.
    """
    if "(" in full_name:
        quote = '\\"' if escape_quotes else '"'
        full_name = f"{quote}{full_name}{quote}"
    return f"test=={full_name}"


def failed_cases(tree: ResultTree, fixture: ResultNode) -> list[ResultNode]:
    """Collect the failed test cases directly under a fixture.

    Parameterized methods are unwrapped one level and only their failed
    cases are kept. Nested suites are not inspected here.
    """
    failed: list[ResultNode] = []
    for child in tree.children(fixture):
        if child.kind == PARAMETERIZED_METHOD:
            failed.extend(c for c in tree.children(child) if c.outcome == FAILED)
        elif child.kind == TEST_METHOD and child.outcome == FAILED:
            failed.append(child)
    return failed


def build_retry_query(tree: ResultTree, escape_quotes: bool = False) -> str:
    """Build a selection query for the failed tests of a run.

    Args:
        tree: Result tree of the completed run.
        escape_quotes: See format_clause.

    Returns:
        Clauses joined by `` | ``, one per failed case, in pre-order with
        duplicates within a fixture removed. Empty when the run passed or
        nothing can be retried.
    """
    root = tree.root
    if root is None or root.outcome == PASSED:
        return ""

    fixtures = locate_failed_fixtures(tree)
    print(
        f"retry: failed fixtures: {', '.join(f.full_name for f in fixtures) or '(none)'}",
        file=sys.stderr,
    )

    clauses: list[str] = []
    for fixture in fixtures:
        # dict keeps first-seen order
        unique = dict.fromkeys(
            format_clause(case.full_name, escape_quotes)
            for case in failed_cases(tree, fixture)
        )
        clauses.extend(unique)

    return SEPARATOR.join(clauses)


def write_retry_query_to_file(
    tree: ResultTree, path: str | Path, escape_quotes: bool = False,
) -> str:
    """Build the retry query and write it to a file.

    Nothing is written when there is nothing to retry.

    Args:
        tree: Result tree of the completed run.
        path: Destination file.
        escape_quotes: See format_clause.

    Returns:
        The query that was built (possibly empty).
    """
    query = build_retry_query(tree, escape_quotes)
    if not query:
        print("retry: nothing to retry, query file not written", file=sys.stderr)
        return query

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(query, encoding="utf-8")
    print(f"retry: query written to {path}", file=sys.stderr)
    return query
