"""Command-line entry point for suite tree tooling.

Subcommands:
    export       flatten a suite tree into a tab-delimited file
    retry-query  build a retry selection query from a run result tree
    is-parallel  decide whether a test may run alongside its siblings
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from suitekit.config import DEFAULT_CONFIG_FILE, ToolConfig
from suitekit.discovery.loader import load_manifest, load_result_tree, load_suite_tree
from suitekit.export.exporter import export_tree_to_file
from suitekit.model.tree import StructuralIntegrityError
from suitekit.retry.query_builder import build_retry_query, write_retry_query_to_file
from suitekit.scheduling.dispatcher import LiveDispatcher, WorkItem
from suitekit.scheduling.eligibility import is_parallel


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Suite tree tooling: property export, retry queries, parallel scope"
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=DEFAULT_CONFIG_FILE,
        help="Path to the .suitekit_config JSON file (default: .suitekit_config)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # export subcommand
    export_parser = subparsers.add_parser(
        "export",
        help="Export every test with its inherited properties",
    )
    export_parser.add_argument(
        "--suite",
        required=True,
        type=Path,
        help="Path to the suite tree manifest (JSON or YAML)",
    )
    export_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Export destination (default: export_file from config)",
    )
    export_parser.add_argument(
        "--property",
        dest="properties",
        action="append",
        default=None,
        help="Property key to export as a column (repeatable)",
    )

    # retry-query subcommand
    retry_parser = subparsers.add_parser(
        "retry-query",
        help="Build a selection query for the failed tests of a run",
    )
    retry_parser.add_argument(
        "--results",
        required=True,
        type=Path,
        help="Path to the run result tree manifest (JSON or YAML)",
    )
    retry_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="File to write the query to (default: retry_query_file from config)",
    )
    retry_parser.add_argument(
        "--escape-quotes",
        action="store_true",
        default=None,
        help="Backslash-escape quotes around parameterized test names",
    )

    # is-parallel subcommand
    parallel_parser = subparsers.add_parser(
        "is-parallel",
        help="Check whether a test may run in parallel with its siblings",
    )
    parallel_parser.add_argument(
        "--suite",
        required=True,
        type=Path,
        help="Path to the suite tree manifest (JSON or YAML)",
    )
    parallel_parser.add_argument(
        "--test",
        required=True,
        help="Full name of the test",
    )
    parallel_parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Path to a dispatch snapshot manifest (JSON or YAML)",
    )
    return parser.parse_args(argv)


def cmd_export(args: argparse.Namespace, config: ToolConfig) -> int:
    """Handle the export subcommand."""
    try:
        tree = load_suite_tree(args.suite)
    except FileNotFoundError:
        print(f"Error: Suite manifest not found: {args.suite}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output = args.output or config.export_file
    properties = args.properties or config.export_properties
    table = export_tree_to_file(tree, output, properties, config.joiners)
    print(f"Exported {len(table.rows)} tests to {output}")
    return 0


def cmd_retry_query(args: argparse.Namespace, config: ToolConfig) -> int:
    """Handle the retry-query subcommand."""
    try:
        tree = load_result_tree(args.results)
    except FileNotFoundError:
        print(f"Error: Result manifest not found: {args.results}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    escape = config.escape_retry_quotes if args.escape_quotes is None else args.escape_quotes
    output = args.output or config.retry_query_file
    if output is not None:
        query = write_retry_query_to_file(tree, output, escape)
    else:
        query = build_retry_query(tree, escape)
    print(query)
    return 0


def cmd_is_parallel(args: argparse.Namespace, config: ToolConfig) -> int:
    """Handle the is-parallel subcommand.

    Exits 0 when the test is parallel and 1 when it is not (or on error),
    so the command can gate shell scripts.
    """
    try:
        tree = load_suite_tree(args.suite)
        dispatcher = LiveDispatcher()
        if args.snapshot is not None:
            snapshot = load_manifest(args.snapshot)
            top_level = snapshot.get("top_level", snapshot)
            if top_level:
                dispatcher.publish(WorkItem.from_dict(top_level))
    except FileNotFoundError as e:
        print(f"Error: Manifest not found: {e.filename}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    test = tree.find(args.test)
    if test is None:
        print(f"Error: Test not found in suite: {args.test}", file=sys.stderr)
        return 1

    try:
        parallel = is_parallel(tree, test, dispatcher)
    except StructuralIntegrityError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{test.full_name}: {'parallel' if parallel else 'serial'}")
    return 0 if parallel else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return 1

    config = ToolConfig(args.config_file)

    if args.command == "export":
        return cmd_export(args, config)
    elif args.command == "retry-query":
        return cmd_retry_query(args, config)
    elif args.command == "is-parallel":
        return cmd_is_parallel(args, config)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
