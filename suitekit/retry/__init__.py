"""Retry query generation for failed test runs."""

from suitekit.retry.query_builder import (
    build_retry_query,
    failed_cases,
    format_clause,
    write_retry_query_to_file,
)

__all__ = [
    "build_retry_query",
    "failed_cases",
    "format_clause",
    "write_retry_query_to_file",
]
