"""Fixture discovery and tree manifest loading."""

from suitekit.discovery.fixtures import (
    is_fixture_shaped,
    locate_failed_fixtures,
    locate_fixtures,
)
from suitekit.discovery.loader import load_manifest, load_result_tree, load_suite_tree

__all__ = [
    "is_fixture_shaped",
    "load_manifest",
    "load_result_tree",
    "load_suite_tree",
    "locate_failed_fixtures",
    "locate_fixtures",
]
