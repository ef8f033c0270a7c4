"""Unit tests for the tree model."""

from __future__ import annotations

import pytest

from suitekit.model.tree import (
    FAILED,
    PARAMETERIZED_METHOD,
    PASSED,
    SUITE,
    TEST_METHOD,
    ResultTree,
    SuiteTree,
)


def _suite_manifest() -> dict:
    return {
        "name": "Regression",
        "kind": SUITE,
        "properties": {"Category": "Smoke"},
        "children": [
            {
                "name": "Login",
                "kind": SUITE,
                "children": [
                    {"name": "Opens", "kind": TEST_METHOD},
                    {
                        "name": "Rejects",
                        "kind": PARAMETERIZED_METHOD,
                        "children": [
                            {"name": "Rejects(1)", "kind": TEST_METHOD},
                            {"name": "Rejects(2)", "kind": TEST_METHOD},
                        ],
                    },
                ],
            },
        ],
    }


class TestSuiteTreeConstruction:
    """Tests for SuiteTree.from_manifest()."""

    def test_nodes_in_pre_order(self):
        """Nodes are stored in pre-order with the root at index 0."""
        tree = SuiteTree.from_manifest(_suite_manifest())
        names = [n.full_name for n in tree.nodes]
        assert names == [
            "Regression",
            "Regression.Login",
            "Regression.Login.Opens",
            "Regression.Login.Rejects",
            "Regression.Login.Rejects(1)",
            "Regression.Login.Rejects(2)",
        ]
        assert tree.root.index == 0

    def test_parameterized_cases_named_after_fixture(self):
        """Cases of a parameterized method take the fixture's full name."""
        tree = SuiteTree.from_manifest(_suite_manifest())
        case = tree.find("Regression.Login.Rejects(1)")
        assert case is not None
        assert tree.parent(case).full_name == "Regression.Login.Rejects"

    def test_parent_and_children_indices(self):
        """Parent indices and child lists are consistent."""
        tree = SuiteTree.from_manifest(_suite_manifest())
        for node in tree.nodes:
            for child_index in node.children:
                assert tree.node(child_index).parent == node.index

    def test_explicit_full_name_kept(self):
        """An explicit full_name overrides the derived one."""
        tree = SuiteTree.from_manifest({
            "name": "Root",
            "children": [{"name": "A", "full_name": "Custom.A", "kind": TEST_METHOD}],
        })
        assert tree.find("Custom.A") is not None

    def test_properties_coerced_to_string_lists(self):
        """Scalar property values become one-element string lists."""
        tree = SuiteTree.from_manifest(_suite_manifest())
        assert tree.root.properties.get("Category") == ["Smoke"]

    def test_empty_manifest(self):
        """An empty manifest gives an empty tree."""
        tree = SuiteTree.from_manifest({})
        assert len(tree) == 0
        assert tree.root is None
        assert list(tree.walk()) == []

    def test_duplicate_full_name_rejected(self):
        """Duplicate full names raise ValueError."""
        manifest = {
            "name": "Root",
            "children": [
                {"name": "A", "kind": TEST_METHOD},
                {"name": "A", "kind": TEST_METHOD},
            ],
        }
        with pytest.raises(ValueError, match="Duplicate full name"):
            SuiteTree.from_manifest(manifest)

    def test_unknown_kind_rejected(self):
        """Unknown kinds raise ValueError."""
        with pytest.raises(ValueError, match="Unknown node kind"):
            SuiteTree.from_manifest({"name": "Root", "kind": "Theory"})

    def test_parameterized_method_with_suite_child_rejected(self):
        """A parameterized method may only contain test methods."""
        manifest = {
            "name": "Root",
            "children": [{
                "name": "M",
                "kind": PARAMETERIZED_METHOD,
                "children": [{"name": "Nested", "kind": SUITE}],
            }],
        }
        with pytest.raises(ValueError, match="may only contain test cases"):
            SuiteTree.from_manifest(manifest)


class TestNavigation:
    """Tests for tree navigation helpers."""

    def test_ancestors_root_first(self):
        """ancestors() lists the path from the root down to the parent."""
        tree = SuiteTree.from_manifest(_suite_manifest())
        case = tree.find("Regression.Login.Rejects(2)")
        assert [a.name for a in tree.ancestors(case)] == ["Regression", "Login", "Rejects"]

    def test_leaves(self):
        """leaves() returns childless nodes in pre-order."""
        tree = SuiteTree.from_manifest(_suite_manifest())
        assert [n.name for n in tree.leaves()] == ["Opens", "Rejects(1)", "Rejects(2)"]

    def test_first_child(self):
        """first_child() returns None for leaves."""
        tree = SuiteTree.from_manifest(_suite_manifest())
        login = tree.find("Regression.Login")
        assert tree.first_child(login).name == "Opens"
        assert tree.first_child(tree.find("Regression.Login.Opens")) is None

    def test_find_missing(self):
        """find() returns None for unknown names."""
        tree = SuiteTree.from_manifest(_suite_manifest())
        assert tree.find("Nope") is None


class TestResultTree:
    """Tests for ResultTree.from_manifest()."""

    def test_fail_counts_computed(self):
        """Failure counts are summed bottom-up when not given."""
        manifest = {
            "name": "Run",
            "outcome": FAILED,
            "children": [{
                "name": "Fixture",
                "outcome": FAILED,
                "children": [
                    {"name": "A", "kind": TEST_METHOD, "outcome": FAILED},
                    {"name": "B", "kind": TEST_METHOD, "outcome": PASSED},
                    {
                        "name": "M",
                        "kind": PARAMETERIZED_METHOD,
                        "outcome": FAILED,
                        "children": [
                            {"name": "M(1)", "kind": TEST_METHOD, "outcome": FAILED},
                            {"name": "M(2)", "kind": TEST_METHOD, "outcome": FAILED},
                        ],
                    },
                ],
            }],
        }
        tree = ResultTree.from_manifest(manifest)
        assert tree.root.fail_count == 3
        assert tree.find("Run.Fixture.M").fail_count == 2
        assert tree.find("Run.Fixture.B").fail_count == 0

    def test_explicit_fail_count_kept(self):
        """An explicit fail_count is not recomputed."""
        tree = ResultTree.from_manifest({
            "name": "Run",
            "outcome": FAILED,
            "fail_count": 7,
            "children": [{"name": "A", "kind": TEST_METHOD, "outcome": FAILED}],
        })
        assert tree.root.fail_count == 7

    def test_default_outcome_passed(self):
        """Nodes without an outcome default to Passed."""
        tree = ResultTree.from_manifest({"name": "Run"})
        assert tree.root.outcome == PASSED
        assert tree.root.fail_count == 0

    def test_unknown_outcome_rejected(self):
        """Unknown outcomes raise ValueError."""
        with pytest.raises(ValueError, match="Unknown outcome"):
            ResultTree.from_manifest({"name": "Run", "outcome": "Exploded"})
