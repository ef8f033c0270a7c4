"""Tree model: suite and result trees with typed property bags."""

from suitekit.model.properties import PropertyBag, merge_along_path
from suitekit.model.tree import (
    ResultNode,
    ResultTree,
    StructuralIntegrityError,
    SuiteTree,
    TestNode,
)

__all__ = [
    "PropertyBag",
    "ResultNode",
    "ResultTree",
    "StructuralIntegrityError",
    "SuiteTree",
    "TestNode",
    "merge_along_path",
]
