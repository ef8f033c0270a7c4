"""Parallel scope resolution against the live dispatcher."""

from suitekit.scheduling.dispatcher import (
    DispatchSnapshot,
    DispatchView,
    LiveDispatcher,
    WorkItem,
    work_item_from_tree,
)
from suitekit.scheduling.eligibility import is_parallel
from suitekit.scheduling.scope import ParallelScope, parse_scope

__all__ = [
    "DispatchSnapshot",
    "DispatchView",
    "LiveDispatcher",
    "ParallelScope",
    "WorkItem",
    "is_parallel",
    "parse_scope",
    "work_item_from_tree",
]
