"""Test execution engine: task groups, runners, tree walker, aggregation."""

from canopy.engine.aggregator import count, format_report, format_summary
from canopy.engine.api import render_report, run, run_async
from canopy.engine.case_runner import CaseContext, CaseRunner
from canopy.engine.futures import Completion, FutureLike, await_status
from canopy.engine.host import HostNode, PackageNode
from canopy.engine.models import (
    SKIP,
    CaseResult,
    Counts,
    Marker,
    NodeKind,
    RunReport,
    Status,
    SuiteConfig,
    SuiteResult,
)
from canopy.engine.suite_runner import SuiteRunner
from canopy.engine.task_group import TaskGroup
from canopy.engine.tree_walker import TreeWalker, classify, prune_unfocused

__all__ = [
    "SKIP",
    "CaseContext",
    "CaseResult",
    "CaseRunner",
    "Completion",
    "Counts",
    "FutureLike",
    "HostNode",
    "Marker",
    "NodeKind",
    "PackageNode",
    "RunReport",
    "Status",
    "SuiteConfig",
    "SuiteResult",
    "SuiteRunner",
    "TaskGroup",
    "TreeWalker",
    "await_status",
    "classify",
    "count",
    "format_report",
    "format_summary",
    "prune_unfocused",
    "render_report",
    "run",
    "run_async",
]
