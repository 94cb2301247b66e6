"""Canopy - concurrent runner for trees of test suites."""

from canopy.engine import (
    SKIP,
    CaseContext,
    CaseResult,
    Counts,
    HostNode,
    Marker,
    PackageNode,
    RunReport,
    Status,
    SuiteResult,
    count,
    format_report,
    run,
    run_async,
)

__version__ = "0.1.0"

__all__ = [
    "SKIP",
    "CaseContext",
    "CaseResult",
    "Counts",
    "HostNode",
    "Marker",
    "PackageNode",
    "RunReport",
    "Status",
    "SuiteResult",
    "count",
    "format_report",
    "run",
    "run_async",
]
