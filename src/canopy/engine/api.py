"""Public entry points: run a target tree and report on it."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from typing import Any

import structlog

from canopy.config.loader import load_config
from canopy.config.models import CanopyConfig
from canopy.core.formatting import pluralize
from canopy.core.logging import configure_logging, run_scope
from canopy.core.progress import print_block, status
from canopy.engine.aggregator import count, format_report, format_summary
from canopy.engine.host import HostNode
from canopy.engine.models import SKIP, RunReport
from canopy.engine.tree_walker import TreeWalker, prune_unfocused

log = structlog.get_logger(__name__)


def _root_name(target: object) -> str:
    if isinstance(target, HostNode):
        return target.name
    if isinstance(target, Mapping):
        return ""
    return getattr(target, "__name__", "")


async def run_async(
    target: object,
    bindings: Mapping[str, Any] | None = None,
    *,
    concurrent: bool | None = None,
    silent: bool | None = None,
    config: CanopyConfig | None = None,
) -> RunReport:
    """Run every suite under target on the current event loop.

    Args:
        target: A nested mapping of suites/containers, a HostNode, or a single
                case callable. Anything else is skipped without running tests.
        bindings: Names handed to every case through CaseContext.bindings
        concurrent: Default scheduling mode (config.engine.concurrent if None)
        silent: Skip console rendering (config.report.silent if None)
        config: Resolved configuration; loaded from the environment if None

    Returns:
        RunReport with the focus-pruned result tree and its totals.
    """
    if config is None:
        config = load_config()
    if not structlog.is_configured():
        configure_logging(config=config.logging)
    if concurrent is None:
        concurrent = config.engine.concurrent
    if silent is None:
        silent = config.report.silent

    with run_scope() as run_id:
        start = time.perf_counter()
        if not (isinstance(target, Mapping) or isinstance(target, HostNode) or callable(target)):
            log.warning("unrecognized_target", target_type=type(target).__name__)
            report = RunReport(tree=SKIP, counts=count(SKIP), run_id=run_id)
        else:
            log.info("run_started", concurrent=concurrent)
            walker = TreeWalker(config.engine, bindings)
            tree = await walker.walk(target, _root_name(target), concurrent=concurrent)
            if walker.focus_requested:
                tree = prune_unfocused(tree)
            report = RunReport(
                tree=tree,
                counts=count(tree),
                duration_seconds=time.perf_counter() - start,
                focus_requested=walker.focus_requested,
                run_id=run_id,
            )
            log.info(
                "run_finished",
                passed=report.passed,
                failed=report.failed,
                skipped=report.skipped,
                focus=report.focus_requested,
            )
        if not silent:
            render_report(report)
        return report


def run(
    target: object,
    bindings: Mapping[str, Any] | None = None,
    *,
    concurrent: bool | None = None,
    silent: bool | None = None,
    config: CanopyConfig | None = None,
) -> RunReport:
    """Synchronous wrapper around run_async(); starts its own event loop."""
    return asyncio.run(
        run_async(target, bindings, concurrent=concurrent, silent=silent, config=config)
    )


def render_report(report: RunReport) -> None:
    """Print the result tree, a one-line summary, and a verdict."""
    text = format_report(report.tree)
    if text:
        print_block(text)
    print_block(format_summary(report.counts, report.duration_seconds))
    if report.failed:
        log.warning("tests_failed", failed=report.failed)
        status(f"{pluralize(report.failed, 'test')} failed", style="warning")
    else:
        status("All tests passed", style="success")
