"""Execution of one suite: validation, case fan-out, join, after hook."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

import structlog

from canopy.config.models import EngineConfig
from canopy.core.errors import StructuralError
from canopy.engine.case_runner import CaseContext, CaseRunner, run_hook
from canopy.engine.host import is_node
from canopy.engine.models import (
    AFTER,
    RESERVED_KEYS,
    CaseResult,
    SuiteConfig,
    SuiteResult,
)
from canopy.engine.task_group import TaskGroup, Work

log = structlog.get_logger(__name__)


class SuiteRunner:
    """Runs every case of a suite through a private TaskGroup.

    Nested mappings inside a suite are child nodes; they are left to the
    tree walker and ignored here.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self.case_runner = CaseRunner(
            after_each_discards_result=self.config.after_each_discards_result,
        )

    async def run(
        self,
        suite: Mapping[str, Any],
        name: str,
        *,
        concurrent: bool,
        bindings: Mapping[str, Any] | None = None,
    ) -> SuiteResult | str:
        """Run a suite.

        Args:
            suite: Mapping of case names to callables plus reserved keys
            name: Suite path, used in labels, logs and error messages
            concurrent: Ambient mode; the suite's own _async wins when set
            bindings: Names exposed to cases through CaseContext

        Returns:
            The suite's results, or an error message if its shape is invalid.
        """
        try:
            config = SuiteConfig.from_mapping(suite, name)
        except StructuralError as e:
            log.info("suite_invalid", suite=name, error=e.error_name)
            return e.message

        effective = concurrent if config.run_async is None else config.run_async
        view = MappingProxyType(dict(bindings or {}))
        result = SuiteResult(focused=config.focus)
        group = TaskGroup(
            name,
            concurrent=effective,
            max_concurrency=self.config.max_concurrency,
            watch_initial_delay_sec=self.config.watch_initial_delay_sec,
            watch_interval_sec=self.config.watch_interval_sec,
        )

        log.info("suite_started", suite=name, concurrent=effective, skip=config.skip)
        start = time.perf_counter()
        for key, value in suite.items():
            if key in RESERVED_KEYS or is_node(value):
                continue
            if config.skip:
                result.entries[key] = CaseResult.skipped()
            elif not callable(value):
                result.entries[key] = StructuralError.case_not_callable(name, key, value).message
            else:
                context = CaseContext(suite=name, case=key, bindings=view)
                work = self._case_work(key, value, config, context, result)
                await group.spawn(f"{name}/{key}", work)

        await group.wait()
        result.duration_seconds = time.perf_counter() - start

        if config.after is not None:
            context = CaseContext(suite=name, case=AFTER, bindings=view)
            reason = await run_hook(config.after, context)
            if reason is not None:
                log.debug("hook_failed", suite=name, hook=AFTER)
                result.entries[AFTER] = CaseResult.failed(reason)

        log.info("suite_finished", suite=name, duration_seconds=result.duration_seconds)
        return result

    def _case_work(
        self,
        key: str,
        case: Callable[..., Any],
        config: SuiteConfig,
        context: CaseContext,
        result: SuiteResult,
    ) -> Work:
        async def work() -> None:
            result.entries.update(await self.case_runner.run(key, case, config, context))

        return work
