"""Execution of a single case, wrapped in its suite's per-case hooks."""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import structlog

from canopy.engine.futures import (
    Completion,
    await_status,
    cancelled_by_caller,
    describe_error,
    is_pending_result,
)
from canopy.engine.models import (
    AFTER_EACH,
    BEFORE_EACH,
    SKIP,
    CaseResult,
    Status,
    SuiteConfig,
)

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CaseContext:
    """Passed to cases and hooks that take a positional parameter.

    bindings carries the caller-supplied names; nothing is injected into
    the case's globals.
    """

    suite: str
    case: str
    bindings: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


def accepts_context(fn: Callable[..., Any]) -> bool:
    """True if fn has a required positional parameter to receive a CaseContext."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    return any(
        param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD)
        and param.default is param.empty
        for param in signature.parameters.values()
    )


def call(fn: Callable[..., Any], context: CaseContext) -> Any:
    return fn(context) if accepts_context(fn) else fn()


async def run_hook(hook: Callable[..., Any], context: CaseContext) -> str | None:
    """Invoke a lifecycle hook. Returns the failure reason, or None on success."""
    try:
        value = call(hook, context)
        if is_pending_result(value):
            completion, outcome = await await_status(value)
            if completion is Completion.REJECTED:
                return str(outcome)
    except asyncio.CancelledError:
        if cancelled_by_caller():
            raise
        return "cancelled"
    except Exception as exc:
        return describe_error(exc)
    return None


class CaseRunner:
    """Runs one case between its suite's beforeEach and afterEach hooks.

    A run returns the entries to merge into the suite result: the case's
    own result under its name, and hook failures under the hook's key.
    """

    def __init__(self, *, after_each_discards_result: bool = False) -> None:
        self.after_each_discards_result = after_each_discards_result

    async def run(
        self,
        name: str,
        case: Callable[..., Any],
        suite: SuiteConfig,
        context: CaseContext,
    ) -> dict[str, CaseResult]:
        if suite.before_each is not None:
            reason = await run_hook(suite.before_each, context)
            if reason is not None:
                log.debug("hook_failed", suite=context.suite, hook=BEFORE_EACH, case=name)
                return {BEFORE_EACH: CaseResult.failed(reason)}

        result = await self._invoke(case, context)
        entries = {name: result}
        if result.status is Status.FAILED:
            log.debug("case_failed", suite=context.suite, case=name, reason=result.reason)

        if suite.after_each is not None:
            reason = await run_hook(suite.after_each, context)
            if reason is not None:
                log.debug("hook_failed", suite=context.suite, hook=AFTER_EACH, case=name)
                entries[AFTER_EACH] = CaseResult.failed(reason)
                if self.after_each_discards_result and result.status is not Status.SKIPPED:
                    del entries[name]

        return entries

    async def _invoke(self, case: Callable[..., Any], context: CaseContext) -> CaseResult:
        start = time.perf_counter()
        try:
            value = call(case, context)
            if is_pending_result(value):
                completion, value = await await_status(value)
                if completion is Completion.REJECTED:
                    return CaseResult.failed(str(value), time.perf_counter() - start)
        except asyncio.CancelledError:
            # A case raising CancelledError fails; cancelling this run propagates
            if cancelled_by_caller():
                raise
            return CaseResult.failed("cancelled", time.perf_counter() - start)
        except Exception as exc:
            return CaseResult.failed(describe_error(exc), time.perf_counter() - start)

        if value is SKIP:
            return CaseResult.skipped()
        return CaseResult.passed(time.perf_counter() - start)
