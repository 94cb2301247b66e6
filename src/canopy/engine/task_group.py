"""Join counter for concurrently or sequentially executed units of work.

A TaskGroup is private to one suite or one tree level, so it supports a
single waiter: the party that spawned the work. Exactly one release happens
per transition of the outstanding count to zero.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections import Counter
from collections.abc import Awaitable, Callable

import structlog

from canopy.core.errors import EngineError
from canopy.engine.futures import cancelled_by_caller

log = structlog.get_logger(__name__)

Work = Callable[[], Awaitable[object]]


class TaskGroup:
    """Spawn labelled work, track what is outstanding, wait for all of it.

    In concurrent mode each unit becomes an asyncio task on the running
    loop (optionally gated by a semaphore); in sequential mode it is awaited
    inline, so spawn returns only after the unit finished. Failures of a unit
    are logged and never propagate to the spawner.
    """

    def __init__(
        self,
        name: str,
        *,
        concurrent: bool,
        max_concurrency: int | None = None,
        watch_initial_delay_sec: float = 1.0,
        watch_interval_sec: float = 5.0,
    ) -> None:
        self.name = name
        self.concurrent = concurrent
        self._outstanding = 0
        self._in_flight: Counter[str] = Counter()
        self._waiter: asyncio.Future[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._semaphore = (
            asyncio.Semaphore(max_concurrency) if concurrent and max_concurrency else None
        )
        self._watch_initial_delay_sec = watch_initial_delay_sec
        self._watch_interval_sec = watch_interval_sec

    @property
    def outstanding(self) -> int:
        return self._outstanding

    @property
    def in_flight(self) -> list[str]:
        """Labels of units not yet done, sorted for stable diagnostics."""
        return sorted(self._in_flight)

    async def spawn(self, label: str, work: Work) -> None:
        """Register and start one unit of work.

        done(label) is called exactly once for it, whether it succeeds or fails.
        """
        self._outstanding += 1
        self._in_flight[label] += 1
        if self.concurrent:
            task = asyncio.create_task(self._run(label, work), name=f"{self.name}:{label}")
            # Keep a strong reference until the task finishes
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            await self._run(label, work)

    async def _run(self, label: str, work: Work) -> None:
        try:
            if self._semaphore is not None:
                async with self._semaphore:
                    await work()
            else:
                await work()
        except asyncio.CancelledError:
            if cancelled_by_caller():
                raise
            log.warning("task_failed", group=self.name, label=label, exc_info=True)
        except Exception:
            log.warning("task_failed", group=self.name, label=label, exc_info=True)
        finally:
            self.done(label)

    def done(self, label: str) -> None:
        """Mark one unit finished; release the waiter when nothing is outstanding."""
        if self._outstanding == 0:
            raise EngineError.unbalanced_done(self.name, label)
        self._outstanding -= 1
        self._in_flight[label] -= 1
        if self._in_flight[label] <= 0:
            del self._in_flight[label]

        if self._outstanding == 0 and self._waiter is not None:
            waiter, self._waiter = self._waiter, None
            if not waiter.done():
                waiter.set_result(None)

    async def wait(self) -> None:
        """Suspend until every spawned unit is done. Returns at once if none are."""
        if self._outstanding == 0:
            self._in_flight.clear()
            return
        if self._waiter is not None:
            raise EngineError.waiter_already_set(self.name)

        self._waiter = asyncio.get_running_loop().create_future()
        waiter = self._waiter
        watcher = asyncio.create_task(self._watch(), name=f"{self.name}:watch")
        try:
            await waiter
        finally:
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher
            self._waiter = None
            self._in_flight.clear()

    async def _watch(self) -> None:
        """Periodically log what is still outstanding. Advisory only."""
        delay = self._watch_initial_delay_sec
        while True:
            await asyncio.sleep(delay)
            log.info(
                "still_waiting",
                group=self.name,
                outstanding=self._outstanding,
                labels=self.in_flight,
            )
            delay = self._watch_interval_sec
