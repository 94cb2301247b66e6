"""Future-like values returned by cases.

A case may hand back a value that completes later instead of finishing
synchronously. The engine never owns such a value; it only subscribes to
it and awaits its completion status.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from collections.abc import Callable, Generator
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class FutureLike(Protocol):
    """Capability set: subscribe-to-completion plus await-status.

    asyncio.Future and asyncio.Task satisfy it; so does any user type
    exposing both operations.
    """

    def add_done_callback(self, fn: Callable[[Any], object], /) -> Any: ...

    def __await__(self) -> Generator[Any, None, Any]: ...


class Completion(StrEnum):
    RESOLVED = "resolved"
    REJECTED = "rejected"


def is_pending_result(value: object) -> bool:
    """True if value completes later and must be awaited."""
    return (
        isinstance(value, FutureLike)
        or isinstance(value, concurrent.futures.Future)
        or inspect.isawaitable(value)
    )


def cancelled_by_caller() -> bool:
    """True if the running task itself is being cancelled, not just something it awaited."""
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


def describe_error(exc: BaseException) -> str:
    """Failure reason for an exception: its message, or its type name if empty."""
    message = str(exc)
    return message if message else type(exc).__name__


async def await_status(value: Any) -> tuple[Completion, Any]:
    """Await a pending value and report how it completed.

    Returns:
        (RESOLVED, result) or (REJECTED, reason string)
    """
    if isinstance(value, concurrent.futures.Future):
        value = asyncio.wrap_future(value)
    try:
        result = await value
    except asyncio.CancelledError:
        # Only a cancelled case future is a rejection; our own cancellation propagates
        if cancelled_by_caller():
            raise
        return Completion.REJECTED, "cancelled"
    except Exception as exc:
        return Completion.REJECTED, describe_error(exc)
    return Completion.RESOLVED, result
