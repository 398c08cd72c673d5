"""Join-all helper used by the fan-out/fan-in call sites."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class TaskResult(Generic[T]):
    """Outcome of one awaited unit of work: either a value or an error."""

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_settled(*awaitables: Awaitable[T]) -> list[TaskResult[T]]:
    """Await every ``awaitable`` concurrently and report each result.

    One failing task never cancels its siblings. Results keep the order of
    the arguments, independent of completion order. Exceptions that are not
    ``Exception`` subclasses (cancellation, interpreter exit) propagate.
    """

    raw: list[Any] = await asyncio.gather(*awaitables, return_exceptions=True)
    results: list[TaskResult[T]] = []
    for item in raw:
        if isinstance(item, Exception):
            results.append(TaskResult(error=item))
        elif isinstance(item, BaseException):
            raise item
        else:
            results.append(TaskResult(value=item))
    return results


__all__ = ["TaskResult", "gather_settled"]
