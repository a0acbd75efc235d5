"""Batched fan-out of independent async work."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class UnitResult(Generic[T, R]):
    """Settled outcome of one unit of work: a value or the exception it raised."""

    item: T
    value: R | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _settle(item: T, unit: Callable[[T], Awaitable[R]]) -> UnitResult[T, R]:
    try:
        return UnitResult(item=item, value=await unit(item))
    except Exception as e:
        return UnitResult(item=item, error=e)


async def run_bounded(
    items: Sequence[T],
    batch_size: int,
    unit: Callable[[T], Awaitable[R]],
    *,
    abort_on_error: bool = False,
) -> list[UnitResult[T, R]]:
    """Run ``unit`` over ``items`` in sequential batches of concurrent calls.

    No call of batch N+1 starts before every call of batch N has settled, so
    at most ``batch_size`` units are in flight. A failing unit never cancels
    its siblings; its exception is returned in its :class:`UnitResult`.
    With ``abort_on_error`` the first error of a batch is raised once that
    whole batch has settled, and later batches are not started.
    Results are in submission order.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    results: list[UnitResult[T, R]] = []
    for start in range(0, len(items), batch_size):
        batch = items[start:start + batch_size]
        settled = await asyncio.gather(*(_settle(item, unit) for item in batch))
        if abort_on_error:
            for result in settled:
                if result.error is not None:
                    raise result.error
        results.extend(settled)
    return results
