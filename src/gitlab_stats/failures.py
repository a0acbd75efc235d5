"""Shared log of requests that exhausted their retries."""

from __future__ import annotations

import asyncio

from .models import FailureRecord


class FailureLog:
    """Append-only list of failure records, safe to share between tasks."""

    def __init__(self) -> None:
        self._records: list[FailureRecord] = []
        self._lock = asyncio.Lock()

    async def add(self, record: FailureRecord) -> None:
        async with self._lock:
            self._records.append(record)

    def snapshot(self) -> list[FailureRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
