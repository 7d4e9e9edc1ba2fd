"""
RequestDeduplicator - single-flight table for cache-miss reads.

Without it, two concurrent requests for the same uncached listing both go
upstream. With it, the second caller awaits the task started by the first.
"""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")


class RequestDeduplicator:
    """
    Shares one in-flight task per key between concurrent callers.

    Usage:
        dedup = RequestDeduplicator()
        page = await dedup.dedupe("roles?page=1", lambda: load_roles(1))
    """

    def __init__(self, debug: bool = False):
        self._in_flight: dict[str, asyncio.Task[Any]] = {}
        self._debug = debug
        self._stats = DeduplicatorStats()

    async def dedupe(
        self,
        key: str,
        request_fn: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Run ``request_fn`` unless a call for ``key`` is already in flight.

        Every waiter receives the same result or the same exception.
        """
        task = self._in_flight.get(key)
        if task is not None:
            self._stats.deduplicated += 1
            self._log(f"DEDUPE: {key[:50]}")
        else:
            self._stats.total += 1
            self._log(f"NEW: {key[:50]}")
            task = asyncio.ensure_future(request_fn())
            self._in_flight[key] = task
            task.add_done_callback(lambda _t, k=key: self._in_flight.pop(k, None))

        # shield so one cancelled waiter does not cancel the shared task
        return await asyncio.shield(task)

    async def cancel_all(self) -> int:
        """Cancel all in-flight requests."""
        tasks = list(self._in_flight.values())
        self._in_flight.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            self._log(f"CANCEL_ALL: {len(tasks)} requests cancelled")
        return len(tasks)

    def get_in_flight_count(self) -> int:
        return len(self._in_flight)

    def get_stats(self) -> "DeduplicatorStats":
        self._stats.in_flight = len(self._in_flight)
        return self._stats

    def _log(self, message: str) -> None:
        if self._debug:
            logger.debug(f"[Deduplicator] {message}")


class DeduplicatorStats:
    """Statistics for request deduplication."""

    def __init__(self):
        self.total: int = 0  # Upstream calls started
        self.deduplicated: int = 0  # Calls that joined an in-flight task
        self.in_flight: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_requests": self.total,
            "deduplicated": self.deduplicated,
            "in_flight": self.in_flight,
        }
