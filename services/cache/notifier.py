"""Fire-and-forget delivery of cache-hit bookkeeping.

A cache hit must not wait on the database, so hit counts are handed to a bounded
queue and written by one background worker. Delivery is best effort: a full
queue drops the hit, a failed write is logged and not retried, and anything
still queued at shutdown or crash is lost.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from prometheus_client import Counter

__all__ = ["HitNotifier", "HIT_NOTIFICATIONS_DROPPED_TOTAL", "HIT_NOTIFICATIONS_FAILED_TOTAL"]

HIT_NOTIFICATIONS_DROPPED_TOTAL = Counter(
    "cache_hit_notifications_dropped_total",
    "Hit notifications discarded because the outbound queue was full",
)
HIT_NOTIFICATIONS_FAILED_TOTAL = Counter(
    "cache_hit_notifications_failed_total",
    "Hit notifications whose bookkeeping write raised",
)


class HitNotifier:
    def __init__(
        self,
        sink: Callable[[str], Awaitable[None]],
        maxsize: int,
        logger: logging.Logger,
    ):
        self._sink = sink
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self._logger = logger
        self._worker: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run())

    def notify(self, short_code: str) -> bool:
        """Queue one hit without waiting. Returns False if it was dropped."""
        try:
            self._queue.put_nowait(short_code)
        except asyncio.QueueFull:
            HIT_NOTIFICATIONS_DROPPED_TOTAL.inc()
            self._logger.warning(f"Hit notification queue full, dropped hit for {short_code}")
            return False
        return True

    async def _run(self) -> None:
        while True:
            short_code = await self._queue.get()
            try:
                await self._sink(short_code)
            except Exception as exc:
                HIT_NOTIFICATIONS_FAILED_TOTAL.inc()
                self._logger.error(f"Error updating clicks for cached URL {short_code}: {exc}")
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued hit has been attempted.

        Raises:
            RuntimeError: the worker is not running, so the queue would never empty.
        """
        if self._worker is None or self._worker.done():
            raise RuntimeError("hit notifier worker is not running")
        await self._queue.join()

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
