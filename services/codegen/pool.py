"""Bounded FIFO pool of pre-validated short codes.

Flow Diagram — take() / refill()
================================
::
    take()                                refill()
    ┌─────────────┐                       ┌─────────────┐
    │ acquire     │                       │ refill task │──running──► return it
    │ take lock   │                       │ running?    │
    └──────┬──────┘                       └──────┬──────┘
           ▼                                  NO │
    ┌─────────────┐                              ▼
    │ pool empty? │──NO──► popleft()      ┌─────────────┐
    └──────┬──────┘                       │ read store  │
       YES │                              │ snapshot    │
           ▼                              └──────┬──────┘
    ┌─────────────┐                              ▼
    │ snapshot +  │                       ┌─────────────┐
    │ oracle, not │                       │ propose and │
    │ queued      │                       │ append until│
    └─────────────┘                       │ POOL_SIZE   │
                                          └─────────────┘

Key Behaviours
===============
- Codes are served in generation order.
- An empty pool never blocks a caller: one code is generated on the spot and
  handed out without passing through the queue.
- Concurrent refill triggers collapse into the one running task. A take that
  lands while a refill runs is covered by that refill's loop, which keeps
  going until the pool is full again.
- The snapshot is read once per refill cycle. Codes persisted after that read
  are not seen by the cycle.
"""

import asyncio
import logging
from collections import deque

from prometheus_client import Counter, Gauge

from services.codegen.oracle import UniquenessOracle
from services.codegen.snapshot import CodeSnapshotReader

__all__ = ["CodePool", "CODES_SERVED_TOTAL", "POOL_SIZE_GAUGE"]

CODES_SERVED_TOTAL = Counter(
    "codegen_codes_served_total",
    "Short codes handed out",
    ["source"],
)
POOL_SIZE_GAUGE = Gauge(
    "codegen_pool_size",
    "Short codes currently queued in the pool",
)


class CodePool:
    def __init__(
        self,
        oracle: UniquenessOracle,
        snapshot_reader: CodeSnapshotReader,
        capacity: int,
        logger: logging.Logger,
    ):
        assert isinstance(capacity, int) and capacity > 0, f"capacity must be a positive integer, got {capacity!r}"
        self._oracle = oracle
        self._reader = snapshot_reader
        self._capacity = capacity
        self._logger = logger
        self._queue: deque[str] = deque()
        self._take_lock = asyncio.Lock()
        self._refill_task: asyncio.Task | None = None

    @property
    def capacity(self) -> int:
        return self._capacity

    def size(self) -> int:
        return len(self._queue)

    def snapshot(self) -> list[str]:
        """Queued codes in serving order."""
        return list(self._queue)

    @property
    def refilling(self) -> bool:
        return self._refill_task is not None and not self._refill_task.done()

    async def take(self) -> str:
        """Pop the oldest queued code, or generate one directly if the pool is empty.

        Raises:
            SnapshotReadError: the pool was empty and the fail-closed snapshot read failed.
        """
        async with self._take_lock:
            if self._queue:
                code = self._queue.popleft()
                POOL_SIZE_GAUGE.set(len(self._queue))
                CODES_SERVED_TOTAL.labels(source="pool").inc()
                self._logger.info(f"Served: {code}. Remaining: {len(self._queue)}")
                return code

            persisted = await self._reader.read()
            code = self._oracle.propose(persisted, self._queue)
            CODES_SERVED_TOTAL.labels(source="fallback").inc()
            self._logger.info(f"Pool empty, generated on demand: {code}")
            return code

    def refill(self) -> asyncio.Task:
        """Start a refill unless one is already running; return the running task.

        Awaiting the returned task yields the number of codes added, or raises
        SnapshotReadError under the fail-closed policy.
        """
        if self.refilling:
            return self._refill_task
        task = asyncio.create_task(self._refill())
        task.add_done_callback(self._log_refill_outcome)
        self._refill_task = task
        return task

    async def _refill(self) -> int:
        if len(self._queue) >= self._capacity:
            return 0

        persisted = await self._reader.read()
        added = 0
        # No awaits below: appends cannot interleave with take().
        while len(self._queue) < self._capacity:
            code = self._oracle.propose(persisted, self._queue)
            self._queue.append(code)
            added += 1
            self._logger.info(f"Generated: {code}. Pool size: {len(self._queue)}")

        POOL_SIZE_GAUGE.set(len(self._queue))
        return added

    def _log_refill_outcome(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self._logger.warning("Pool refill cancelled")
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error(f"Error refilling pool: {exc}")

    async def close(self) -> None:
        """Cancel an in-flight refill, if any."""
        if self.refilling:
            self._refill_task.cancel()
            try:
                await self._refill_task
            except asyncio.CancelledError:
                pass
            except Exception as exc:
                self._logger.error(f"Refill failed during shutdown: {exc}")
