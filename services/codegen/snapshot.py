"""Read-only snapshot of every short code already persisted.

The oracle takes one snapshot per refill cycle instead of querying per candidate.
A record written after the snapshot was taken is invisible to that cycle; that race
is accepted under the single-instance assumption.
"""

import logging
from collections.abc import Callable

from prometheus_client import Counter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.enums import SnapshotFailurePolicy
from app.exceptions import SnapshotReadError
from app.models import URL

__all__ = ["CodeSnapshotReader", "SNAPSHOT_READ_FAILURES_TOTAL"]

SNAPSHOT_READ_FAILURES_TOTAL = Counter(
    "codegen_snapshot_read_failures_total",
    "Persisted-code snapshot reads that failed",
    ["policy"],
)


class CodeSnapshotReader:
    """Loads the set of persisted short codes, applying the configured failure policy."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        policy: SnapshotFailurePolicy,
        logger: logging.Logger,
    ):
        self._session_factory = session_factory
        self._policy = policy
        self._logger = logger

    @property
    def policy(self) -> SnapshotFailurePolicy:
        return self._policy

    async def read(self) -> frozenset[str]:
        """Return every persisted short code.

        Raises:
            SnapshotReadError: the read failed and the policy is fail-closed.
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(URL.short_code))
                return frozenset(result.scalars().all())
        except Exception as exc:
            SNAPSHOT_READ_FAILURES_TOTAL.labels(policy=self._policy).inc()
            if self._policy is SnapshotFailurePolicy.FAIL_OPEN:
                self._logger.error(
                    f"Snapshot read failed, treating store as empty (duplicate codes possible): {exc}"
                )
                return frozenset()
            self._logger.error(f"Snapshot read failed, refusing to generate: {exc}")
            raise SnapshotReadError("persisted short codes could not be read") from exc
