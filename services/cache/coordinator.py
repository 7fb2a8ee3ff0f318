"""LFU admission and eviction over a frequency tracker and a TTL cache frontend.

Flow Diagram — lookup()
=======================
::
    ┌─────────────┐
    │ frontend    │──MISS──► None
    │ get(code)   │
    └──────┬──────┘
       HIT │
           ▼
    ┌─────────────┐
    │ tracker     │──untracked──► delete orphan entry, None (caller re-admits)
    │ bump(+1)    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ queue hit   │  fire-and-forget
    │ notification│
    └──────┬──────┘
           ▼
        target

Flow Diagram — admit()  (whole sequence under one lock)
=======================================================
::
    ┌─────────────┐
    │ code already│──YES──────────────────┐
    │ tracked?    │                       │
    └──────┬──────┘                       │
        NO │                              │
           ▼                              │
    ┌─────────────┐                       │
    │ size >= cap?│──NO───────────────────┤
    └──────┬──────┘                       │
       YES │                              │
           ▼                              │
    ┌─────────────┐                       │
    │ prune       │                       │
    │ expired,    │                       │
    │ pop_minimum │                       │
    │ + delete    │                       │
    │ until < cap │                       │
    └──────┬──────┘                       │
           ▼                              ▼
    ┌──────────────────────────────────────┐
    │ frontend set(code, target, ttl)      │
    │ tracker set_score(code, 1)           │
    └──────────────────────────────────────┘

Key Behaviours
===============
- Capacity is only enforced on admission; there is no background eviction.
- A hit never creates a tracker member; it adds exactly 1 to an existing one.
- Admission always restarts the score at 1, even for a code seen before.
- Eviction victims are the lowest score, ties broken by smallest code.
- Admit and remove share one lock, so concurrent admissions cannot overshoot
  the capacity. Any overshoot left by an older writer is trimmed by the next
  admission's eviction loop.
- Backing-store failures surface as CacheUnavailableError; there is no
  degrade-to-database path.
"""

import asyncio
import logging

import redis.asyncio as redis
from prometheus_client import Counter
from redis.exceptions import RedisError

from app.config import Settings
from app.enums import CacheBackend
from app.exceptions import CacheUnavailableError
from services.cache.frontend import CacheFrontend, MemoryCacheFrontend, RedisCacheFrontend
from services.cache.notifier import HitNotifier
from services.cache.tracker import FrequencyTracker, MemoryFrequencyTracker, RedisFrequencyTracker

__all__ = [
    "CacheCoordinator",
    "build_cache_coordinator",
    "CACHE_HITS_TOTAL",
    "CACHE_MISSES_TOTAL",
    "CACHE_EVICTIONS_TOTAL",
]

CACHE_HITS_TOTAL = Counter(
    "url_shortener_cache_hits_total",
    "Total cache hits for URL lookups",
)
CACHE_MISSES_TOTAL = Counter(
    "url_shortener_cache_misses_total",
    "Total cache misses for URL lookups",
)
CACHE_EVICTIONS_TOTAL = Counter(
    "url_shortener_cache_evictions_total",
    "Entries evicted from the cache",
    ["reason"],
)


class CacheCoordinator:
    def __init__(
        self,
        tracker: FrequencyTracker,
        frontend: CacheFrontend,
        capacity: int,
        ttl_seconds: int,
        logger: logging.Logger,
        notifier: HitNotifier | None = None,
    ):
        assert isinstance(capacity, int) and capacity > 0, f"capacity must be a positive integer, got {capacity!r}"
        assert isinstance(ttl_seconds, int) and ttl_seconds > 0, f"ttl_seconds must be positive, got {ttl_seconds!r}"
        self._tracker = tracker
        self._frontend = frontend
        self._capacity = capacity
        self._ttl_seconds = ttl_seconds
        self._logger = logger
        self._notifier = notifier
        self._lock = asyncio.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def tracker(self) -> FrequencyTracker:
        return self._tracker

    @property
    def frontend(self) -> CacheFrontend:
        return self._frontend

    async def lookup(self, short_code: str) -> str | None:
        try:
            target = await self._frontend.get(short_code)
            if target is None:
                CACHE_MISSES_TOTAL.inc()
                self._logger.info(f"[CACHE] Miss for {short_code}")
                return None

            score = await self._tracker.bump(short_code, 1)
            if score is None:
                # An admit may have paired the entry since the bump.
                async with self._lock:
                    if await self._tracker.score_of(short_code) is None:
                        await self._frontend.delete(short_code)
        except RedisError as exc:
            raise CacheUnavailableError(f"cache lookup failed for {short_code}") from exc

        if score is None:
            CACHE_MISSES_TOTAL.inc()
            self._logger.warning(f"[CACHE] Untracked entry for {short_code}, treating as miss")
            return None

        CACHE_HITS_TOTAL.inc()
        self._logger.info(f"[CACHE] Hit for {short_code} (frequency {score})")
        if self._notifier is not None:
            self._notifier.notify(short_code)
        return target

    async def admit(self, short_code: str, target: str, ttl_seconds: int | None = None) -> list[str]:
        """Cache ``target`` under ``short_code`` with score 1; return the evicted codes."""
        ttl = ttl_seconds if ttl_seconds is not None else self._ttl_seconds
        evicted: list[str] = []
        try:
            async with self._lock:
                if await self._tracker.score_of(short_code) is None:
                    if await self._tracker.size() >= self._capacity:
                        await self._prune_expired()
                    while await self._tracker.size() >= self._capacity:
                        victim = await self._tracker.pop_minimum()
                        if victim is None:
                            break
                        victim_code, victim_score = victim
                        await self._frontend.delete(victim_code)
                        evicted.append(victim_code)
                        CACHE_EVICTIONS_TOTAL.labels(reason="capacity").inc()
                        self._logger.info(
                            f"[CACHE] Limit reached. Evicted {victim_code} "
                            f"(Least Frequently Used, frequency {victim_score})"
                        )

                await self._frontend.set(short_code, target, ttl)
                await self._tracker.set_score(short_code, 1)
        except RedisError as exc:
            raise CacheUnavailableError(f"cache admission failed for {short_code}") from exc

        self._logger.debug(f"[CACHE] Admitted {short_code}")
        return evicted

    async def remove(self, short_code: str) -> None:
        try:
            async with self._lock:
                await self._frontend.delete(short_code)
                await self._tracker.remove(short_code)
        except RedisError as exc:
            raise CacheUnavailableError(f"cache removal failed for {short_code}") from exc
        self._logger.info(f"[CACHE] Removed {short_code}")

    async def size(self) -> int:
        try:
            return await self._tracker.size()
        except RedisError as exc:
            raise CacheUnavailableError("cache size unavailable") from exc

    async def _prune_expired(self) -> int:
        # Caller holds self._lock. Drops tracker members whose entry expired by TTL.
        pruned = 0
        for code in await self._tracker.members():
            if not await self._frontend.exists(code):
                await self._tracker.remove(code)
                pruned += 1
                CACHE_EVICTIONS_TOTAL.labels(reason="expired").inc()
                self._logger.debug(f"[CACHE] Pruned expired {code}")
        return pruned


def build_cache_coordinator(
    settings: Settings,
    logger: logging.Logger,
    client: redis.Redis | None = None,
    notifier: HitNotifier | None = None,
) -> CacheCoordinator:
    if settings.CACHE_BACKEND is CacheBackend.REDIS:
        assert client is not None, "redis backend requires a client"
        tracker: FrequencyTracker = RedisFrequencyTracker(client, settings.CACHE_TRACKER_KEY)
        frontend: CacheFrontend = RedisCacheFrontend(client, settings.CACHE_KEY_PREFIX)
    else:
        tracker = MemoryFrequencyTracker()
        frontend = MemoryCacheFrontend()
    return CacheCoordinator(
        tracker,
        frontend,
        capacity=settings.CACHE_CAPACITY,
        ttl_seconds=settings.CACHE_TTL_SECONDS,
        logger=logger,
        notifier=notifier,
    )
