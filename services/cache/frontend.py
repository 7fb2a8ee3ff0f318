"""Time-bounded short code -> target store in front of the database.

Entries expire passively after their TTL. Nothing here knows about frequency;
pairing with the tracker is the coordinator's job.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable

import redis.asyncio as redis

__all__ = ["CacheFrontend", "RedisCacheFrontend", "MemoryCacheFrontend"]


class CacheFrontend(ABC):
    @abstractmethod
    async def get(self, code: str) -> str | None: ...

    @abstractmethod
    async def set(self, code: str, target: str, ttl_seconds: int) -> None: ...

    @abstractmethod
    async def delete(self, code: str) -> bool: ...

    @abstractmethod
    async def exists(self, code: str) -> bool: ...


class RedisCacheFrontend(CacheFrontend):
    def __init__(self, client: redis.Redis, key_prefix: str = "url:"):
        self._client = client
        self._prefix = key_prefix

    def _key(self, code: str) -> str:
        return f"{self._prefix}{code}"

    async def get(self, code: str) -> str | None:
        return await self._client.get(self._key(code))

    async def set(self, code: str, target: str, ttl_seconds: int) -> None:
        await self._client.set(self._key(code), target, ex=ttl_seconds)

    async def delete(self, code: str) -> bool:
        return bool(await self._client.delete(self._key(code)))

    async def exists(self, code: str) -> bool:
        return bool(await self._client.exists(self._key(code)))


class MemoryCacheFrontend(CacheFrontend):
    """Dict-backed frontend; expired entries are dropped when next touched."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    def _live(self, code: str) -> str | None:
        entry = self._entries.get(code)
        if entry is None:
            return None
        target, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[code]
            return None
        return target

    async def get(self, code: str) -> str | None:
        return self._live(code)

    async def set(self, code: str, target: str, ttl_seconds: int) -> None:
        self._entries[code] = (target, self._clock() + ttl_seconds)

    async def delete(self, code: str) -> bool:
        return self._entries.pop(code, None) is not None

    async def exists(self, code: str) -> bool:
        return self._live(code) is not None
