"""Frequency index for the LFU cache overlay.

Maps short code -> access count and answers "which member is least used?".
Ties between equal scores go to the lexicographically smallest code. That is
the order Redis keeps inside a sorted set, so ``ZPOPMIN`` applies the rule
natively and the in-memory tracker reproduces it.

Classes:
    FrequencyTracker:  Interface shared by both backends.
    RedisFrequencyTracker:  Sorted set under one key (production).
    MemoryFrequencyTracker:  Dict-backed, single process (tests, local runs).
"""

from abc import ABC, abstractmethod

import redis.asyncio as redis

__all__ = ["FrequencyTracker", "RedisFrequencyTracker", "MemoryFrequencyTracker"]


class FrequencyTracker(ABC):
    @abstractmethod
    async def size(self) -> int: ...

    @abstractmethod
    async def score_of(self, code: str) -> int | None: ...

    @abstractmethod
    async def increment(self, code: str, delta: int = 1) -> int:
        """Add ``delta`` to the score, creating the member at ``delta`` if absent."""

    @abstractmethod
    async def bump(self, code: str, delta: int = 1) -> int | None:
        """Add ``delta`` only if the member exists; return None otherwise."""

    @abstractmethod
    async def set_score(self, code: str, score: int) -> None: ...

    @abstractmethod
    async def remove(self, code: str) -> bool: ...

    @abstractmethod
    async def pop_minimum(self) -> tuple[str, int] | None:
        """Remove and return the lowest-scored member, or None when empty."""

    @abstractmethod
    async def members(self) -> list[str]: ...


class RedisFrequencyTracker(FrequencyTracker):
    def __init__(self, client: redis.Redis, key: str):
        self._client = client
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def size(self) -> int:
        return int(await self._client.zcard(self._key))

    async def score_of(self, code: str) -> int | None:
        score = await self._client.zscore(self._key, code)
        return None if score is None else int(score)

    async def increment(self, code: str, delta: int = 1) -> int:
        return int(await self._client.zincrby(self._key, delta, code))

    async def bump(self, code: str, delta: int = 1) -> int | None:
        # ZADD XX INCR: atomic increment that never creates the member.
        score = await self._client.zadd(self._key, {code: delta}, xx=True, incr=True)
        return None if score is None else int(score)

    async def set_score(self, code: str, score: int) -> None:
        await self._client.zadd(self._key, {code: score})

    async def remove(self, code: str) -> bool:
        return bool(await self._client.zrem(self._key, code))

    async def pop_minimum(self) -> tuple[str, int] | None:
        popped = await self._client.zpopmin(self._key)
        if not popped:
            return None
        member, score = popped[0]
        return member, int(score)

    async def members(self) -> list[str]:
        return list(await self._client.zrange(self._key, 0, -1))


class MemoryFrequencyTracker(FrequencyTracker):
    def __init__(self):
        self._scores: dict[str, int] = {}

    async def size(self) -> int:
        return len(self._scores)

    async def score_of(self, code: str) -> int | None:
        return self._scores.get(code)

    async def increment(self, code: str, delta: int = 1) -> int:
        self._scores[code] = self._scores.get(code, 0) + delta
        return self._scores[code]

    async def bump(self, code: str, delta: int = 1) -> int | None:
        if code not in self._scores:
            return None
        self._scores[code] += delta
        return self._scores[code]

    async def set_score(self, code: str, score: int) -> None:
        self._scores[code] = score

    async def remove(self, code: str) -> bool:
        return self._scores.pop(code, None) is not None

    async def pop_minimum(self) -> tuple[str, int] | None:
        if not self._scores:
            return None
        code, score = min(self._scores.items(), key=lambda item: (item[1], item[0]))
        del self._scores[code]
        return code, score

    async def members(self) -> list[str]:
        return sorted(self._scores, key=lambda code: (self._scores[code], code))
