"""Redis client management for the LFU cache overlay.

The cache frontend (``url:<code>`` strings with TTL) and the frequency tracker
(one sorted set) share a single client so every write goes to the same primary.

How to Use
===========
**Get the shared client**::
    client = await get_redis()

**Cleanup on shutdown**::
    await close_redis()

Key Behaviours
===============
- The client is created lazily on first access and reused afterwards.
- ``decode_responses=True``: cached targets and tracker members come back as str.

Functions:
    get_redis():  Shared client (FastAPI dependency compatible).
    close_redis():  Cleanup function for shutdown.
"""

import redis.asyncio as redis

from app.config import get_settings

__all__ = ["close_redis", "get_redis"]

settings = get_settings()

redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    global redis_client
    if redis_client is None:
        redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return redis_client


async def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
