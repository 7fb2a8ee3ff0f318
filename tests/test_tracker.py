"""Frequency tracker backends."""

from unittest.mock import AsyncMock

import pytest

from services.cache.tracker import MemoryFrequencyTracker, RedisFrequencyTracker

# ============================================================================
# IN-MEMORY TRACKER
# ============================================================================


@pytest.mark.asyncio
async def test_increment_creates_then_adds() -> None:
    tracker = MemoryFrequencyTracker()

    assert await tracker.increment("abc", 1) == 1
    assert await tracker.increment("abc", 2) == 3
    assert await tracker.score_of("abc") == 3
    assert await tracker.size() == 1


@pytest.mark.asyncio
async def test_bump_never_creates() -> None:
    tracker = MemoryFrequencyTracker()

    assert await tracker.bump("abc") is None
    assert await tracker.size() == 0

    await tracker.set_score("abc", 1)
    assert await tracker.bump("abc") == 2


@pytest.mark.asyncio
async def test_pop_minimum_lowest_score_first() -> None:
    tracker = MemoryFrequencyTracker()
    await tracker.set_score("aaa", 5)
    await tracker.set_score("bbb", 2)
    await tracker.set_score("ccc", 9)

    assert await tracker.pop_minimum() == ("bbb", 2)
    assert await tracker.pop_minimum() == ("aaa", 5)
    assert await tracker.pop_minimum() == ("ccc", 9)
    assert await tracker.pop_minimum() is None


@pytest.mark.asyncio
async def test_pop_minimum_ties_go_to_smallest_code() -> None:
    tracker = MemoryFrequencyTracker()
    # Insertion order deliberately differs from lexicographic order.
    await tracker.set_score("zeta", 1)
    await tracker.set_score("alpha", 1)
    await tracker.set_score("mid", 1)

    assert await tracker.pop_minimum() == ("alpha", 1)
    assert await tracker.pop_minimum() == ("mid", 1)
    assert await tracker.pop_minimum() == ("zeta", 1)


@pytest.mark.asyncio
async def test_remove_and_members_order() -> None:
    tracker = MemoryFrequencyTracker()
    await tracker.set_score("b", 3)
    await tracker.set_score("a", 3)
    await tracker.set_score("c", 1)

    assert await tracker.members() == ["c", "a", "b"]
    assert await tracker.remove("a") is True
    assert await tracker.remove("a") is False
    assert await tracker.members() == ["c", "b"]


# ============================================================================
# REDIS TRACKER (command mapping)
# ============================================================================


@pytest.fixture
def mock_redis() -> AsyncMock:
    return AsyncMock()


@pytest.mark.asyncio
async def test_redis_size_and_score(mock_redis) -> None:
    mock_redis.zcard.return_value = 4
    mock_redis.zscore.side_effect = [3.0, None]
    tracker = RedisFrequencyTracker(mock_redis, "cache:frequency")

    assert await tracker.size() == 4
    assert await tracker.score_of("abc") == 3
    assert await tracker.score_of("missing") is None
    mock_redis.zcard.assert_awaited_once_with("cache:frequency")


@pytest.mark.asyncio
async def test_redis_bump_uses_zadd_xx_incr(mock_redis) -> None:
    mock_redis.zadd.side_effect = [2.0, None]
    tracker = RedisFrequencyTracker(mock_redis, "cache:frequency")

    assert await tracker.bump("abc") == 2
    assert await tracker.bump("gone") is None
    mock_redis.zadd.assert_any_await("cache:frequency", {"abc": 1}, xx=True, incr=True)


@pytest.mark.asyncio
async def test_redis_set_score_and_increment(mock_redis) -> None:
    mock_redis.zincrby.return_value = 5.0
    tracker = RedisFrequencyTracker(mock_redis, "cache:frequency")

    await tracker.set_score("abc", 1)
    assert await tracker.increment("abc", 4) == 5

    mock_redis.zadd.assert_awaited_once_with("cache:frequency", {"abc": 1})
    mock_redis.zincrby.assert_awaited_once_with("cache:frequency", 4, "abc")


@pytest.mark.asyncio
async def test_redis_pop_minimum(mock_redis) -> None:
    mock_redis.zpopmin.side_effect = [[("abc", 1.0)], []]
    tracker = RedisFrequencyTracker(mock_redis, "cache:frequency")

    assert await tracker.pop_minimum() == ("abc", 1)
    assert await tracker.pop_minimum() is None
    mock_redis.zpopmin.assert_awaited_with("cache:frequency")


@pytest.mark.asyncio
async def test_redis_remove_and_members(mock_redis) -> None:
    mock_redis.zrem.return_value = 1
    mock_redis.zrange.return_value = ["a", "b"]
    tracker = RedisFrequencyTracker(mock_redis, "cache:frequency")

    assert await tracker.remove("a") is True
    assert await tracker.members() == ["a", "b"]
    mock_redis.zrange.assert_awaited_once_with("cache:frequency", 0, -1)
