"""Shared pytest fixtures for code-pool, cache-overlay and API tests."""

import logging
from collections.abc import Callable, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest

from services.cache.coordinator import CacheCoordinator
from services.cache.frontend import MemoryCacheFrontend
from services.cache.tracker import MemoryFrequencyTracker
from services.codegen.oracle import UniquenessOracle
from services.codegen.pool import CodePool
from services.codegen.snapshot import CodeSnapshotReader


class ManualClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def sequential_codes(prefix: str = "c", length: int = 7) -> Iterator[str]:
    """Yield c000000, c000001, ... padded to ``length``."""
    index = 0
    while True:
        yield f"{prefix}{index:0{length - len(prefix)}d}"
        index += 1


def scripted_generator(codes: Iterator[str]) -> Callable[[str, int], str]:
    return lambda alphabet, size: next(codes)


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("tests")


@pytest.fixture
def snapshot_reader() -> AsyncMock:
    reader = AsyncMock(spec=CodeSnapshotReader)
    reader.read.return_value = frozenset()
    return reader


@pytest.fixture
def oracle(logger) -> UniquenessOracle:
    return UniquenessOracle(7, logger, generator=scripted_generator(sequential_codes()))


@pytest.fixture
def code_pool(oracle, snapshot_reader, logger) -> CodePool:
    return CodePool(oracle, snapshot_reader, capacity=10, logger=logger)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def hit_notifier() -> MagicMock:
    notifier = MagicMock()
    notifier.notify = MagicMock(return_value=True)
    return notifier


@pytest.fixture
def make_coordinator(logger, clock, hit_notifier) -> Callable[..., CacheCoordinator]:
    def _make(capacity: int = 2, ttl_seconds: int = 86400) -> CacheCoordinator:
        return CacheCoordinator(
            MemoryFrequencyTracker(),
            MemoryCacheFrontend(clock=clock),
            capacity=capacity,
            ttl_seconds=ttl_seconds,
            logger=logger,
            notifier=hit_notifier,
        )

    return _make
