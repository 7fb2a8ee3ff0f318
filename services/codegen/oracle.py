"""Candidate short-code generation with uniqueness checks.

Flow Diagram — propose()
========================
::
    ┌─────────────┐
    │ nanoid over │
    │ base62      │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ In snapshot │──YES──┐
    │ or pending? │       │ retry
    └──────┬──────┘◄──────┘
        NO │
           ▼
    ┌─────────────┐
    │ Accept code │
    └─────────────┘

Key Behaviours
===============
- Retries are unbounded; with 62**7 possible codes a long retry streak is not
  a practical concern.
- Both membership checks are plain ``in`` tests, so callers may pass sets,
  frozensets, deques or any other container.
"""

import logging
from collections.abc import Callable, Container

from nanoid import generate
from prometheus_client import Counter

__all__ = ["BASE62_ALPHABET", "UniquenessOracle", "GENERATION_COLLISIONS_TOTAL"]

BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

GENERATION_COLLISIONS_TOTAL = Counter(
    "codegen_generation_collisions_total",
    "Candidate short codes rejected because they were already taken",
)


class UniquenessOracle:
    def __init__(
        self,
        length: int,
        logger: logging.Logger,
        alphabet: str = BASE62_ALPHABET,
        generator: Callable[[str, int], str] = generate,
    ):
        assert isinstance(length, int) and length > 0, f"length must be a positive integer, got {length!r}"
        assert alphabet, "alphabet must not be empty"
        self._length = length
        self._alphabet = alphabet
        self._generator = generator
        self._logger = logger

    @property
    def length(self) -> int:
        return self._length

    @property
    def alphabet(self) -> str:
        return self._alphabet

    def propose(self, persisted: Container[str], pending: Container[str]) -> str:
        """Return a code found in neither ``persisted`` nor ``pending``."""
        while True:
            code = self._generator(self._alphabet, self._length)
            if code not in persisted and code not in pending:
                return code
            GENERATION_COLLISIONS_TOTAL.inc()
            self._logger.debug(f"Rejected colliding candidate: {code}")
