"""Error taxonomy shared by the URL API, the code-generation service and the cache overlay.

Collisions during identifier generation are not represented here: they are retried
inside the oracle and never leave it.
"""

__all__ = [
    "ShortenerError",
    "SnapshotReadError",
    "CodeGenerationError",
    "CacheUnavailableError",
]


class ShortenerError(Exception):
    """Base class for service errors surfaced to the calling layer."""


class SnapshotReadError(ShortenerError):
    """The persisted short-code snapshot could not be read (fail-closed policy)."""


class CodeGenerationError(ShortenerError):
    """The remote GetShortCode call failed in transport, status or payload."""


class CacheUnavailableError(ShortenerError):
    """The cache backing store could not be reached during lookup, admit or remove."""
