"""Shared enums for the URL shortener application.

This module defines all status and state enums used across the codebase.
Using enums instead of string literals provides type safety and prevents typos.
"""

from enum import StrEnum

__all__ = ["HealthStatus", "RequestStatus", "CacheStatus", "CacheBackend", "SnapshotFailurePolicy"]


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class RequestStatus(StrEnum):
    """Request status values for metrics and logging."""

    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    ERROR = "error"
    NOT_FOUND = "not_found"


class CacheStatus(StrEnum):
    """Cache status values for metrics."""

    HIT = "true"
    MISS = "false"


class CacheBackend(StrEnum):
    """Where the LFU overlay keeps its cache entries and frequency index."""

    REDIS = "redis"
    MEMORY = "memory"


class SnapshotFailurePolicy(StrEnum):
    """What code generation does when the persisted-code snapshot cannot be read.

    FAIL_CLOSED refuses to generate. FAIL_OPEN treats the store as empty and
    keeps generating, accepting the risk of handing out a duplicate.
    """

    FAIL_CLOSED = "fail_closed"
    FAIL_OPEN = "fail_open"
