"""Configuration management for the URL shortener and its code-generation service.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable support and caching for performance. Both the public URL
API (``app.main``) and the code-generation service (``services.codegen.main``) read
from the same ``Settings`` class so that the identifier length, pool size and cache
limits stay in agreement across processes.

Flow Diagram — get_settings()
=============================
::
    ┌─────────────┐
    │  Call get_  │
    │  settings() │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Check cache  │
    │ (lru_cache)  │
    └──────┬──────┘
    HIT?  │
    ┌─────┴─────┐
    │ NO         │ YES
    ▼            ▼
┌─────────┐  ┌─────────┐
│ Create  │  │ Return  │
│ Settings│  │ cached  │
│ instance│  │ value   │
└─────────┘  └─────────┘

How to Use
===========
**Step 1 — Import**::
    from app.config import get_settings

**Step 2 — Get settings**::
    settings = get_settings()
    pool_size = settings.POOL_SIZE

**Step 3 — Override via environment**::
    CACHE_CAPACITY=100 SNAPSHOT_FAILURE_POLICY=fail_open uvicorn app.main:app

Key Behaviours
===============
- Settings are cached after first access for performance.
- Environment variables override defaults automatically.
- Unknown enum values (cache backend, failure policy) raise ValidationError.

Classes:
    Settings:  Pydantic model for all configuration values.

"""

__all__ = ["Settings", "get_settings"]

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.enums import CacheBackend, SnapshotFailurePolicy


class Settings(BaseSettings):
    APP_NAME: str = "url-shortener"
    APP_ENV: str = "development"
    BASE_URL: str = "http://localhost:8080"
    LOG_LEVEL: str = "INFO"

    # PostgreSQL
    DATABASE_URL: str = "postgresql+asyncpg://urlshortener:urlshortener@db:5432/urlshortener"

    # Redis
    REDIS_URL: str = "redis://redis:6379/0"

    # Short code generation
    SHORT_CODE_LENGTH: int = Field(7, ge=1)
    POOL_SIZE: int = Field(10, ge=1)
    SNAPSHOT_FAILURE_POLICY: SnapshotFailurePolicy = SnapshotFailurePolicy.FAIL_CLOSED
    CODEGEN_SERVICE_URL: str = "http://codegen:50051"
    CODEGEN_TIMEOUT_SECONDS: float = 2.0

    # LFU cache overlay
    CACHE_BACKEND: CacheBackend = CacheBackend.REDIS
    CACHE_CAPACITY: int = Field(10, ge=1)
    CACHE_TTL_SECONDS: int = Field(86400, ge=1)
    CACHE_TRACKER_KEY: str = "cache:frequency"
    CACHE_KEY_PREFIX: str = "url:"

    # Fire-and-forget hit bookkeeping
    HIT_QUEUE_MAXSIZE: int = Field(1000, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
