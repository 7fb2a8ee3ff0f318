"""URL Shortener Service Layer - Core Business Logic

Glues the three collaborators of the public API together: the remote code
generator, the persistent store and the LFU cache overlay.

Architecture Overview
=====================
::
    ┌─────────────────────────────────────────────────────────────┐
    │                    URLShorteningService                     │
    │  ┌─────────────────┐  ┌─────────────────┐  ┌──────────────┐ │
    │  │ ShortCodeClient │  │    URLStore     │  │ CacheCoord.  │ │
    │  │ • GetShortCode  │  │ • get / create  │  │ • lookup     │ │
    │  │                 │  │ • delete        │  │ • admit      │ │
    │  │                 │  │ • clicks        │  │ • remove     │ │
    │  └─────────────────┘  └─────────────────┘  └──────────────┘ │
    └─────────────────────────────────────────────────────────────┘
                │                    │                    │
                ▼                    ▼                    ▼
    ┌─────────────────┐  ┌─────────────────┐  ┌─────────────────┐
    │  codegen (HTTP) │  │   PostgreSQL    │  │     Redis       │
    └─────────────────┘  └─────────────────┘  └─────────────────┘

Redirect Flow
=============
::
    ┌─────────────┐
    │  GET /:code │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ coordinator │──HIT──► target (frequency +1, hit queued for DB)
    │ lookup()    │
    └──────┬──────┘
      MISS │
           ▼
    ┌─────────────┐
    │ store.get() │──NONE──► None (404)
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ admit() +   │
    │ clicks += 1 │
    └──────┬──────┘
           ▼
        target

Key Behaviours
===============
- A cache outage is fatal to the request (CacheUnavailableError); the store is
  not consulted as a fallback.
- A code the generator hands out that already exists in the store (possible
  when another writer raced the generator's snapshot) is reported as a
  collision, not retried.
"""

import time
from collections.abc import Sequence

from prometheus_client import Counter, Histogram
from sqlalchemy.exc import IntegrityError

from app.enums import CacheStatus, RequestStatus
from app.models import URL
from app.schemas import URLCreate
from app.store import URLStore

__all__ = ["URLShorteningService"]


URL_CREATION_REQUESTS_TOTAL = Counter(
    "url_shortener_creation_requests_total",
    "Total URL creation requests",
    ["status"],
)
URL_LOOKUP_REQUESTS_TOTAL = Counter(
    "url_shortener_lookup_requests_total",
    "Total URL lookup requests",
    ["status", "cache_hit"],
)
URL_CREATION_DURATION = Histogram(
    "url_shortener_creation_duration_seconds",
    "Time taken to create short URLs",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
URL_LOOKUP_DURATION = Histogram(
    "url_shortener_lookup_duration_seconds",
    "Time taken to resolve short codes",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25],
)


class URLShorteningService:
    """Create, resolve, list and delete short URLs for one request.

    Example:
        >>> service = URLShorteningService.from_context(ctx)
        >>> url = await service.create_short_url(URLCreate(url="https://example.com"))
        >>> target = await service.resolve(url.short_code)
    """

    def __init__(self, ctx: "RequestContext"):
        self._store = URLStore(ctx.database)
        self._cache = ctx.cache
        self._codegen = ctx.codegen
        self._logger = ctx.logger
        self._settings = ctx.settings

    @classmethod
    def from_context(cls, ctx: "RequestContext") -> "URLShorteningService":
        return cls(ctx)

    @property
    def settings(self):
        return self._settings

    async def create_short_url(self, request: URLCreate) -> URL:
        """Issue a code from the generator, persist the mapping and cache it.

        Raises:
            ValueError: the issued code already exists in the store.
            CodeGenerationError: the generator could not be reached.
            CacheUnavailableError: the cache could not be written.
        """
        start_time = time.perf_counter()
        try:
            short_code = await self._codegen.get_code()
            try:
                url = await self._store.create(short_code, request.url)
            except IntegrityError as exc:
                await self._store.rollback()
                self._logger.error(f"Database collision for code: {short_code}")
                raise ValueError(f"Short code '{short_code}' collision detected") from exc

            await self._cache.admit(short_code, url.original_url)
        except ValueError as exc:
            URL_CREATION_REQUESTS_TOTAL.labels(status=RequestStatus.VALIDATION_ERROR).inc()
            self._logger.warning(f"URL creation failed: {exc}")
            raise
        except Exception as exc:
            URL_CREATION_REQUESTS_TOTAL.labels(status=RequestStatus.ERROR).inc()
            self._logger.error(f"URL creation error: {exc}")
            raise
        finally:
            URL_CREATION_DURATION.observe(time.perf_counter() - start_time)

        URL_CREATION_REQUESTS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
        self._logger.info(f"URL created successfully: {short_code}")
        return url

    async def resolve(self, short_code: str) -> str | None:
        """Return the redirect target for ``short_code``, or None if it is unknown."""
        start_time = time.perf_counter()
        try:
            target = await self._cache.lookup(short_code)
            if target is not None:
                URL_LOOKUP_REQUESTS_TOTAL.labels(status=RequestStatus.SUCCESS, cache_hit=CacheStatus.HIT).inc()
                return target

            self._logger.debug(f"Cache miss for {short_code}, fetching from database")
            url = await self._store.get(short_code)
            if url is None:
                URL_LOOKUP_REQUESTS_TOTAL.labels(status=RequestStatus.NOT_FOUND, cache_hit=CacheStatus.MISS).inc()
                return None

            await self._cache.admit(short_code, url.original_url)
            await self._store.increment_clicks(short_code)
            URL_LOOKUP_REQUESTS_TOTAL.labels(status=RequestStatus.SUCCESS, cache_hit=CacheStatus.MISS).inc()
            return url.original_url
        except Exception as exc:
            URL_LOOKUP_REQUESTS_TOTAL.labels(status=RequestStatus.ERROR, cache_hit=CacheStatus.MISS).inc()
            self._logger.error(f"Error redirecting {short_code}: {exc}")
            raise
        finally:
            URL_LOOKUP_DURATION.observe(time.perf_counter() - start_time)

    async def list_urls(self) -> Sequence[URL]:
        return await self._store.list_all()

    async def delete_url(self, short_code: str) -> bool:
        """Delete the record and its cache pair. Returns False if the code is unknown."""
        deleted = await self._store.delete(short_code)
        if not deleted:
            return False
        await self._cache.remove(short_code)
        self._logger.info(f"URL deleted: {short_code}")
        return True
