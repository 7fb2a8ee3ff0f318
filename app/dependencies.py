"""Dependency injection with a singleton service manager.

Shared, process-wide resources (logger, Redis client, cache coordinator, hit
notifier, codegen client) live on one ServiceManager. Each request gets a
lightweight RequestContext carrying its own database session plus a reference
to the manager.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

import redis.asyncio as redis
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.codegen_client import ShortCodeClient
from app.config import get_settings
from app.database import get_db
from app.enums import CacheBackend
from app.log_utils import setup_logger
from app.redis import close_redis, get_redis
from app.store import record_hit
from app.url_service import URLShorteningService
from services.cache.coordinator import CacheCoordinator, build_cache_coordinator
from services.cache.notifier import HitNotifier


# ============================================================================
# SINGLETON SERVICE MANAGER
# ============================================================================


class ServiceManager:
    """Singleton holder for resources that outlive a single request."""

    _instance: Optional["ServiceManager"] = None
    _initialized: bool = False

    def __new__(cls) -> "ServiceManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def initialize(self) -> None:
        """Initialize shared resources once at startup."""
        if not self._initialized:
            self.settings = get_settings()
            self.logger = setup_logger("urlshortener")
            self.cache_client: redis.Redis | None = None
            if self.settings.CACHE_BACKEND is CacheBackend.REDIS:
                self.cache_client = await get_redis()
            self.notifier = HitNotifier(record_hit, self.settings.HIT_QUEUE_MAXSIZE, self.logger)
            self.notifier.start()
            self.coordinator = build_cache_coordinator(
                self.settings, self.logger, client=self.cache_client, notifier=self.notifier
            )
            self.codegen = ShortCodeClient(
                self.settings.CODEGEN_SERVICE_URL, timeout=self.settings.CODEGEN_TIMEOUT_SECONDS
            )
            self._initialized = True

    async def cleanup(self) -> None:
        """Cleanup shared resources at shutdown."""
        if not self._initialized:
            return
        await self.notifier.stop()
        await self.codegen.close()
        await close_redis()
        self._initialized = False


# Global singleton instance
_service_manager = ServiceManager()


# ============================================================================
# LIGHTWEIGHT REQUEST CONTEXT
# ============================================================================


@dataclass
class RequestContext:
    """Per-request view over the shared resources.

    Attributes:
        database: Async database session (only per-request resource)
        service_manager: Singleton service manager with shared resources
        request_id: Unique identifier for this request
        client_ip: Client IP address
        start_time: Request start timestamp
    """

    database: AsyncSession
    service_manager: ServiceManager
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    client_ip: Optional[str] = None
    start_time: float = field(default_factory=lambda: time.time())

    @property
    def cache(self) -> CacheCoordinator:
        return self.service_manager.coordinator

    @property
    def codegen(self) -> ShortCodeClient:
        return self.service_manager.codegen

    @property
    def settings(self):
        return self.service_manager.settings

    @property
    def logger(self) -> logging.LoggerAdapter:
        return logging.LoggerAdapter(
            self.service_manager.logger,
            {"request_id": self.request_id, "client_ip": self.client_ip},
        )

    def get_duration(self) -> float:
        """Request duration in milliseconds."""
        return (time.time() - self.start_time) * 1000


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


async def get_service_manager() -> ServiceManager:
    if not _service_manager._initialized:
        await _service_manager.initialize()
    return _service_manager


async def get_request_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
    manager: ServiceManager = Depends(get_service_manager),
) -> RequestContext:
    client_ip = request.client.host if request.client else None
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    return RequestContext(
        database=db,
        service_manager=manager,
        request_id=request_id,
        client_ip=client_ip,
    )


def get_url_service(ctx: RequestContext = Depends(get_request_context)) -> URLShorteningService:
    return URLShorteningService.from_context(ctx)
