"""FastAPI application entry point for the URL shortener API.

Application Lifecycle Diagram
=============================
::
    ┌─────────────┐
    │  uvicorn    │
    │  startup    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ init_db()   │
    │ service mgr │
    │ (redis, LFU │
    │ coordinator,│
    │ hit worker, │
    │ codegen)    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Serve HTTP  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ shutdown:   │
    │ hit worker, │
    │ codegen,    │
    │ redis, db   │
    └─────────────┘

How to Use
===========
**Run with uvicorn**::
    uvicorn app.main:app --host 0.0.0.0 --port 8080

**Shorten and follow**::
    curl -X POST http://localhost:8080/api/shorten \
         -H "Content-Type: application/json" \
         -d '{"url": "https://example.com"}'
    curl -i http://localhost:8080/aZ3k9Qp

Key Behaviours
===============
- Tables are created on startup.
- The codegen service must be reachable for /api/shorten; redirects only need
  the database and the cache.
- Hits still queued when the process stops are not written.
"""

__all__ = ["app"]

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from app.config import get_settings
from app.database import close_db, init_db
from app.dependencies import _service_manager
from app.routes import router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    await init_db()
    await _service_manager.initialize()
    yield
    # Shutdown
    await _service_manager.cleanup()
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="URL shortener with pooled short codes and an LFU redirect cache",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=False,
    should_respect_env_var=False,
).instrument(app).expose(app)

app.include_router(router)
