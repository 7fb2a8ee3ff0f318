"""Standalone short-code generation service.

Serves ``GetShortCode`` as ``POST /shortcode``. Each call drains the pool (or
generates on demand when it is empty) and schedules a background refill.

How to Use
===========
**Run**::
    uvicorn services.codegen.main:app --host 0.0.0.0 --port 50051

**Call**::
    curl -X POST http://localhost:50051/shortcode
    {"code": "aZ3k9Qp"}

Key Behaviours
===============
- The pool is filled once at startup.
- No authentication and no per-request retry; callers own retry and timeouts.
- A fail-closed snapshot failure answers 503; nothing partially valid is returned.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from prometheus_client import make_asgi_app

from app.config import get_settings
from app.database import async_session, close_db
from app.enums import HealthStatus
from app.exceptions import SnapshotReadError
from app.log_utils import setup_logger
from services.codegen.oracle import UniquenessOracle
from services.codegen.pool import CodePool
from services.codegen.schemas import PoolHealthResponse, ShortCodeResponse
from services.codegen.snapshot import CodeSnapshotReader

__all__ = ["app", "build_code_pool", "get_code_pool"]

settings = get_settings()
logger = setup_logger("codegen")


def build_code_pool() -> CodePool:
    reader = CodeSnapshotReader(async_session, settings.SNAPSHOT_FAILURE_POLICY, logger)
    oracle = UniquenessOracle(settings.SHORT_CODE_LENGTH, logger)
    return CodePool(oracle, reader, settings.POOL_SIZE, logger)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    app.state.code_pool = build_code_pool()
    app.state.code_pool.refill()
    logger.info(
        f"Code generation service started (pool size {settings.POOL_SIZE}, "
        f"snapshot policy {settings.SNAPSHOT_FAILURE_POLICY})"
    )
    yield
    # Shutdown
    await app.state.code_pool.close()
    await close_db()
    logger.info("Code generation service stopped")


app = FastAPI(
    title="codegen-service",
    version="1.0.0",
    description="Pre-generated, collision-checked short codes",
    lifespan=lifespan,
)

app.mount("/metrics", make_asgi_app())


def get_code_pool(request: Request) -> CodePool:
    return request.app.state.code_pool


@app.post("/shortcode", response_model=ShortCodeResponse)
async def get_short_code(pool: CodePool = Depends(get_code_pool)) -> ShortCodeResponse:
    try:
        code = await pool.take()
    except SnapshotReadError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from None
    finally:
        pool.refill()
    return ShortCodeResponse(code=code)


@app.get("/health", response_model=PoolHealthResponse)
async def health(pool: CodePool = Depends(get_code_pool)) -> PoolHealthResponse:
    status = HealthStatus.HEALTHY if pool.size() > 0 or pool.refilling else HealthStatus.UNHEALTHY
    return PoolHealthResponse(
        status=status,
        pool_size=pool.size(),
        pool_capacity=pool.capacity,
        refilling=pool.refilling,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=50051)
