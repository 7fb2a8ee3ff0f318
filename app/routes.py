"""HTTP routes for the URL shortener API.

Endpoints:
    GET    /health                 database, cache and codegen reachability
    POST   /api/shorten            issue a short code for a URL
    GET    /api/urls               every stored mapping, newest first
    DELETE /api/urls/{short_code}  drop a mapping and its cache pair
    GET    /{short_code}           307 redirect to the target

Error mapping:
    ValueError             -> 409 (issued code collided with a stored one)
    CodeGenerationError    -> 503
    CacheUnavailableError  -> 503
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from sqlalchemy import text

from app.dependencies import RequestContext, get_request_context, get_url_service
from app.enums import HealthStatus
from app.exceptions import CacheUnavailableError, CodeGenerationError
from app.schemas import DeleteResponse, HealthResponse, URLCreate, URLListResponse, URLRecord, URLResponse
from app.url_service import URLShorteningService

__all__ = ["router"]

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(ctx: RequestContext = Depends(get_request_context)) -> HealthResponse:
    db_status = HealthStatus.HEALTHY
    cache_status = HealthStatus.HEALTHY
    codegen_status = HealthStatus.HEALTHY

    try:
        await ctx.database.execute(text("SELECT 1"))
    except Exception as e:
        ctx.logger.error(f"Database health check failed: {e}")
        db_status = HealthStatus.UNHEALTHY

    try:
        await ctx.cache.size()
    except CacheUnavailableError as e:
        ctx.logger.error(f"Cache health check failed: {e}")
        cache_status = HealthStatus.UNHEALTHY

    if not await ctx.codegen.ping():
        ctx.logger.error("Codegen health check failed")
        codegen_status = HealthStatus.UNHEALTHY

    status = (
        HealthStatus.HEALTHY
        if all(s is HealthStatus.HEALTHY for s in (db_status, cache_status, codegen_status))
        else HealthStatus.UNHEALTHY
    )
    return HealthResponse(status=status, database=db_status, cache=cache_status, codegen=codegen_status)


@router.post("/api/shorten", response_model=URLResponse, status_code=201, tags=["urls"])
async def shorten_url(
    payload: URLCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: URLShorteningService = Depends(get_url_service),
) -> URLResponse:
    ctx.logger.info(f"URL shortening requested: {payload.url}")
    try:
        url = await service.create_short_url(payload)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except (CodeGenerationError, CacheUnavailableError) as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    ctx.logger.info(f"URL shortened: {url.short_code} in {ctx.get_duration():.1f}ms")
    return URLResponse(
        short_code=url.short_code,
        short_url=f"{ctx.settings.BASE_URL}/{url.short_code}",
        original_url=url.original_url,
    )


@router.get("/api/urls", response_model=URLListResponse, tags=["urls"])
async def list_urls(service: URLShorteningService = Depends(get_url_service)) -> URLListResponse:
    urls = await service.list_urls()
    return URLListResponse(urls=[URLRecord.model_validate(url) for url in urls])


@router.delete("/api/urls/{short_code}", response_model=DeleteResponse, tags=["urls"])
async def delete_url(
    short_code: str,
    service: URLShorteningService = Depends(get_url_service),
) -> DeleteResponse:
    try:
        deleted = await service.delete_url(short_code)
    except CacheUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="Short URL not found")
    return DeleteResponse()


@router.get("/{short_code}", tags=["redirect"])
async def redirect_to_url(
    short_code: str,
    ctx: RequestContext = Depends(get_request_context),
    service: URLShorteningService = Depends(get_url_service),
) -> RedirectResponse:
    try:
        target = await service.resolve(short_code)
    except CacheUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    if target is None:
        ctx.logger.warning(f"Redirect failed - short code not found: {short_code}")
        raise HTTPException(status_code=404, detail="Short URL not found")

    return RedirectResponse(url=target, status_code=307)
