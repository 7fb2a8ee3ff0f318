"""HTTP behaviour of the public URL API with the service layer mocked out."""

import datetime
from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import get_settings
from app.dependencies import get_request_context, get_url_service
from app.exceptions import CacheUnavailableError, CodeGenerationError
from app.main import app
from app.models import URL
from app.url_service import URLShorteningService
from services.cache.coordinator import CacheCoordinator


@pytest.fixture
def service() -> AsyncMock:
    return AsyncMock(spec=URLShorteningService)


@pytest.fixture
def ctx() -> MagicMock:
    ctx = MagicMock()
    ctx.settings = get_settings()
    ctx.get_duration.return_value = 1.0
    ctx.database = AsyncMock()
    ctx.cache = AsyncMock(spec=CacheCoordinator)
    ctx.codegen = AsyncMock()
    ctx.codegen.ping.return_value = True
    return ctx


@pytest_asyncio.fixture(scope="function")
async def client(service, ctx) -> AsyncIterator[AsyncClient]:
    app.dependency_overrides[get_url_service] = lambda: service
    app.dependency_overrides[get_request_context] = lambda: ctx
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _url(code: str = "aZ3k9Qp", target: str = "https://www.google.com") -> URL:
    return URL(
        id=1,
        short_code=code,
        original_url=target,
        clicks=0,
        created_at=datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc),
    )


# ============================================================================
# SHORTEN
# ============================================================================


@pytest.mark.asyncio
async def test_shorten_valid_url(client, service) -> None:
    service.create_short_url.return_value = _url()

    response = await client.post("/api/shorten", json={"url": "https://www.google.com"})

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["short_code"] == "aZ3k9Qp"
    assert data["original_url"] == "https://www.google.com"
    assert data["short_url"].endswith("/aZ3k9Qp")


@pytest.mark.asyncio
async def test_shorten_invalid_url(client, service) -> None:
    response = await client.post("/api/shorten", json={"url": "not-a-url"})

    assert response.status_code == 422
    service.create_short_url.assert_not_awaited()


@pytest.mark.asyncio
async def test_shorten_collision(client, service) -> None:
    service.create_short_url.side_effect = ValueError("Short code 'aZ3k9Qp' collision detected")

    response = await client.post("/api/shorten", json={"url": "https://www.google.com"})

    assert response.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [CodeGenerationError("GetShortCode failed"), CacheUnavailableError("cache admit failed")],
)
async def test_shorten_dependency_down(client, service, error) -> None:
    service.create_short_url.side_effect = error

    response = await client.post("/api/shorten", json={"url": "https://www.google.com"})

    assert response.status_code == 503


# ============================================================================
# LIST AND DELETE
# ============================================================================


@pytest.mark.asyncio
async def test_list_urls(client, service) -> None:
    service.list_urls.return_value = [_url("bbbbbbb"), _url("aaaaaaa")]

    response = await client.get("/api/urls")

    assert response.status_code == 200
    assert [u["short_code"] for u in response.json()["urls"]] == ["bbbbbbb", "aaaaaaa"]


@pytest.mark.asyncio
async def test_delete_url(client, service) -> None:
    service.delete_url.return_value = True

    response = await client.delete("/api/urls/aZ3k9Qp")

    assert response.status_code == 200
    assert response.json()["success"] is True
    service.delete_url.assert_awaited_once_with("aZ3k9Qp")


@pytest.mark.asyncio
async def test_delete_unknown_url(client, service) -> None:
    service.delete_url.return_value = False

    response = await client.delete("/api/urls/missing")

    assert response.status_code == 404


# ============================================================================
# REDIRECT
# ============================================================================


@pytest.mark.asyncio
async def test_redirect(client, service) -> None:
    service.resolve.return_value = "https://www.google.com"

    response = await client.get("/aZ3k9Qp", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "https://www.google.com"


@pytest.mark.asyncio
async def test_redirect_not_found(client, service) -> None:
    service.resolve.return_value = None

    response = await client.get("/missing", follow_redirects=False)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_redirect_cache_down(client, service) -> None:
    service.resolve.side_effect = CacheUnavailableError("cache lookup failed")

    response = await client.get("/aZ3k9Qp", follow_redirects=False)

    assert response.status_code == 503


# ============================================================================
# HEALTH
# ============================================================================


@pytest.mark.asyncio
async def test_health_all_up(client) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "database": "healthy",
        "cache": "healthy",
        "codegen": "healthy",
    }


@pytest.mark.asyncio
async def test_health_reports_cache_and_codegen_down(client, ctx) -> None:
    ctx.cache.size.side_effect = CacheUnavailableError("cache size failed")
    ctx.codegen.ping.return_value = False

    response = await client.get("/health")

    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["database"] == "healthy"
    assert data["cache"] == "unhealthy"
    assert data["codegen"] == "unhealthy"
