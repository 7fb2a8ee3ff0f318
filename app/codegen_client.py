"""Client side of the remote ``GetShortCode`` call.

The codegen service is reached over plain HTTP with no credentials. This client
applies its own timeout (the server imposes none) and does not retry; any
transport error, non-2xx status or malformed payload becomes CodeGenerationError.
"""

import httpx
from pydantic import ValidationError

from app.exceptions import CodeGenerationError
from services.codegen.schemas import ShortCodeResponse

__all__ = ["ShortCodeClient"]


class ShortCodeClient:
    def __init__(self, base_url: str, timeout: float = 2.0, transport: httpx.AsyncBaseTransport | None = None):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def get_code(self) -> str:
        try:
            response = await self._client.post("/shortcode")
            response.raise_for_status()
            payload = ShortCodeResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as exc:
            raise CodeGenerationError(f"GetShortCode failed: {exc}") from exc
        return payload.code

    async def ping(self) -> bool:
        try:
            response = await self._client.get("/health")
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    async def close(self) -> None:
        await self._client.aclose()
