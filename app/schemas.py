"""Pydantic schemas for request/response validation in the URL shortener API.

Key Behaviours
===============
- URLs are validated with the ``validators`` package before any code is issued.
- Response models read straight from ORM objects (``from_attributes``).

Classes:
    URLCreate:  Input schema for URL shortening requests.
    URLResponse:  Output schema for a created URL.
    URLRecord:  One stored mapping in the listing.
    URLListResponse:  Output schema for GET /api/urls.
    DeleteResponse:  Output schema for DELETE /api/urls/{code}.
    HealthResponse:  Output schema for health checks.
"""

import datetime

import validators
from pydantic import BaseModel, field_validator

from app.enums import HealthStatus

__all__ = [
    "URLCreate",
    "URLResponse",
    "URLRecord",
    "URLListResponse",
    "DeleteResponse",
    "HealthResponse",
]


class URLCreate(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not validators.url(v) or not v.lower().startswith(("http://", "https://")):
            raise ValueError("Invalid URL format")
        return v


class URLResponse(BaseModel):
    success: bool = True
    short_code: str
    short_url: str
    original_url: str


class URLRecord(BaseModel):
    short_code: str
    original_url: str
    clicks: int
    created_at: datetime.datetime

    model_config = {"from_attributes": True}


class URLListResponse(BaseModel):
    success: bool = True
    urls: list[URLRecord]


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "URL deleted successfully"


class HealthResponse(BaseModel):
    status: HealthStatus
    database: HealthStatus
    cache: HealthStatus
    codegen: HealthStatus
