"""Pydantic schemas for the code-generation API."""

from pydantic import BaseModel, Field

from app.enums import HealthStatus

__all__ = ["ShortCodeResponse", "PoolHealthResponse"]


class ShortCodeResponse(BaseModel):
    code: str = Field(..., description="Freshly issued short code, e.g. 'aZ3k9Qp'")


class PoolHealthResponse(BaseModel):
    status: HealthStatus
    pool_size: int
    pool_capacity: int
    refilling: bool
