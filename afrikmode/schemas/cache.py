"""Cache administration API schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CacheStatsResponse(BaseModel):
    """Response for GET /cache/stats. Extra backend details pass through."""

    model_config = ConfigDict(extra="allow")

    status: str = Field(..., description="connected, disconnected or error")
    mode: str = Field(..., description="store or degraded")
    state: str = Field(..., description="Connection state")
    memory: dict[str, Any] | None = None
    connections: dict[str, Any] | None = None
    error: str | None = None


class CacheKeysResponse(BaseModel):
    """Response for GET /cache/keys."""

    pattern: str
    keys: list[str]


class CacheInvalidateResponse(BaseModel):
    """Response for DELETE /cache/keys."""

    pattern: str
    deleted: int = Field(..., description="Number of keys removed")


class CacheFlushResponse(BaseModel):
    """Response for DELETE /cache."""

    flushed: bool
