"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready. Degraded cache is reported, not fatal."""

    status: str = Field(default="ok", description="Readiness status")
    cache: str = Field(..., description="Cache mode: store or degraded")
