"""Health check endpoints, used for liveness and readiness probes."""

from fastapi import APIRouter

from afrikmode.api.v1.dependencies import CacheDep
from afrikmode.schemas.health import HealthResponse, ReadinessResponse
from afrikmode.shared.enums import CacheMode

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(cache: CacheDep) -> ReadinessResponse:
    """Return 200 with the cache mode.

    A degraded cache never makes the service unready: the in-memory
    fallback keeps every cache call working.
    """
    mode = CacheMode.STORE if await cache.ping() else CacheMode.DEGRADED
    return ReadinessResponse(cache=mode.value)
