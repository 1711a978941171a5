"""Cache administration endpoints: stats, key listing, invalidation, flush."""

from fastapi import APIRouter, Query

from afrikmode.api.v1.dependencies import CacheDep
from afrikmode.core.constants import CACHE_MATCH_ALL
from afrikmode.domain.exceptions import ValidationException
from afrikmode.schemas.cache import (
    CacheFlushResponse,
    CacheInvalidateResponse,
    CacheKeysResponse,
    CacheStatsResponse,
)

router = APIRouter()


@router.get("/stats", response_model=CacheStatsResponse)
async def get_cache_stats(cache: CacheDep) -> CacheStatsResponse:
    """Return current cache health (connected/degraded) and backend details."""
    return CacheStatsResponse(**await cache.get_stats())


@router.get("/keys", response_model=CacheKeysResponse)
async def list_cache_keys(
    cache: CacheDep,
    pattern: str = Query(CACHE_MATCH_ALL, description="Glob pattern, e.g. user:*"),
) -> CacheKeysResponse:
    """List keys matching pattern."""
    return CacheKeysResponse(pattern=pattern, keys=sorted(await cache.keys(pattern)))


@router.delete("/keys", response_model=CacheInvalidateResponse)
async def invalidate_cache_keys(
    cache: CacheDep,
    pattern: str = Query("", description="Glob pattern of keys to delete"),
) -> CacheInvalidateResponse:
    """Delete keys matching pattern. Use DELETE /cache to clear everything."""
    if not pattern.strip():
        raise ValidationException("pattern must not be empty", field="pattern")
    deleted = await cache.delete_pattern(pattern)
    return CacheInvalidateResponse(pattern=pattern, deleted=deleted)


@router.delete("", response_model=CacheFlushResponse)
async def flush_cache(cache: CacheDep) -> CacheFlushResponse:
    """Clear the entire cache."""
    return CacheFlushResponse(flushed=await cache.flush_all())
