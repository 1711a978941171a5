"""FastAPI dependencies for v1 endpoints.

The cache service is built once in the application lifespan and stored
on app.state; endpoints receive it through get_cache.
"""

from typing import Annotated

from fastapi import Depends, Request

from afrikmode.infrastructure.cache import CacheService


def get_cache(request: Request) -> CacheService:
    """Return the process-wide CacheService set up in lifespan."""
    return request.app.state.cache


CacheDep = Annotated[CacheService, Depends(get_cache)]
