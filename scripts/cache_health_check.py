"""Check Redis reachability the way the running service would see it.

Usage:
    uv run python -m scripts.cache_health_check
Uses REDIS_* settings from the environment or .env. Prints cache stats as
JSON; exits 0 when Redis is connected, 1 when the cache would run degraded.
"""

import asyncio
import json
import sys

from afrikmode.core.config import get_settings
from afrikmode.infrastructure.cache import CacheService, ConnectionManager
from afrikmode.shared.telemetry.logging import setup_logging


async def main() -> int:
    """Connect once, report stats, disconnect."""
    setup_logging()
    settings = get_settings()
    manager = ConnectionManager(settings)
    await manager.initialize()
    cache = CacheService(manager)
    try:
        stats = await cache.get_stats()
        print(json.dumps(stats, indent=2, default=str))
        if await cache.ping():
            print(f"Redis connected at {settings.redis_url}")
            return 0
        print(f"Redis unavailable at {settings.redis_url}; cache runs in memory", file=sys.stderr)
        return 1
    finally:
        await manager.shutdown()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
