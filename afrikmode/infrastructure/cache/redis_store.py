"""Redis-backed cache backend.

Thin async adapter over a ``redis.asyncio.Redis`` client created with
``decode_responses=True``. Errors propagate; CacheService decides how to
degrade.
"""

from __future__ import annotations

from typing import Any

import redis.asyncio as redis

# Keys per UNLINK round-trip when invalidating by pattern.
_UNLINK_CHUNK_SIZE = 500


class RedisStore:
    """Cache backend that delegates to a live Redis client."""

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def set(self, key: str, payload: str, ttl: int | None = None) -> None:
        if ttl is not None and ttl > 0:
            await self.client.setex(key, ttl, payload)
        else:
            await self.client.set(key, payload)

    async def delete(self, key: str) -> bool:
        return int(await self.client.delete(key)) > 0

    async def exists(self, key: str) -> bool:
        return int(await self.client.exists(key)) > 0

    async def keys(self, pattern: str = "*") -> list[str]:
        """Collect matching keys with SCAN (KEYS would block the server)."""
        return [key async for key in self.client.scan_iter(match=pattern)]

    async def delete_pattern(self, pattern: str) -> int:
        """Delete keys matching pattern using SCAN + batched UNLINK."""
        deleted = 0
        chunk: list[str] = []
        async for key in self.client.scan_iter(match=pattern):
            chunk.append(key)
            if len(chunk) >= _UNLINK_CHUNK_SIZE:
                deleted += await self._unlink(chunk)
                chunk = []
        if chunk:
            deleted += await self._unlink(chunk)
        return deleted

    async def delete_keys(self, keys: list[str]) -> int:
        """UNLINK the given keys in batches. Returns number removed."""
        deleted = 0
        for start in range(0, len(keys), _UNLINK_CHUNK_SIZE):
            deleted += await self._unlink(keys[start : start + _UNLINK_CHUNK_SIZE])
        return deleted

    async def _unlink(self, keys: list[str]) -> int:
        async with self.client.pipeline(transaction=False) as pipe:
            pipe.unlink(*keys)
            results = await pipe.execute()
        return sum(int(r or 0) for r in results)

    async def flush(self) -> None:
        # Scoped to the configured database index, not the whole server.
        await self.client.flushdb()

    async def sadd(self, key: str, *members: str) -> int:
        return int(await self.client.sadd(key, *members))

    async def srem(self, key: str, *members: str) -> int:
        return int(await self.client.srem(key, *members))

    async def smembers(self, key: str) -> set[str]:
        return set(await self.client.smembers(key))

    async def sismember(self, key: str, member: str) -> bool:
        return bool(await self.client.sismember(key, member))

    async def scard(self, key: str) -> int:
        return int(await self.client.scard(key))

    async def info(self, section: str) -> dict[str, Any]:
        """Return a parsed INFO section (e.g. "memory", "clients")."""
        return await self.client.info(section)

    async def ping(self) -> bool:
        return bool(await self.client.ping())
