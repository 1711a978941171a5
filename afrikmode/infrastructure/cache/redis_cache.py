"""Cache service: the one cache interface the rest of the platform calls.

Routes every call to Redis while the ConnectionManager reports it ready,
and to the in-memory fallback otherwise. A connectivity error during a
call is logged and the same call is served by the fallback, so callers
see the same results whether Redis is up or down. Values pass through a
Serializer at this boundary; backends only see text payloads.

The fallback only ever holds writes from the current outage: it is
cleared whenever routing switches between Redis and memory. Keys written
or deleted in memory during an outage are deleted from Redis before the
first call after recovery, so Redis never serves a value older than one
the caller replaced or removed while it was unreachable.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

import redis.asyncio as redis

from afrikmode.core.constants import CACHE_KEY_SEP, CACHE_MATCH_ALL
from afrikmode.domain.exceptions import CacheSerializationError
from afrikmode.infrastructure.cache.cache_protocol import CacheBackend
from afrikmode.infrastructure.cache.connection import (
    CONNECTIVITY_ERRORS,
    ConnectionManager,
)
from afrikmode.infrastructure.cache.memory_store import MemoryStore
from afrikmode.infrastructure.cache.redis_store import RedisStore
from afrikmode.infrastructure.cache.serializers import JsonSerializer, Serializer
from afrikmode.shared.enums import CacheMode, CacheStatus, ConnectionState
from afrikmode.shared.telemetry.tracing import add_span_event

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Returned by _run when Redis refused a write; nothing was stored anywhere.
_REJECTED: Any = object()


class CacheService:
    """Async cache facade with transparent in-memory degradation.

    Never raises for connectivity reasons: reads miss and writes are
    accepted by the fallback. Writes return False when the value cannot
    be encoded or when a connected Redis refuses the command (OOM,
    READONLY); such a write is not redirected to memory.
    """

    def __init__(
        self,
        manager: ConnectionManager,
        fallback: MemoryStore | None = None,
        serializer: Serializer | None = None,
        default_ttl: int | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            manager: Connection manager owning the Redis client.
            fallback: In-memory store used while Redis is unavailable.
            serializer: Value codec; JSON by default.
            default_ttl: TTL in seconds when set() gets none; CACHE_TTL by default.
        """
        self.manager = manager
        self.fallback = fallback if fallback is not None else MemoryStore()
        self.serializer = serializer or JsonSerializer()
        self.default_ttl = default_ttl if default_ttl is not None else manager.settings.cache_ttl
        self._redis_store: RedisStore | None = None
        # Writes served by memory while a Redis client exists but is down.
        self._outage_keys: set[str] = set()
        self._outage_patterns: set[str] = set()
        self._outage_flush = False
        manager.add_listener(self._on_state_change)

    def is_available(self) -> bool:
        """Return True if Redis is connected and serving calls."""
        return self.manager.is_connected

    def _on_state_change(self, previous: ConnectionState, current: ConnectionState) -> None:
        if current in (ConnectionState.DEGRADED, ConnectionState.READY):
            dropped = self.fallback.clear()
            if dropped:
                logger.info(
                    "Dropped %s fallback cache entries (%s -> %s)",
                    dropped,
                    previous.value,
                    current.value,
                )

    def _backend(self) -> CacheBackend:
        """Pick the backend for this call from the current connection state."""
        client = self.manager.client
        if not self.manager.is_connected or client is None:
            return self.fallback
        if self._redis_store is None or self._redis_store.client is not client:
            self._redis_store = RedisStore(client)
        return self._redis_store

    def _record_outage_write(self, operation: str, target: str) -> None:
        if self.manager.client is None:
            # Redis disabled or never reached: memory is the only store.
            return
        if operation == "flush_all":
            self._outage_flush = True
            self._outage_keys.clear()
            self._outage_patterns.clear()
        elif self._outage_flush:
            return
        elif operation == "delete_pattern":
            self._outage_patterns.add(target)
        else:
            self._outage_keys.add(target)

    async def _reconcile(self, store: RedisStore) -> None:
        """Delete from Redis what was written or deleted in memory during an outage."""
        if not (self._outage_flush or self._outage_keys or self._outage_patterns):
            return
        flush, keys, patterns = self._outage_flush, self._outage_keys, self._outage_patterns
        self._outage_flush, self._outage_keys, self._outage_patterns = False, set(), set()
        try:
            if flush:
                await store.flush()
            else:
                if keys:
                    await store.delete_keys(sorted(keys))
                for pattern in sorted(patterns):
                    await store.delete_pattern(pattern)
        except CONNECTIVITY_ERRORS:
            self._outage_flush = self._outage_flush or flush
            self._outage_keys |= keys
            self._outage_patterns |= patterns
            raise
        except redis.RedisError:
            logger.exception("Failed to clear outage writes from Redis")
            return
        logger.info(
            "Reconciled Redis after outage (flush: %s, keys: %s, patterns: %s)",
            flush,
            len(keys),
            len(patterns),
        )

    async def _run(
        self,
        operation: str,
        target: str,
        call: Callable[[CacheBackend], Awaitable[T]],
        write: bool = False,
    ) -> T:
        """Run call on the selected backend, falling back once on Redis errors.

        A write refused by a reachable Redis returns _REJECTED instead of
        landing in memory, where the next read would never see it.
        """
        backend = self._backend()
        if isinstance(backend, RedisStore):
            try:
                await self._reconcile(backend)
                return await call(backend)
            except CONNECTIVITY_ERRORS as e:
                logger.warning(
                    "Cache %s unavailable for %s (Redis disconnected): %s", operation, target, e
                )
                self.manager.notify_error(e)
            except redis.RedisError:
                logger.exception("Cache %s error for %s", operation, target)
                if write:
                    return _REJECTED
            add_span_event("cache.fallback", {"cache.operation": operation, "cache.key": target})
        if write:
            self._record_outage_write(operation, target)
        return await call(self.fallback)

    async def get(self, key: str) -> Any | None:
        """Return cached value (deserialized) or None if missing/expired.

        Args:
            key: Cache key (use afrikmode.infrastructure.cache.keys builders).

        Returns:
            Cached value or None.
        """
        payload = await self._run("get", key, lambda b: b.get(key))
        if payload is None:
            logger.debug("Cache MISS: %s", key)
            return None
        try:
            value = self.serializer.loads(payload)
        except CacheSerializationError as e:
            logger.warning("Discarding undecodable cache entry %s: %s", key, e.message)
            return None
        logger.debug("Cache HIT: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store value with TTL. Returns True when the write was accepted.

        Args:
            key: Cache key.
            value: Value to cache (must be serializable).
            ttl: Time-to-live in seconds; None uses the default, 0 means no expiry.

        Returns:
            True if stored, False if value could not be serialized or
            Redis refused the write.
        """
        try:
            payload = self.serializer.dumps(value)
        except CacheSerializationError as e:
            logger.error("Cache set rejected for key %s: %s", key, e.message)
            return False
        effective_ttl = self.default_ttl if ttl is None else ttl
        result = await self._run(
            "set", key, lambda b: b.set(key, payload, effective_ttl), write=True
        )
        if result is _REJECTED:
            return False
        logger.debug("Cache SET: %s (TTL: %ss)", key, effective_ttl)
        return True

    async def delete(self, key: str) -> bool:
        """Remove key from cache. Returns True once the delete was accepted."""
        if await self._run("delete", key, lambda b: b.delete(key), write=True) is _REJECTED:
            return False
        logger.debug("Cache DELETE: %s", key)
        return True

    async def exists(self, key: str) -> bool:
        """Return True if key holds a live (non-expired) entry."""
        return await self._run("exists", key, lambda b: b.exists(key))

    async def keys(self, pattern: str = CACHE_MATCH_ALL) -> list[str]:
        """Return keys matching a glob-style pattern (e.g. ``user:*``)."""
        return await self._run("keys", pattern, lambda b: b.keys(pattern))

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern. Returns number of keys deleted."""
        deleted = await self._run(
            "delete_pattern", pattern, lambda b: b.delete_pattern(pattern), write=True
        )
        if deleted is _REJECTED:
            return 0
        if deleted > 0:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
        return deleted

    async def flush_all(self) -> bool:
        """Clear entire cache. Use with caution."""
        if await self._run("flush_all", CACHE_MATCH_ALL, lambda b: b.flush(), write=True) is _REJECTED:
            return False
        logger.warning("Cache CLEARED: all keys deleted")
        return True

    async def sadd(self, key: str, *members: str) -> bool:
        """Add members to the set at key."""
        return await self._run("sadd", key, lambda b: b.sadd(key, *members), write=True) is not _REJECTED

    async def srem(self, key: str, *members: str) -> bool:
        """Remove members from the set at key."""
        return await self._run("srem", key, lambda b: b.srem(key, *members), write=True) is not _REJECTED

    async def smembers(self, key: str) -> set[str]:
        return await self._run("smembers", key, lambda b: b.smembers(key))

    async def sismember(self, key: str, member: str) -> bool:
        return await self._run("sismember", key, lambda b: b.sismember(key, member))

    async def scard(self, key: str) -> int:
        return await self._run("scard", key, lambda b: b.scard(key))

    async def ping(self) -> bool:
        """Return True if Redis answers PING; False when degraded or failing."""
        backend = self._backend()
        if not isinstance(backend, RedisStore):
            return False
        try:
            return await backend.ping()
        except CONNECTIVITY_ERRORS as e:
            self.manager.notify_error(e)
            return False
        except redis.RedisError:
            logger.exception("Cache ping error")
            return False

    async def get_stats(self) -> dict[str, Any]:
        """Describe current cache health for operational visibility.

        Returns:
            Dict with status (connected/disconnected/error), mode
            (store/degraded), connection state and backend details.
        """
        state = self.manager.state.value
        backend = self._backend()
        if not isinstance(backend, RedisStore):
            return {
                "status": CacheStatus.DISCONNECTED.value,
                "mode": CacheMode.DEGRADED.value,
                "state": state,
                "memory": None,
                "connections": None,
                "fallback_size": self.fallback.size(),
                "fallback_keys": sorted(await self.fallback.keys()),
            }
        try:
            memory = await backend.info("memory")
            connections = await backend.info("clients")
        except (redis.RedisError, *CONNECTIVITY_ERRORS) as e:
            logger.warning("Cache stats unavailable: %s", e)
            return {
                "status": CacheStatus.ERROR.value,
                "mode": CacheMode.DEGRADED.value,
                "state": state,
                "error": str(e),
            }
        return {
            "status": CacheStatus.CONNECTED.value,
            "mode": CacheMode.STORE.value,
            "state": state,
            "memory": memory,
            "connections": connections,
        }


def _resolve_cache(args: tuple[Any, ...], kwargs: dict[str, Any]) -> tuple[CacheService | None, tuple[Any, ...], dict[str, Any]]:
    """Resolve CacheService and args/kwargs for the wrapped function.

    Resolution order: keyword "cache", then args[0] if CacheService, then
    args[0].cache.
    """
    if "cache" in kwargs and isinstance(kwargs.get("cache"), CacheService):
        cache = kwargs["cache"]
        call_kwargs = {k: v for k, v in kwargs.items() if k != "cache"}
        return cache, args, call_kwargs
    if args:
        first = args[0]
        if isinstance(first, CacheService):
            return first, args[1:], kwargs
        cache_attr = getattr(first, "cache", None)
        if isinstance(cache_attr, CacheService):
            return cache_attr, args[1:], kwargs
    return None, args, kwargs


def cached(
    key_prefix: str,
    ttl: int | None = None,
    key_builder: Callable[..., str] | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to cache async function results through CacheService.

    The wrapped function must receive a CacheService in one of these ways:
    - keyword argument "cache" (recommended, e.g. from Depends),
    - first argument is the CacheService instance,
    - or first argument has a .cache attribute that is a CacheService.

    Args:
        key_prefix: Prefix for cache key (e.g. 'products').
        ttl: Time-to-live in seconds; None uses the service default.
        key_builder: Optional callable(*args, **kwargs) -> key, such as a
            builder from afrikmode.infrastructure.cache.keys; else the key is
            key_prefix and the args joined with CACHE_KEY_SEP.

    Returns:
        Decorator that caches return value when CacheService is resolved.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            cache, func_args, call_kwargs = _resolve_cache(args, kwargs)
            if cache is None:
                return await func(*args, **kwargs)
            if key_builder:
                cache_key = key_builder(*func_args, **call_kwargs)
            else:
                parts = [str(a) for a in func_args]
                parts.extend(f"{k}={v}" for k, v in sorted(call_kwargs.items()))
                cache_key = CACHE_KEY_SEP.join([key_prefix, *parts])
            cached_value = await cache.get(cache_key)
            if cached_value is not None:
                return cached_value
            result = await func(*args, **kwargs)
            await cache.set(cache_key, result, ttl=ttl)
            return result

        return wrapper

    return decorator
