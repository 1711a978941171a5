"""Cache backend protocol: the strategy CacheService routes calls to.

Backends store opaque text payloads; encoding and decoding happen in
CacheService through a Serializer, so every backend sees the same form.
"""

from __future__ import annotations

from typing import Protocol


class CacheBackend(Protocol):
    """Protocol for cache backends (Redis, in-memory fallback)."""

    async def get(self, key: str) -> str | None:
        """Return the stored payload or None if missing/expired."""
        ...

    async def set(self, key: str, payload: str, ttl: int | None = None) -> None:
        """Store payload; ttl in seconds, None or <= 0 means no expiry."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key. Return True if it existed."""
        ...

    async def exists(self, key: str) -> bool:
        """Return True if key is present and not expired."""
        ...

    async def keys(self, pattern: str = "*") -> list[str]:
        """Return keys matching a glob-style pattern."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Remove keys matching pattern. Return number removed."""
        ...

    async def flush(self) -> None:
        """Remove every key."""
        ...

    async def sadd(self, key: str, *members: str) -> int:
        """Add members to the set at key. Return number newly added."""
        ...

    async def srem(self, key: str, *members: str) -> int:
        """Remove members from the set at key. Return number removed."""
        ...

    async def smembers(self, key: str) -> set[str]:
        """Return all members of the set at key."""
        ...

    async def sismember(self, key: str, member: str) -> bool:
        """Return True if member belongs to the set at key."""
        ...

    async def scard(self, key: str) -> int:
        """Return the number of members in the set at key."""
        ...
