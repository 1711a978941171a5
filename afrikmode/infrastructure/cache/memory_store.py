"""In-process fallback store used while Redis is unreachable.

Mirrors the Redis commands CacheService needs (strings with TTL, sets,
glob key listing, flush) over a plain dict. Expiry is lazy: entries are
dropped when read; sweep_expired() reclaims the rest for memory hygiene.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from fnmatch import fnmatchcase


@dataclass
class _Entry:
    """Stored value (payload or set members) and its monotonic expiry."""

    value: str | set[str]
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryStore:
    """Dict-backed cache with TTL support.

    Single event loop only; no locking. A string command on a set key (or
    the reverse) treats the key as absent and overwrites it on write.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._store: dict[str, _Entry] = {}

    def _live(self, key: str) -> _Entry | None:
        """Return the entry for key, dropping it if expired."""
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._store[key]
            return None
        return entry

    def _live_set(self, key: str) -> set[str] | None:
        entry = self._live(key)
        if entry is None or not isinstance(entry.value, set):
            return None
        return entry.value

    async def get(self, key: str) -> str | None:
        entry = self._live(key)
        if entry is None or isinstance(entry.value, set):
            return None
        return entry.value

    async def set(self, key: str, payload: str, ttl: int | None = None) -> None:
        expires_at = None
        if ttl is not None and ttl > 0:
            expires_at = self._clock() + ttl
        self._store[key] = _Entry(payload, expires_at)

    async def delete(self, key: str) -> bool:
        if self._live(key) is None:
            return False
        del self._store[key]
        return True

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def keys(self, pattern: str = "*") -> list[str]:
        now = self._clock()
        return [
            key
            for key, entry in self._store.items()
            if not entry.is_expired(now) and fnmatchcase(key, pattern)
        ]

    async def delete_pattern(self, pattern: str) -> int:
        matched = await self.keys(pattern)
        for key in matched:
            del self._store[key]
        return len(matched)

    async def flush(self) -> None:
        self.clear()

    def clear(self) -> int:
        """Drop every entry synchronously. Returns the number dropped."""
        dropped = len(self._store)
        self._store.clear()
        return dropped

    async def sadd(self, key: str, *members: str) -> int:
        current = self._live_set(key)
        if current is None:
            current = set()
            self._store[key] = _Entry(current)
        added = set(members) - current
        current.update(added)
        return len(added)

    async def srem(self, key: str, *members: str) -> int:
        current = self._live_set(key)
        if current is None:
            return 0
        removed = current & set(members)
        current.difference_update(removed)
        if not current:
            del self._store[key]
        return len(removed)

    async def smembers(self, key: str) -> set[str]:
        return set(self._live_set(key) or ())

    async def sismember(self, key: str, member: str) -> bool:
        return member in (self._live_set(key) or ())

    async def scard(self, key: str) -> int:
        return len(self._live_set(key) or ())

    def sweep_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = self._clock()
        expired = [key for key, entry in self._store.items() if entry.is_expired(now)]
        for key in expired:
            del self._store[key]
        return len(expired)

    def size(self) -> int:
        """Number of live (non-expired) entries."""
        now = self._clock()
        return sum(1 for entry in self._store.values() if not entry.is_expired(now))
