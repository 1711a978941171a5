"""Shared enumerations for the cache service.

Cross-cutting enums used by infrastructure (connection lifecycle) and
the API layer (stats payloads).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ConnectionState(_ValuesMixin, str, Enum):
    """Lifecycle state of the link to the external store."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    READY = "ready"
    DEGRADED = "degraded"


class CacheStatus(_ValuesMixin, str, Enum):
    """Health status reported by CacheService.get_stats()."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class CacheMode(_ValuesMixin, str, Enum):
    """Which backend is serving cache calls."""

    STORE = "store"
    DEGRADED = "degraded"
