"""Redis connection lifecycle: bounded connect, liveness tracking, shutdown.

ConnectionManager owns the single Redis client of the process. It makes
one bounded connection attempt at startup; if that fails the client is
discarded and the process stays degraded. After a successful connect it
observes liveness (watcher pings and errors reported by CacheService) and
flips between ready and degraded while redis-py reconnects on its own.
Every state change is published to registered listeners.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import redis.asyncio as redis

from afrikmode.core.config import Settings, get_settings
from afrikmode.shared.enums import ConnectionState
from afrikmode.shared.telemetry.tracing import traced

logger = logging.getLogger(__name__)

# Errors that mean "store unreachable" rather than "bad command".
CONNECTIVITY_ERRORS: tuple[type[BaseException], ...] = (
    redis.ConnectionError,
    redis.TimeoutError,
    asyncio.TimeoutError,
    OSError,
)

StateListener = Callable[[ConnectionState, ConnectionState], None]


class ConnectionManager:
    """Creates and supervises the Redis client.

    Build once at startup, call initialize(), then hand the instance to
    CacheService. Call shutdown() on exit.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client_factory: Callable[..., Any] | None = None,
    ) -> None:
        """Initialize connection manager.

        Args:
            settings: Connection settings; defaults to get_settings().
            client_factory: Optional Redis client constructor for testing or DI.
        """
        self.settings = settings or get_settings()
        self._client_factory = client_factory or redis.Redis
        self._client: Any = None
        self._state = ConnectionState.DISCONNECTED
        self._watcher: asyncio.Task[None] | None = None
        self._reconnect_logged = False
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        """True when Redis is ready to serve calls."""
        return self._state is ConnectionState.READY and self._client is not None

    @property
    def client(self) -> Any:
        """The live Redis client, or None when none was established."""
        return self._client

    def add_listener(self, listener: StateListener) -> None:
        """Call listener(previous, current) after every state change."""
        self._listeners.append(listener)

    def _set_state(self, state: ConnectionState) -> bool:
        """Move to state and notify listeners. Returns False when already there."""
        previous = self._state
        if previous is state:
            return False
        logger.debug("Redis connection state: %s -> %s", previous.value, state.value)
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(previous, state)
            except Exception:
                logger.exception("Connection state listener failed")
        return True

    @traced("cache.connect")
    async def initialize(self) -> bool:
        """Make one bounded connection attempt. Returns True when ready.

        Never raises: on timeout or connection failure the manager moves
        to degraded and the fallback store serves every cache call.
        """
        if not self.settings.redis_enabled:
            logger.warning("Redis disabled via REDIS_ENABLED=false; using in-memory cache")
            return False
        if self._state is not ConnectionState.DISCONNECTED:
            return self.is_connected

        self._set_state(ConnectionState.CONNECTING)
        logger.info("Connecting to Redis at %s", self.settings.redis_url)
        timeout = self.settings.redis_connect_timeout
        client = self._client_factory(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            password=self.settings.redis_password.get_secret_value() if self.settings.redis_password else None,
            decode_responses=True,
            socket_connect_timeout=timeout,
            socket_keepalive=True,
        )
        try:
            await asyncio.wait_for(client.ping(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Redis connection timed out after %ss; degraded mode enabled",
                timeout,
            )
        except (redis.RedisError, OSError) as e:
            logger.warning("Redis unavailable (%s); degraded mode enabled", e)
        else:
            self._client = client
            self.notify_connected()
            self.notify_ready()
            return True

        await self._close_client(client)
        self._set_state(ConnectionState.DEGRADED)
        return False

    def notify_connected(self) -> None:
        """Socket established; readiness follows with notify_ready()."""
        logger.debug("Redis connection established")

    def notify_ready(self) -> None:
        """Redis answered; route calls to it again."""
        if self._client is None:
            return
        self._reconnect_logged = False
        if self._set_state(ConnectionState.READY):
            logger.info("Redis connected and ready")

    def notify_error(self, error: BaseException) -> None:
        """A connection error was observed; serve from memory until ready."""
        if self._client is None:
            return
        if self._set_state(ConnectionState.DEGRADED):
            logger.warning("Redis error: %s; degraded mode enabled", error)
        else:
            logger.debug("Redis still unavailable: %s", error)

    def notify_reconnecting(self) -> None:
        if self._client is None or self._reconnect_logged:
            return
        self._reconnect_logged = True
        logger.info("Reconnecting to Redis...")

    def notify_closed(self) -> None:
        """The server closed the connection."""
        if self._client is None:
            return
        if self._set_state(ConnectionState.DEGRADED):
            logger.info("Redis connection closed; degraded mode enabled")

    async def check_liveness(self) -> bool:
        """Ping the existing client and report the outcome.

        Returns True when Redis answered. Never creates a new client.
        """
        client = self._client
        if client is None:
            return False
        if self._state is ConnectionState.DEGRADED:
            self.notify_reconnecting()
        try:
            await asyncio.wait_for(client.ping(), timeout=self.settings.redis_connect_timeout)
        except CONNECTIVITY_ERRORS as e:
            self.notify_error(e)
            return False
        except redis.RedisError as e:
            logger.warning("Redis liveness check failed: %s", e)
            self.notify_error(e)
            return False
        self.notify_ready()
        return True

    def start_watcher(self) -> None:
        """Start the periodic liveness check (no-op without a client or interval)."""
        interval = self.settings.redis_health_check_interval
        if self._client is None or interval <= 0 or self._watcher is not None:
            return
        self._watcher = asyncio.create_task(self._watch(interval), name="redis-liveness-watcher")

    async def _watch(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.check_liveness()

    async def shutdown(self) -> None:
        """Stop the watcher and close the client. Failures are logged only."""
        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.cancel()
            try:
                await watcher
            except asyncio.CancelledError:
                pass
        client, self._client = self._client, None
        if client is not None:
            await self._close_client(client)
            logger.info("Redis disconnected")
        self._set_state(ConnectionState.DISCONNECTED)

    @staticmethod
    async def _close_client(client: Any) -> None:
        try:
            await client.aclose()
        except Exception:
            logger.exception("Error while closing Redis connection")
