"""ConnectionManager: bounded connect, degraded mode, liveness notifications, shutdown."""

import asyncio
from unittest.mock import AsyncMock

import redis.asyncio as redis

from afrikmode.core.config import Settings
from afrikmode.infrastructure.cache.connection import ConnectionManager
from afrikmode.shared.enums import ConnectionState
from tests.fakes import FakeRedis


def _manager(settings: Settings, client) -> ConnectionManager:
    return ConnectionManager(settings, client_factory=lambda **kwargs: client)


async def test_disabled_redis_never_builds_client() -> None:
    factory = AsyncMock()
    manager = ConnectionManager(Settings(redis_enabled=False), client_factory=factory)
    assert await manager.initialize() is False
    factory.assert_not_called()
    assert manager.state is ConnectionState.DISCONNECTED
    assert manager.is_connected is False
    assert manager.client is None


async def test_successful_connect_is_ready(redis_settings: Settings) -> None:
    manager = ConnectionManager(redis_settings, client_factory=FakeRedis)
    assert await manager.initialize() is True
    assert manager.state is ConnectionState.READY
    assert manager.is_connected is True
    kwargs = manager.client.kwargs
    assert kwargs["host"] == "localhost"
    assert kwargs["port"] == 6379
    assert kwargs["db"] == 0
    assert kwargs["password"] is None
    assert kwargs["decode_responses"] is True
    assert kwargs["socket_connect_timeout"] == 0.5


async def test_password_is_unwrapped_for_client() -> None:
    settings = Settings(redis_enabled=True, redis_password="s3cret", redis_health_check_interval=0)
    manager = ConnectionManager(settings, client_factory=FakeRedis)
    await manager.initialize()
    assert manager.client.kwargs["password"] == "s3cret"


async def test_connection_refused_moves_to_degraded(redis_settings: Settings) -> None:
    client = FakeRedis()
    client.fail_with = redis.ConnectionError("Connection refused")
    manager = _manager(redis_settings, client)
    assert await manager.initialize() is False
    assert manager.state is ConnectionState.DEGRADED
    assert manager.client is None
    assert client.closed is True


async def test_connect_timeout_moves_to_degraded(redis_settings: Settings) -> None:
    """A ping that never answers is cut off by the connect timeout."""

    async def hang() -> bool:
        await asyncio.sleep(10)
        return True

    client = AsyncMock()
    client.ping = hang
    manager = _manager(redis_settings.model_copy(update={"redis_connect_timeout": 0.05}), client)
    assert await manager.initialize() is False
    assert manager.state is ConnectionState.DEGRADED
    client.aclose.assert_awaited_once()


async def test_failed_connect_is_permanent(redis_settings: Settings) -> None:
    """No client survives a failed connect, so ready notifications are ignored."""
    client = FakeRedis()
    client.fail_with = redis.ConnectionError("down")
    manager = _manager(redis_settings, client)
    await manager.initialize()
    manager.notify_ready()
    assert manager.state is ConnectionState.DEGRADED
    assert await manager.check_liveness() is False
    assert await manager.initialize() is False


async def test_initialize_is_idempotent(connected_manager: ConnectionManager) -> None:
    client = connected_manager.client
    assert await connected_manager.initialize() is True
    assert connected_manager.client is client


class TestNotifications:
    """State changes driven by liveness notifications after a good connect."""

    async def test_error_flips_to_degraded_without_raising(self, connected_manager) -> None:
        connected_manager.notify_error(redis.ConnectionError("reset by peer"))
        assert connected_manager.state is ConnectionState.DEGRADED
        assert connected_manager.is_connected is False
        connected_manager.notify_error(redis.ConnectionError("still down"))
        assert connected_manager.state is ConnectionState.DEGRADED

    async def test_ready_restores_after_error(self, connected_manager) -> None:
        connected_manager.notify_error(redis.ConnectionError("blip"))
        connected_manager.notify_reconnecting()
        connected_manager.notify_ready()
        assert connected_manager.state is ConnectionState.READY
        assert connected_manager.is_connected is True

    async def test_closed_flips_to_degraded(self, connected_manager) -> None:
        connected_manager.notify_closed()
        assert connected_manager.state is ConnectionState.DEGRADED

    async def test_connected_does_not_change_state(self, connected_manager) -> None:
        connected_manager.notify_connected()
        assert connected_manager.state is ConnectionState.READY


class TestLiveness:
    async def test_ping_failure_degrades_then_recovery_restores(
        self, connected_manager, fake_redis: FakeRedis
    ) -> None:
        fake_redis.fail_with = redis.ConnectionError("gone")
        assert await connected_manager.check_liveness() is False
        assert connected_manager.state is ConnectionState.DEGRADED
        fake_redis.fail_with = None
        assert await connected_manager.check_liveness() is True
        assert connected_manager.state is ConnectionState.READY

    async def test_watcher_observes_outage(self, redis_settings: Settings, fake_redis: FakeRedis) -> None:
        settings = redis_settings.model_copy(update={"redis_health_check_interval": 0.01})
        manager = _manager(settings, fake_redis)
        await manager.initialize()
        manager.start_watcher()
        fake_redis.fail_with = redis.ConnectionError("gone")
        await asyncio.sleep(0.05)
        assert manager.state is ConnectionState.DEGRADED
        fake_redis.fail_with = None
        await asyncio.sleep(0.05)
        assert manager.state is ConnectionState.READY
        await manager.shutdown()

    def test_watcher_not_started_without_client(self) -> None:
        manager = ConnectionManager(Settings(redis_enabled=False))
        manager.start_watcher()
        assert manager._watcher is None


class TestShutdown:
    async def test_shutdown_closes_client(self, redis_settings: Settings, fake_redis: FakeRedis) -> None:
        manager = _manager(redis_settings, fake_redis)
        await manager.initialize()
        await manager.shutdown()
        assert fake_redis.closed is True
        assert manager.client is None
        assert manager.state is ConnectionState.DISCONNECTED

    async def test_shutdown_swallows_close_errors(self, redis_settings: Settings) -> None:
        client = AsyncMock()
        client.ping = AsyncMock(return_value=True)
        client.aclose = AsyncMock(side_effect=redis.ConnectionError("already closed"))
        manager = _manager(redis_settings, client)
        await manager.initialize()
        await manager.shutdown()
        assert manager.state is ConnectionState.DISCONNECTED

    async def test_shutdown_without_connect_is_noop(self) -> None:
        manager = ConnectionManager(Settings(redis_enabled=False))
        await manager.shutdown()
        assert manager.state is ConnectionState.DISCONNECTED


class TestListeners:
    async def test_listener_sees_each_transition(self, redis_settings: Settings) -> None:
        client = FakeRedis()
        manager = _manager(redis_settings, client)
        seen: list[tuple[ConnectionState, ConnectionState]] = []
        manager.add_listener(lambda previous, current: seen.append((previous, current)))

        await manager.initialize()
        client.fail_with = redis.ConnectionError("gone")
        await manager.check_liveness()
        await manager.check_liveness()

        assert seen == [
            (ConnectionState.DISCONNECTED, ConnectionState.CONNECTING),
            (ConnectionState.CONNECTING, ConnectionState.READY),
            (ConnectionState.READY, ConnectionState.DEGRADED),
        ]
        await manager.shutdown()

    async def test_failing_listener_does_not_block_state_change(self, connected_manager) -> None:
        def broken(previous: ConnectionState, current: ConnectionState) -> None:
            raise RuntimeError("listener bug")

        connected_manager.add_listener(broken)
        connected_manager.notify_error(redis.ConnectionError("reset by peer"))
        assert connected_manager.state is ConnectionState.DEGRADED
