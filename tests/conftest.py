"""Pytest configuration and fixtures for the cache service.

The app is built with Redis disabled so API tests run against the
in-memory fallback; connected-mode tests inject tests.fakes.FakeRedis
through ConnectionManager's client_factory.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("TELEMETRY_ENABLED", "false")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from afrikmode.core.config import Settings, get_settings  # noqa: E402
from afrikmode.infrastructure.cache import (  # noqa: E402
    CacheService,
    ConnectionManager,
    MemoryStore,
)
from tests.fakes import FakeRedis  # noqa: E402

get_settings.cache_clear()

from afrikmode.main import app  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def redis_settings() -> Settings:
    """Settings with Redis enabled and the liveness watcher off."""
    return Settings(
        redis_enabled=True,
        redis_connect_timeout=0.5,
        redis_health_check_interval=0,
        cache_ttl=3600,
    )


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
async def connected_manager(redis_settings: Settings, fake_redis: FakeRedis) -> ConnectionManager:
    """ConnectionManager in ready state over FakeRedis."""
    manager = ConnectionManager(redis_settings, client_factory=lambda **kwargs: fake_redis)
    assert await manager.initialize() is True
    yield manager
    await manager.shutdown()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def connected_cache(connected_manager: ConnectionManager, clock: FakeClock) -> CacheService:
    """CacheService routing to FakeRedis."""
    return CacheService(connected_manager, fallback=MemoryStore(clock=clock))


@pytest.fixture
def degraded_cache(clock: FakeClock) -> CacheService:
    """CacheService with Redis disabled (fallback serves every call)."""
    manager = ConnectionManager(Settings(redis_enabled=False))
    return CacheService(manager, fallback=MemoryStore(clock=clock))


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), lifespan included."""
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    app.dependency_overrides.clear()
