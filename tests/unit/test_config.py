"""Settings: defaults, environment overrides, validation."""

import pytest
from pydantic import ValidationError

from afrikmode.core.config import Settings, get_settings
from afrikmode.shared.enums import CacheMode, CacheStatus, ConnectionState


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("REDIS_ENABLED", "REDIS_HOST", "REDIS_PORT", "CACHE_TTL"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.redis_enabled is True
    assert settings.redis_host == "localhost"
    assert settings.redis_port == 6379
    assert settings.redis_db == 0
    assert settings.redis_password is None
    assert settings.redis_connect_timeout == 5.0
    assert settings.cache_ttl == 3600
    assert settings.redis_url == "redis://localhost:6379/0"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REDIS_ENABLED", "false")
    monkeypatch.setenv("REDIS_HOST", "cache.internal")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.setenv("REDIS_DB", "2")
    monkeypatch.setenv("REDIS_PASSWORD", "hunter2")
    monkeypatch.setenv("CACHE_TTL", "120")
    settings = Settings()
    assert settings.redis_enabled is False
    assert settings.redis_url == "redis://cache.internal:6380/2"
    assert settings.redis_password.get_secret_value() == "hunter2"
    assert "hunter2" not in settings.redis_url
    assert settings.cache_ttl == 120


@pytest.mark.parametrize(
    "override",
    [
        {"redis_connect_timeout": 0},
        {"cache_ttl": 0},
        {"redis_health_check_interval": -1},
        {"redis_db": 16},
        {"cache_sweep_interval_seconds": 0},
    ],
)
def test_invalid_values_rejected(override: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(**override)


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


def test_enum_values() -> None:
    assert ConnectionState.values() == ["disconnected", "connecting", "ready", "degraded"]
    assert CacheStatus.values() == ["connected", "disconnected", "error"]
    assert CacheMode.values() == ["store", "degraded"]
