"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Every field is optional; defaults match a local
Redis on the standard port.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "afrikmode-cache"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000"

    # Redis Cache
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_connect_timeout: float = 5.0
    # Liveness watcher period; 0 disables the watcher.
    redis_health_check_interval: float = 30.0

    cache_ttl: int = 3600
    cache_sweep_interval_seconds: float = 600.0

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_cache_settings(self) -> "Settings":
        """Reject values the cache layer cannot work with."""
        if self.redis_connect_timeout <= 0:
            raise ValueError("REDIS_CONNECT_TIMEOUT must be greater than 0 seconds.")
        if self.cache_ttl <= 0:
            raise ValueError("CACHE_TTL must be greater than 0 seconds.")
        if self.redis_health_check_interval < 0:
            raise ValueError("REDIS_HEALTH_CHECK_INTERVAL must not be negative.")
        if self.cache_sweep_interval_seconds <= 0:
            raise ValueError("CACHE_SWEEP_INTERVAL_SECONDS must be greater than 0 seconds.")
        if not 0 <= self.redis_db <= 15:
            raise ValueError(f"REDIS_DB must be between 0 and 15, got: {self.redis_db}")
        return self

    @property
    def redis_url(self) -> str:
        """Connection URL without credentials (safe to log)."""
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
