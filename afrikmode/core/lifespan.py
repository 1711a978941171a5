"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (cache connection,
fallback sweeper, telemetry).
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from afrikmode.core.config import get_settings
from afrikmode.infrastructure.cache import CacheService, ConnectionManager, MemoryStore
from afrikmode.infrastructure.cache.sweeper import run_fallback_sweep

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: telemetry (if enabled), Redis connection (bounded
    attempt, never fatal), cache service, fallback sweeper. Shutdown
    order: sweeper cancel, Redis disconnect, telemetry shutdown.
    """
    settings = get_settings()

    # ---- Startup ----
    if settings.telemetry_enabled:
        from afrikmode.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig.from_settings(settings)
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument(app)
        logger.info("Telemetry initialized")

    manager = ConnectionManager(settings)
    await manager.initialize()
    manager.start_watcher()
    fallback = MemoryStore()
    app.state.cache_manager = manager
    app.state.cache = CacheService(manager, fallback=fallback)
    app.state.cache_sweep_task = asyncio.create_task(
        run_fallback_sweep(fallback, settings.cache_sweep_interval_seconds)
    )
    logger.info(
        "Cache ready (mode: %s)", "redis" if manager.is_connected else "in-memory"
    )

    yield

    # ---- Shutdown ----
    sweep_task = getattr(app.state, "cache_sweep_task", None)
    if sweep_task is not None:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass
        app.state.cache_sweep_task = None
        logger.info("Fallback cache sweeper stopped")

    if getattr(app.state, "cache_manager", None) is not None:
        await app.state.cache_manager.shutdown()
        logger.info("Cache disconnected")

    from afrikmode.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
        logger.info("Telemetry shutdown complete")
