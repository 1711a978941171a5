"""Periodic sweep of expired fallback entries.

MemoryStore expires entries lazily on read; keys that are never read
again would otherwise stay in memory for the life of the process.
"""

import asyncio
import logging

from afrikmode.infrastructure.cache.memory_store import MemoryStore

logger = logging.getLogger(__name__)


async def run_fallback_sweep(store: MemoryStore, interval_seconds: float) -> None:
    """Sweep expired entries every interval_seconds until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = store.sweep_expired()
        if removed:
            logger.debug("Fallback cache sweep removed %s expired entries", removed)
