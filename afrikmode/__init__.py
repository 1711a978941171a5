"""AfrikMode cache service: Redis-backed cache with in-memory degraded mode."""
