"""Infrastructure: adapters for external systems (Redis cache)."""
