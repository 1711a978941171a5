"""API v1: router aggregation and dependencies."""

from afrikmode.api.v1.router import api_router

__all__ = ["api_router"]
