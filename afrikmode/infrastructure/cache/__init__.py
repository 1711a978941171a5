"""Cache: Redis-backed cache service with in-memory degraded mode.

ConnectionManager owns the Redis client, MemoryStore is the fallback,
CacheService is the facade every consumer calls. Key format is in keys.py.
"""

from afrikmode.infrastructure.cache.cache_protocol import CacheBackend
from afrikmode.infrastructure.cache.connection import ConnectionManager
from afrikmode.infrastructure.cache.keys import (
    analytics_key,
    categories_key,
    featured_products_key,
    popular_products_key,
    product_views_key,
    products_key,
    search_results_key,
    stores_key,
    user_cart_key,
    user_profile_key,
    user_tickets_key,
    user_wishlist_key,
)
from afrikmode.infrastructure.cache.memory_store import MemoryStore
from afrikmode.infrastructure.cache.redis_cache import CacheService, cached
from afrikmode.infrastructure.cache.redis_store import RedisStore
from afrikmode.infrastructure.cache.serializers import JsonSerializer, Serializer

__all__ = [
    "CacheBackend",
    "CacheService",
    "ConnectionManager",
    "JsonSerializer",
    "MemoryStore",
    "RedisStore",
    "Serializer",
    "cached",
    "analytics_key",
    "categories_key",
    "featured_products_key",
    "popular_products_key",
    "product_views_key",
    "products_key",
    "search_results_key",
    "stores_key",
    "user_cart_key",
    "user_profile_key",
    "user_tickets_key",
    "user_wishlist_key",
]
