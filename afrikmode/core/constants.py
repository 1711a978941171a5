"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure (DRY). Used by
infrastructure cache key builders and storefront services.
"""

# Cache key prefixes (used with :id, :query, etc.)
CACHE_PREFIX_PRODUCTS = "products"
CACHE_PREFIX_PRODUCT = "product"
CACHE_PREFIX_CATEGORIES = "categories"
CACHE_PREFIX_STORES = "stores"
CACHE_PREFIX_USER = "user"
CACHE_PREFIX_WISHLIST = "wishlist"
CACHE_PREFIX_CART = "cart"
CACHE_PREFIX_TICKETS = "tickets"
CACHE_PREFIX_SEARCH = "search"
CACHE_PREFIX_ANALYTICS = "analytics"
CACHE_PREFIX_POPULAR_PRODUCTS = "popular_products"
CACHE_PREFIX_FEATURED_PRODUCTS = "featured_products"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Pattern matching every key
CACHE_MATCH_ALL = "*"
