"""Cache key builders. Single place for key format (DRY).

Key components (user_id, product_id, etc.) must not contain
CACHE_KEY_SEP to avoid ambiguous or colliding keys. Search queries are
free text, so they are base64-encoded instead of validated.
"""

import base64

from afrikmode.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_ANALYTICS,
    CACHE_PREFIX_CART,
    CACHE_PREFIX_CATEGORIES,
    CACHE_PREFIX_FEATURED_PRODUCTS,
    CACHE_PREFIX_POPULAR_PRODUCTS,
    CACHE_PREFIX_PRODUCT,
    CACHE_PREFIX_PRODUCTS,
    CACHE_PREFIX_SEARCH,
    CACHE_PREFIX_STORES,
    CACHE_PREFIX_TICKETS,
    CACHE_PREFIX_USER,
    CACHE_PREFIX_WISHLIST,
)


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value is empty or contains CACHE_KEY_SEP.
    """
    if not value:
        raise ValueError(f"Cache key component {name!r} must not be empty")
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def products_key() -> str:
    """Cache key for the product catalogue listing."""
    return CACHE_PREFIX_PRODUCTS


def categories_key() -> str:
    """Cache key for the category tree."""
    return CACHE_PREFIX_CATEGORIES


def stores_key() -> str:
    """Cache key for the store listing."""
    return CACHE_PREFIX_STORES


def analytics_key() -> str:
    return CACHE_PREFIX_ANALYTICS


def popular_products_key() -> str:
    return CACHE_PREFIX_POPULAR_PRODUCTS


def featured_products_key() -> str:
    return CACHE_PREFIX_FEATURED_PRODUCTS


def user_profile_key(user_id: str | int) -> str:
    """Cache key for a user profile by ID."""
    user_id = str(user_id)
    _validate_key_component(user_id, "user_id")
    return f"{CACHE_PREFIX_USER}{CACHE_KEY_SEP}{user_id}"


def user_wishlist_key(user_id: str | int) -> str:
    """Cache key for a user's wishlist."""
    user_id = str(user_id)
    _validate_key_component(user_id, "user_id")
    return f"{CACHE_PREFIX_WISHLIST}{CACHE_KEY_SEP}{user_id}"


def user_cart_key(user_id: str | int) -> str:
    """Cache key for a user's cart."""
    user_id = str(user_id)
    _validate_key_component(user_id, "user_id")
    return f"{CACHE_PREFIX_CART}{CACHE_KEY_SEP}{user_id}"


def user_tickets_key(user_id: str | int) -> str:
    """Cache key for a user's support tickets."""
    user_id = str(user_id)
    _validate_key_component(user_id, "user_id")
    return f"{CACHE_PREFIX_TICKETS}{CACHE_KEY_SEP}{user_id}"


def product_views_key(product_id: str | int) -> str:
    """Cache key for a product's view counter."""
    product_id = str(product_id)
    _validate_key_component(product_id, "product_id")
    return f"{CACHE_PREFIX_PRODUCT}{CACHE_KEY_SEP}{product_id}{CACHE_KEY_SEP}views"


def search_results_key(query: str) -> str:
    """Cache key for search results; the query is base64-encoded."""
    encoded = base64.b64encode(query.encode("utf-8")).decode("ascii")
    return f"{CACHE_PREFIX_SEARCH}{CACHE_KEY_SEP}{encoded}"
