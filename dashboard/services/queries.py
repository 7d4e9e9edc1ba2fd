"""
Query key builders for the listing caches.

Listing keys must embed the page number and every active filter so that two
distinct queries never share an entry and a repeated query is a cache hit.
"""

from typing import Any, Mapping
from urllib.parse import urlencode


def active_filters(filters: Mapping[str, Any] | None) -> dict[str, str]:
    """Drop empty filter values, keeping insertion order."""
    if not filters:
        return {}
    return {k: str(v) for k, v in filters.items() if v}


def get_query_key(
    prefix: str, page: int, filters: Mapping[str, Any] | None = None
) -> str:
    """Generate a cache key such as ``roles?page=2&search=ann``."""
    if page < 0:
        raise ValueError(f"page must be non-negative, got {page}")

    params = {"page": str(page), **active_filters(filters)}
    return f"{prefix}?{urlencode(params)}"


def listing_params(page: int, filters: Mapping[str, Any] | None = None) -> dict[str, str]:
    """Query parameters for an upstream listing request."""
    return {"page": str(page), **active_filters(filters)}
