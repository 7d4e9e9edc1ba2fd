"""
Service layer - cached, retrying access to the upstream user/role API.

Provides:
- Caches / MemoryCache: per-listing and per-id caches, invalidated on writes
- retry: exponential backoff for upstream reads
- RoleService / UserService: the access layers
- build_container: composition root wiring both services to one cache store
"""

from dashboard.services.errors import (
    ServiceError,
    UpstreamError,
    RequestTimeoutError,
    NotFoundError,
    FetchError,
    MutationError,
)
from dashboard.services.cache import CacheStore, Caches, MemoryCache
from dashboard.services.client import ApiClient
from dashboard.services.deduplicator import RequestDeduplicator
from dashboard.services.queries import get_query_key
from dashboard.services.retry import retry
from dashboard.services.roles import RoleService
from dashboard.services.users import UserService
from dashboard.services.container import Container, build_container

__all__ = [
    # Errors
    "ServiceError",
    "UpstreamError",
    "RequestTimeoutError",
    "NotFoundError",
    "FetchError",
    "MutationError",
    # Cache
    "CacheStore",
    "Caches",
    "MemoryCache",
    "get_query_key",
    # Transport
    "ApiClient",
    "RequestDeduplicator",
    "retry",
    # Services
    "RoleService",
    "UserService",
    "Container",
    "build_container",
]
