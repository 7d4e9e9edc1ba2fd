"""
Composition root.

Builds the caches once and wires them into the role and user services.
"""

from dataclasses import dataclass

import httpx
from loguru import logger

from dashboard.services.cache import Caches
from dashboard.services.client import ApiClient
from dashboard.services.deduplicator import RequestDeduplicator
from dashboard.services.roles import RoleService
from dashboard.services.users import UserService
from dashboard.settings import Settings


@dataclass
class Container:
    """Services sharing one cache store and one HTTP client."""

    caches: Caches
    client: ApiClient
    role_service: RoleService
    user_service: UserService
    deduplicator: RequestDeduplicator | None = None

    async def aclose(self) -> None:
        if self.deduplicator is not None:
            await self.deduplicator.cancel_all()
        await self.client.close()


def build_container(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    caches: Caches | None = None,
) -> Container:
    """
    Create the services for one process.

    Args:
        settings: Application settings
        http_client: Optional pre-built httpx client (tests inject a mock transport)
        caches: Optional cache store; defaults to in-memory caches per settings
    """
    caches = caches or Caches.in_memory(
        max_size=settings.cache_max_size,
        debug=settings.cache_debug,
    )
    client = ApiClient(
        settings.api_url,
        timeout=settings.request_timeout,
        http_client=http_client,
    )
    deduplicator = (
        RequestDeduplicator(debug=settings.cache_debug)
        if settings.single_flight
        else None
    )
    options = {
        "retry_attempts": settings.retry_attempts,
        "retry_base_delay": settings.retry_base_delay,
        "deduplicator": deduplicator,
    }

    role_service = RoleService(client, caches, **options)
    user_service = UserService(client, caches, role_service, **options)

    logger.debug(f"Services wired against {settings.api_url}")
    return Container(
        caches=caches,
        client=client,
        role_service=role_service,
        user_service=user_service,
        deduplicator=deduplicator,
    )
