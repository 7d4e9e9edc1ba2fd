"""
Role access layer.

Reads go through the role caches and are retried; writes are sent once and
invalidate every cache whose contents they may have made stale.
"""

from typing import Any

from loguru import logger

from dashboard.models import Role, RoleFilters, RolePage
from dashboard.services.base import BaseService
from dashboard.services.errors import (
    FetchError,
    MutationError,
    NotFoundError,
    ServiceError,
)
from dashboard.services.queries import get_query_key, listing_params


class RoleService(BaseService):
    """Read and write roles against ``/roles``."""

    resource = "roles"

    async def get_role_by_id(self, id: str) -> Role:
        """Return a role, from cache when possible."""
        cached = self.caches.role_by_id.get(id)
        if cached is not None:
            return cached

        async def fetch() -> Role:
            try:
                payload = await self.client.request("GET", self.item_path(id))
            except ServiceError as e:
                logger.warning(f"get_role_by_id({id}) failed: {e}")
                raise NotFoundError(f"Role not found: {id}", e.service_id) from e
            return self._parse(Role, payload, NotFoundError, f"Role not found: {id}")

        role = await self._read(id, fetch)
        self.caches.role_by_id.set(id, role)
        return role

    async def get_roles(
        self, page: int = 1, filters: RoleFilters | None = None
    ) -> RolePage:
        """Return one page of roles matching ``filters``."""
        key = get_query_key(self.resource, page, filters)
        cached = self.caches.role_listing.get(key)
        if cached is not None:
            return cached

        params = listing_params(page, filters)

        async def fetch() -> RolePage:
            try:
                payload = await self.client.request("GET", self.path, params=params)
            except ServiceError as e:
                raise FetchError("Failed to fetch roles", e.service_id) from e
            return self._parse(RolePage, payload, FetchError, "Failed to fetch roles")

        roles = await self._read(key, fetch)
        self.caches.role_listing.set(key, roles)
        return roles

    async def create_role(self, data: dict[str, Any]) -> Role:
        """Create a role and cache it by id."""
        payload = await self._mutate("POST", self.path, data, "Failed to create role")
        role = self._parse(Role, payload, MutationError, "Failed to create role")

        # A new role can appear on any listing page
        self.caches.role_listing.clear()
        self.caches.role_by_id.set(role.id, role)

        logger.info(f"Created role {role.id} ({role.name})")
        return role

    async def update_role(self, id: str, data: dict[str, Any]) -> Role:
        """Update a role. Enriched users embed roles, so user caches are dropped too."""
        payload = await self._mutate(
            "PATCH", self.item_path(id), data, "Failed to update role"
        )
        role = self._parse(Role, payload, MutationError, "Failed to update role")

        self._invalidate_listings()
        self.caches.role_by_id.set(id, role)

        logger.info(f"Updated role {id}")
        return role

    async def delete_role(self, id: str) -> bool:
        await self._mutate("DELETE", self.item_path(id), None, "Failed to delete role")

        self._invalidate_listings()
        self.caches.role_by_id.delete(id)

        logger.info(f"Deleted role {id}")
        return True

    def _invalidate_listings(self) -> None:
        self.caches.role_listing.clear()
        self.caches.user_by_id.clear()
        self.caches.user_listing.clear()
        logger.info("Invalidated role listings and all user caches")
