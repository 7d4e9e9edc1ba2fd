"""
User access layer.

Users come back from the API with a ``roleId``; every read and write here
returns them enriched with the resolved Role (or None when it cannot be
resolved).
"""

from typing import Any

from loguru import logger

from dashboard.models import RawUserPage, Role, User, UserFilters, UserPage, UserWithRole
from dashboard.services.base import BaseService
from dashboard.services.cache import Caches
from dashboard.services.client import ApiClient
from dashboard.services.errors import FetchError, MutationError, ServiceError
from dashboard.services.queries import get_query_key, listing_params
from dashboard.services.roles import RoleService


class UserService(BaseService):
    """Read and write users against ``/users``."""

    resource = "users"

    def __init__(
        self,
        client: ApiClient,
        caches: Caches,
        role_service: RoleService,
        **kwargs: Any,
    ):
        super().__init__(client, caches, **kwargs)
        self.role_service = role_service

    async def get_users_with_roles(
        self, page: int = 1, filters: UserFilters | None = None
    ) -> UserPage:
        """
        Return one page of users, each enriched with its role.

        Roles are looked up once per distinct ``roleId`` on the page. A role
        that cannot be fetched leaves that user's ``role`` as None instead of
        failing the page.
        """
        key = get_query_key(self.resource, page, filters)
        cached = self.caches.user_listing.get(key)
        if cached is not None:
            return cached

        params = listing_params(page, filters)

        async def fetch() -> RawUserPage:
            try:
                payload = await self.client.request("GET", self.path, params=params)
            except ServiceError as e:
                raise FetchError("Failed to fetch users", e.service_id) from e
            return self._parse(RawUserPage, payload, FetchError, "Failed to fetch users")

        raw = await self._read(key, fetch)

        # Roles resolved during this call only
        page_roles: dict[str, Role | None] = {}
        enriched: list[UserWithRole] = []

        for user in raw.data:
            if user.role_id not in page_roles:
                page_roles[user.role_id] = await self._resolve_role(user)

            item = UserWithRole.from_user(user, page_roles[user.role_id])
            enriched.append(item)
            self.caches.user_by_id.set(user.id, item)

        result = UserPage(data=enriched, next=raw.next, prev=raw.prev, pages=raw.pages)
        self.caches.user_listing.set(key, result)
        return result

    async def get_user_by_id(self, id: str) -> UserWithRole:
        """
        Return a single enriched user.

        The role is looked up on the first page of roles, not by id, so a
        user whose role is not on that page comes back with ``role`` None.
        """
        cached = self.caches.user_by_id.get(id)
        if cached is not None:
            return cached

        async def fetch() -> User:
            try:
                payload = await self.client.request("GET", self.item_path(id))
            except ServiceError as e:
                raise FetchError("Failed to fetch user", e.service_id) from e
            return self._parse(User, payload, FetchError, "Failed to fetch user")

        user = await self._read(id, fetch)

        roles = await self.role_service.get_roles()
        role = next((r for r in roles.data if r.id == user.role_id), None)

        item = UserWithRole.from_user(user, role)
        self.caches.user_by_id.set(id, item)
        return item

    async def create_user(self, data: dict[str, Any]) -> UserWithRole:
        """
        Create a user and cache it by id.

        The write is not undone if the role lookup afterwards fails: the user
        is returned with ``role`` None and no error is raised.
        """
        payload = await self._mutate("POST", self.path, data, "Failed to create user")
        user = self._parse(User, payload, MutationError, "Failed to create user")

        self.caches.user_listing.clear()

        item = UserWithRole.from_user(user, await self._resolve_role(user))
        self.caches.user_by_id.set(item.id, item)

        logger.info(f"Created user {user.id}")
        return item

    async def update_user(self, id: str, data: dict[str, Any]) -> UserWithRole:
        """
        Update a user and refresh its by-id entry.

        As with create_user, a failed role lookup after the write returns the
        user with ``role`` None instead of raising.
        """
        payload = await self._mutate(
            "PATCH", self.item_path(id), data, "Failed to update user"
        )
        user = self._parse(User, payload, MutationError, "Failed to update user")

        self.caches.user_listing.clear()

        item = UserWithRole.from_user(user, await self._resolve_role(user))
        self.caches.user_by_id.set(id, item)

        logger.info(f"Updated user {id}")
        return item

    async def delete_user(self, id: str) -> bool:
        await self._mutate("DELETE", self.item_path(id), None, "Failed to delete user")

        self.caches.user_listing.clear()
        self.caches.user_by_id.delete(id)

        logger.info(f"Deleted user {id}")
        return True

    async def _resolve_role(self, user: User) -> Role | None:
        try:
            return await self.role_service.get_role_by_id(user.role_id)
        except ServiceError as e:
            logger.warning(f"Failed to fetch role for user {user.id}: {e}")
            return None
