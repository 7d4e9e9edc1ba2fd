"""
Data model for the dashboard.

Wire payloads use camelCase (``roleId``, ``isDefault``, ``createdAt``); the
Python attributes are snake_case. Models are frozen because cached instances
are shared between requests.
"""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base class for upstream payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_api(self) -> dict:
        """Serialize using the upstream field names."""
        return self.model_dump(mode="json", by_alias=True)


class Role(ApiModel):
    """A role users can be assigned to."""

    id: str
    name: str
    description: str | None = None
    is_default: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class User(ApiModel):
    """A user as returned by the API, referencing its role by id."""

    id: str
    first: str
    last: str
    role_id: str
    photo: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserWithRole(ApiModel):
    """A user with ``role_id`` replaced by the resolved role (or None)."""

    id: str
    first: str
    last: str
    photo: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    role: Role | None = None

    @classmethod
    def from_user(cls, user: User, role: Role | None) -> "UserWithRole":
        return cls(
            id=user.id,
            first=user.first,
            last=user.last,
            photo=user.photo,
            created_at=user.created_at,
            updated_at=user.updated_at,
            role=role,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first} {self.last}".strip()


class Page(ApiModel, Generic[T]):
    """One page of a listing."""

    data: list[T]
    next: int | None = None
    prev: int | None = None
    pages: int | None = None

    @property
    def has_next(self) -> bool:
        return self.next is not None

    @property
    def has_prev(self) -> bool:
        return self.prev is not None

    def pagination(self) -> dict[str, int | None]:
        return {"next": self.next, "prev": self.prev, "pages": self.pages}


RolePage = Page[Role]
UserPage = Page[UserWithRole]
RawUserPage = Page[User]

# Filters accepted by the listing operations, e.g. {"search": "ann"}
RoleFilters = dict[str, str | None]
UserFilters = dict[str, str | None]
