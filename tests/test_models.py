"""Tests for the data model and display helpers."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from dashboard.models import Role, RolePage, User, UserWithRole
from dashboard.utils import format_display_date

from conftest import make_role, make_user


def test_role_reads_camel_case() -> None:
    role = Role.model_validate(make_role("r1", "Admin", isDefault=True))

    assert role.is_default is True
    assert role.created_at == datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert role.to_api()["isDefault"] is True


def test_models_are_frozen() -> None:
    role = Role(id="r1", name="Admin")
    with pytest.raises(ValidationError):
        role.name = "Other"  # type: ignore[misc]


def test_user_with_role_drops_role_id() -> None:
    user = User.model_validate(make_user("u1", "Ann", "Lee", "r1"))
    enriched = UserWithRole.from_user(user, None)

    assert enriched.role is None
    assert enriched.full_name == "Ann Lee"
    assert "roleId" not in enriched.to_api()


def test_page_navigation() -> None:
    page = RolePage.model_validate({"data": [make_role("r1", "Admin")], "next": 2})

    assert page.has_next
    assert not page.has_prev
    assert page.pagination() == {"next": 2, "prev": None, "pages": None}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2020-01-01T00:00:00Z", "Jan 01, 2020"),
        ("2023-12-25", "Dec 25, 2023"),
        (datetime(2021, 7, 4, 15, 30), "Jul 04, 2021"),
        (None, ""),
    ],
)
def test_format_display_date(value, expected) -> None:
    assert format_display_date(value) == expected
