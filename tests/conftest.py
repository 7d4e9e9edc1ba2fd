"""Shared fixtures: an in-memory upstream API served through httpx.MockTransport."""

import json
from collections import Counter

import httpx
import pytest
import pytest_asyncio

from dashboard.services.container import build_container
from dashboard.settings import Settings

API_URL = "http://api.test"
PAGE_SIZE = 2


def make_role(id: str, name: str, **extra) -> dict:
    return {
        "id": id,
        "name": name,
        "description": extra.get("description", f"{name} role"),
        "isDefault": extra.get("isDefault", False),
        "createdAt": "2020-01-01T00:00:00Z",
        "updatedAt": "2020-01-02T00:00:00Z",
    }


def make_user(id: str, first: str, last: str, role_id: str) -> dict:
    return {
        "id": id,
        "first": first,
        "last": last,
        "roleId": role_id,
        "photo": f"https://img.test/{id}.png",
        "createdAt": "2021-03-04T10:00:00Z",
        "updatedAt": "2021-03-05T10:00:00Z",
    }


class FakeApi:
    """Minimal stand-in for the upstream REST API."""

    def __init__(self):
        self.roles: dict[str, dict] = {}
        self.users: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        # path -> number of upcoming requests to answer with 500
        self.failures: Counter = Counter()
        # path -> canned response returned instead of the stored resource
        self.responses: dict[str, tuple[int, bytes]] = {}
        self._next_id = 100

    def count(self, method: str, path: str) -> int:
        return sum(1 for c in self.calls if c == (method, path))

    def fail(self, path: str, times: int = 1) -> None:
        self.failures[path] += times

    def respond(self, path: str, status: int = 200, content: bytes = b"") -> None:
        self.responses[path] = (status, content)

    def _listing(self, items: dict[str, dict], request: httpx.Request, fields: tuple):
        page = int(request.url.params.get("page", "1"))
        search = request.url.params.get("search", "").lower()
        rows = [
            item
            for item in items.values()
            if not search or any(search in str(item[f]).lower() for f in fields)
        ]
        pages = max(1, -(-len(rows) // PAGE_SIZE))
        start = (page - 1) * PAGE_SIZE
        body = {"data": rows[start : start + PAGE_SIZE], "pages": pages}
        if page < pages:
            body["next"] = page + 1
        if page > 1:
            body["prev"] = page - 1
        return httpx.Response(200, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        method = request.method
        self.calls.append((method, path))

        if self.failures[path] > 0:
            self.failures[path] -= 1
            return httpx.Response(500, text="upstream exploded")
        if path in self.responses:
            status, content = self.responses[path]
            return httpx.Response(status, content=content)

        parts = path.strip("/").split("/")
        resource = parts[0]
        store = {"roles": self.roles, "users": self.users}.get(resource)
        if store is None:
            return httpx.Response(404)

        if len(parts) == 1:
            if method == "GET":
                fields = ("name",) if resource == "roles" else ("first", "last")
                return self._listing(store, request, fields)
            if method == "POST":
                data = json.loads(request.content)
                self._next_id += 1
                new_id = data.get("id") or f"{resource[0]}{self._next_id}"
                item = {**data, "id": new_id}
                store[new_id] = item
                return httpx.Response(201, json=item)
            return httpx.Response(405)

        item_id = parts[1]
        if item_id not in store:
            return httpx.Response(404, text="not found")
        if method == "GET":
            return httpx.Response(200, json=store[item_id])
        if method == "PATCH":
            store[item_id] = {**store[item_id], **json.loads(request.content)}
            return httpx.Response(200, json=store[item_id])
        if method == "DELETE":
            del store[item_id]
            return httpx.Response(204)
        return httpx.Response(405)


@pytest.fixture
def api() -> FakeApi:
    fake = FakeApi()
    for role in (
        make_role("r1", "Admin", isDefault=True),
        make_role("r2", "Editor"),
        make_role("r3", "Viewer"),
    ):
        fake.roles[role["id"]] = role
    for user in (
        make_user("u1", "Ann", "Lee", "r1"),
        make_user("u2", "Annie", "Park", "r1"),
        make_user("u3", "Bob", "Stone", "r2"),
    ):
        fake.users[user["id"]] = user
    return fake


@pytest.fixture
def settings() -> Settings:
    return Settings(API_URL=API_URL, RETRY_ATTEMPTS=3, RETRY_BASE_DELAY=0)


@pytest_asyncio.fixture
async def container(api: FakeApi, settings: Settings):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(api.handler))
    services = build_container(settings, http_client=http_client)
    yield services
    await services.aclose()
    await http_client.aclose()
