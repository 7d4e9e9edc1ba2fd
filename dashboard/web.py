"""FastAPI routes for the user/role dashboard.

The handlers are thin: they parse the request, call the user or role service
and shape the result. Rendering is left to the front end.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from loguru import logger

from dashboard.models import Role, UserWithRole
from dashboard.services.container import Container, build_container
from dashboard.services.errors import ServiceError
from dashboard.settings import Settings, global_settings
from dashboard.utils import format_display_date


def _parse_page(raw: str | None) -> int:
    if raw is None or raw == "":
        return 1
    try:
        page = int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid page: {raw}")
    if page < 0:
        raise HTTPException(status_code=400, detail=f"Invalid page: {raw}")
    return page


def _role_view(role: Role | None) -> dict[str, Any] | None:
    if role is None:
        return None
    view = role.to_api()
    view["createdAt"] = format_display_date(role.created_at)
    view["updatedAt"] = format_display_date(role.updated_at)
    return view


def _user_view(user: UserWithRole) -> dict[str, Any]:
    view = user.to_api()
    view["createdAt"] = format_display_date(user.created_at)
    view["updatedAt"] = format_display_date(user.updated_at)
    view["role"] = _role_view(user.role)
    return view


async def _json_body(request: Request) -> dict[str, Any]:
    """Read a JSON object body, enforcing the content type."""
    content_type = request.headers.get("content-type", "")
    if content_type.split(";")[0].strip() != "application/json":
        raise HTTPException(status_code=415, detail="Unsupported Media Type")
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    return body


def create_app(
    container: Container | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Create the web application.

    When ``container`` is omitted one is built from ``settings`` at startup
    and closed at shutdown.
    """
    settings = settings or global_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = container is None
        app.state.container = container or build_container(settings)
        logger.info("Dashboard services ready")
        try:
            yield
        finally:
            if owned:
                await app.state.container.aclose()
            logger.info("Dashboard services stopped")

    app = FastAPI(title="User & Role Dashboard", lifespan=lifespan)

    def services(request: Request) -> Container:
        return request.app.state.container

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=502,
            content={"detail": "Something went wrong, please retry.", "error": str(exc)},
        )

    @app.get("/")
    async def home():
        return RedirectResponse(url="/users", status_code=302)

    @app.get("/users")
    async def list_users(request: Request, search: str | None = None):
        page = _parse_page(request.query_params.get("page"))
        result = await services(request).user_service.get_users_with_roles(
            page, {"search": search}
        )
        return {
            "users": [_user_view(u) for u in result.data],
            "pagination": result.pagination(),
        }

    @app.get("/roles")
    async def list_roles(request: Request, search: str | None = None):
        page = _parse_page(request.query_params.get("page"))
        result = await services(request).role_service.get_roles(
            page, {"search": search}
        )
        return {
            "roles": [_role_view(r) for r in result.data],
            "pagination": result.pagination(),
        }

    @app.post("/api/users/delete")
    async def delete_user(request: Request):
        body = await _json_body(request)
        user_id = body.get("userId")
        if not user_id or not isinstance(user_id, str):
            raise HTTPException(status_code=400, detail="Invalid user ID")

        try:
            await services(request).user_service.delete_user(user_id)
        except ServiceError as e:
            logger.error(f"Deleting user {user_id} failed: {e}")
            return Response(content=str(e), status_code=500, media_type="text/plain")

        return Response(status_code=204)

    @app.post("/api/roles/edit")
    async def edit_role(request: Request):
        body = await _json_body(request)
        role_id = body.get("roleId")
        if not role_id or not isinstance(role_id, str):
            raise HTTPException(status_code=400, detail="Invalid role ID")

        changes: dict[str, Any] = {}
        if body.get("roleName") is not None:
            changes["name"] = body["roleName"]
        if body.get("roleDescription") is not None:
            changes["description"] = body["roleDescription"]

        try:
            await services(request).role_service.update_role(role_id, changes)
        except ServiceError as e:
            logger.error(f"Updating role {role_id} failed: {e}")
            return Response(content=str(e), status_code=500, media_type="text/plain")

        return Response(status_code=204)

    @app.get("/health")
    async def health(request: Request):
        return {"status": "ok", "caches": services(request).caches.stats()}

    return app
