"""
Auth + permission middleware.

Runs on every request (except OPEN_ROUTES):
  1. Decode JWT → extract the user id (`sub`)
  2. Load role, restrictions and status from the users collection
  3. Set request.state.user, user_role, user_restrictions
  4. Admit or deny routes listed in ROUTE_PERMISSIONS

The token only proves identity. Role and restrictions are read per request,
so a role change or a new restriction applies to tokens already issued.
"""

import inspect

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from tradinta.auth.helpers import decode_access_token
from tradinta.config import get_database, settings
from tradinta.rbac.decorators import access_denied_response
from tradinta.rbac.resolver import resolver
from tradinta.utils import Logger, error_response

logger = Logger("access")

_API = f"/api/{settings.api_version}"

# Routes that skip all auth / permission checks
OPEN_ROUTES = [
    "/health",
    f"{_API}/auth/login",
    "/openapi.json",
    "/api/docs",
    "/api/docs/oauth2-redirect",
    "/redoc",
]

# Path prefix → permission required for anything below it
ROUTE_PERMISSIONS: dict[str, str] = {
    f"{_API}/rbac/permissions": "users:view_details",
    f"{_API}/rbac/roles": "users:view_details",
    f"{_API}/activity-logs": "system:view:activity_log",
}


def required_permission_for(path: str) -> str | None:
    """Longest guarded prefix wins."""
    path = path.rstrip("/") or "/"
    best: str | None = None
    for prefix in ROUTE_PERMISSIONS:
        if path == prefix or path.startswith(prefix + "/"):
            if best is None or len(prefix) > len(best):
                best = prefix
    return ROUTE_PERMISSIONS[best] if best else None


async def _database_for(request: Request):
    # Middleware sits outside FastAPI's dependency injection, so honour
    # app.dependency_overrides by hand.
    provider = request.app.dependency_overrides.get(get_database, get_database)
    db = provider()
    if inspect.isawaitable(db):
        db = await db
    return db


async def load_current_user(request: Request, user_id: str) -> dict | None:
    """Fetch the live user document for a token subject, or None."""
    try:
        oid = ObjectId(user_id)
    except (InvalidId, TypeError):
        return None
    db = await _database_for(request)
    return await db["users"].find_one({"_id": oid, "is_deleted": {"$ne": True}})


class AuthPermissionMiddleware(BaseHTTPMiddleware):
    """Single middleware that handles JWT verification + RBAC enforcement."""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path

        # ── Skip open routes ─────────────────────────────────────
        if path.rstrip("/") in OPEN_ROUTES:
            return await call_next(request)

        # ── Extract & decode JWT ─────────────────────────────────
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return error_response("Missing Authorization header", code=401)

        if not auth_header.startswith("Bearer "):
            return error_response(
                "Invalid token format. Expected 'Bearer <token>'", code=401
            )

        token = auth_header.split(" ", 1)[1].strip()

        try:
            payload = decode_access_token(token)
        except HTTPException as e:
            return JSONResponse(
                status_code=e.status_code,
                content={"success": False, "error": {"code": e.status_code, "message": e.detail}},
                headers=e.headers,
            )

        # ── Load the current user ────────────────────────────────
        user_id = payload.get("sub")
        user = await load_current_user(request, user_id)
        if user is None:
            return error_response("User not found", code=401)

        if not user.get("is_active", True):
            return error_response("Account is deactivated", code=403)

        role = user.get("role") or settings.default_role
        restrictions = list(user.get("restricted_permissions") or [])

        if resolver.registry.lookup(role) is None:
            logger.warning(
                f"User {user_id} has unknown role '{role}'; "
                "every permission check will deny"
            )

        request.state.user = {"sub": user_id, "email": user.get("email"), "role": role}
        request.state.user_id = user_id
        request.state.user_role = role
        request.state.user_restrictions = restrictions

        # ── RBAC check ───────────────────────────────────────────
        required = required_permission_for(path)
        if required and not resolver.is_allowed(role, required, restrictions):
            logger.info(f"Denied {request.method} {path} for role '{role}' (needs {required})")
            return access_denied_response(required)

        return await call_next(request)
