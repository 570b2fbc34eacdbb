"""
Access gate for route handlers.

Usage:
    @router.get("/")
    @require_permission("users:list")
    async def list_users(request: Request):
        ...

Every denial produces the same 403 body, whatever the reason (unknown
role, missing grant, per-user restriction).
"""

from functools import wraps
from fastapi import HTTPException, status
from fastapi.responses import JSONResponse
from starlette.requests import Request

from tradinta.utils import error_response
from .resolver import resolver

ACCESS_DENIED_MESSAGE = "Access denied"


def access_denied_response(required: str) -> JSONResponse:
    return error_response(
        ACCESS_DENIED_MESSAGE,
        code=status.HTTP_403_FORBIDDEN,
        data={"required_permission": required},
    )


def request_is_allowed(request: Request, permission: str) -> bool:
    """Check the caller placed on request.state by the auth middleware."""
    role = getattr(request.state, "user_role", None)
    if not role:
        return False
    restrictions = getattr(request.state, "user_restrictions", [])
    return resolver.is_allowed(role, permission, restrictions)


def require_permission(permission: str):
    """
    Decorator that checks the current user (set by middleware on
    request.state) is allowed `permission`.

    Must be applied AFTER the route decorator.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request: Request | None = kwargs.get("request")
            if request is None:
                for arg in args:
                    if isinstance(arg, Request):
                        request = arg
                        break

            if request is None:
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Request object not found in handler",
                )

            if not request_is_allowed(request, permission):
                return access_denied_response(permission)

            return await func(*args, **kwargs)

        return wrapper

    return decorator
