"""
Tradinta — main application.

Assembles all packages: config, middleware, auth, users, rbac, dashboards.
"""

import time
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from tradinta.config import settings, db_manager
from tradinta.middleware import AuthPermissionMiddleware
from tradinta.rbac import CATALOG, ROLES
from tradinta.utils import Logger, configure_logging

# ── Route imports ────────────────────────────────────────────────
from tradinta.auth import auth_router
from tradinta.users import users_router
from tradinta.activity import activity_router
from tradinta.dashboards import dashboards_router
from tradinta.rbac.routes import rbac_router

logger = Logger("request")


# ── Request Logging Middleware ───────────────────────────────────
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request: method, path, status code, and duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "unknown"

        logger.debug(f"--> {method} {path} (from {client})")

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = round((time.time() - start) * 1000, 2)
            logger.error(f"<-- {method} {path} | 500 | {duration}ms")
            logger.error(f"    Exception: {exc}")
            raise

        duration = round((time.time() - start) * 1000, 2)
        status = response.status_code

        if status >= 500:
            logger.error(f"<-- {method} {path} | {status} | {duration}ms")
        elif status >= 400:
            logger.warning(f"<-- {method} {path} | {status} | {duration}ms")
        else:
            logger.info(f"<-- {method} {path} | {status} | {duration}ms")

        return response


def check_rbac_configuration() -> list[str]:
    """Log role registry problems. Returns them for callers that care."""
    problems = ROLES.validate(CATALOG)
    for problem in problems:
        logger.warning(f"RBAC configuration: {problem}")
    if not problems:
        logger.info(f"RBAC configuration OK ({len(ROLES)} roles, {len(CATALOG)} permissions)")
    return problems


# ── Lifespan ─────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.rbac_validate_on_startup:
        check_rbac_configuration()
    await db_manager.connect()
    yield
    db_manager.close()


# ── App factory ──────────────────────────────────────────────────
def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Marketplace access control API",
        docs_url="/api/docs",
        lifespan=lifespan,
    )

    # Starlette runs the last-added middleware first: CORS, logging, then auth.
    app.add_middleware(AuthPermissionMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allowed_methods,
        allow_headers=settings.cors_allowed_headers,
    )

    # ── Global exception handler ─────────────────────────────
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.method} {request.url.path}:")
        logger.error(traceback.format_exc())
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {
                    "code": 500,
                    "message": str(exc) if settings.debug else "Internal server error",
                },
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    # ── Routes ───────────────────────────────────────────────
    v = settings.api_version

    app.include_router(auth_router, prefix=f"/api/{v}/auth", tags=["Authentication"])
    app.include_router(users_router, prefix=f"/api/{v}/users", tags=["Users"])
    app.include_router(rbac_router, prefix=f"/api/{v}/rbac", tags=["Roles & Permissions"])
    app.include_router(
        dashboards_router, prefix=f"/api/{v}/dashboards", tags=["Dashboards"]
    )
    app.include_router(
        activity_router, prefix=f"/api/{v}/activity-logs", tags=["Activity Logs"]
    )

    # ── Health check ─────────────────────────────────────────
    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "database": db_manager.is_connected,
        }

    return app


# ── Create the app instance ──────────────────────────────────────
app = create_app()
