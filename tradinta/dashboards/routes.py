from fastapi import APIRouter, HTTPException, Request, status

from tradinta.rbac.decorators import access_denied_response, request_is_allowed
from tradinta.utils import success_response
from .registry import DASHBOARDS

dashboards_router = APIRouter()


@dashboards_router.get("/")
async def list_dashboards(request: Request):
    """Dashboards the caller may open."""
    allowed = [
        {"key": d.key, "title": d.title}
        for d in DASHBOARDS.values()
        if request_is_allowed(request, d.permission)
    ]
    return success_response(data={"dashboards": allowed})


@dashboards_router.get("/{key}")
async def open_dashboard(request: Request, key: str):
    dashboard = DASHBOARDS.get(key)
    if dashboard is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Dashboard not found"
        )
    if not request_is_allowed(request, dashboard.permission):
        return access_denied_response(dashboard.permission)
    return success_response(data={"key": dashboard.key, "title": dashboard.title})
