"""
Activity log routes.

Endpoints:
    GET  /    List activity logs (filter by action, user)
"""

from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from tradinta.config import get_database
from tradinta.rbac.decorators import require_permission
from tradinta.utils import success_response
from .schemas import ActivityActionEnum
from .service import ActivityService

activity_router = APIRouter()


@activity_router.get("/")
@require_permission("system:view:activity_log")
async def list_activity_logs(
    request: Request,
    action: Optional[ActivityActionEnum] = Query(None),
    user_id: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = ActivityService(db)
    logs, total = await svc.list_logs(
        action=action.value if action else None,
        user_id=user_id,
        limit=limit,
        offset=offset,
    )
    return success_response(
        data={"logs": logs, "total": total, "limit": limit, "offset": offset}
    )
