from fastapi import APIRouter, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from tradinta.config import get_database
from tradinta.rbac.decorators import require_permission
from tradinta.utils import success_response
from .schemas import UpdateRestrictionsRequest, UpdateRoleRequest
from .service import UserService

users_router = APIRouter()


@users_router.get("/{user_id}")
@require_permission("users:view_details")
async def get_user(
    request: Request,
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    return success_response(data=await svc.get_user(user_id))


@users_router.get("/{user_id}/permissions")
@require_permission("users:view_details")
async def get_permission_toggles(
    request: Request,
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Role permissions grouped by resource, flagged allowed / restricted."""
    svc = UserService(db)
    return success_response(data=await svc.get_permission_toggles(user_id))


@users_router.put("/{user_id}/restrictions")
@require_permission("users:update:role")
async def update_restrictions(
    request: Request,
    user_id: str,
    body: UpdateRestrictionsRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    user = await svc.update_restrictions(
        user_id,
        allowed_permissions=body.allowed_permissions,
        actor=request.state.user,
    )
    return success_response(data=user, message="Restrictions updated")


@users_router.put("/{user_id}/role")
@require_permission("users:update:role")
async def update_role(
    request: Request,
    user_id: str,
    body: UpdateRoleRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    user = await svc.set_role(user_id, body.role, actor=request.state.user)
    return success_response(data=user, message="Role updated")
