"""
RBAC catalog routes — read-only views of the permission catalog and roles.

Catalog and role endpoints are guarded by AuthPermissionMiddleware
(ROUTE_PERMISSIONS); /me only needs an authenticated caller.
"""

from fastapi import APIRouter, HTTPException, Request, status

from tradinta.utils import success_response
from .resolver import resolver

rbac_router = APIRouter()


def _describe(role) -> dict:
    return {
        "key": role.key,
        "name": role.name,
        "description": role.description,
        "inherits": list(role.inherits),
        "grants_all": role.grants_all,
    }


@rbac_router.get("/permissions")
async def list_permissions(request: Request):
    groups = {group: list(perms) for group, perms in resolver.catalog.groups.items()}
    return success_response(data={"groups": groups, "total": len(resolver.catalog)})


@rbac_router.get("/roles")
async def list_roles(request: Request):
    return success_response(
        data={"roles": [_describe(role) for role in resolver.registry.values()]}
    )


@rbac_router.get("/roles/{role_key}")
async def get_role(request: Request, role_key: str):
    role = resolver.registry.lookup(role_key)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Role not found"
        )
    detail = _describe(role)
    detail["reachable_roles"] = resolver.reachable_roles(role_key)
    detail["permissions"] = sorted(resolver.expand_role_permissions(role_key))
    return success_response(data=detail)


@rbac_router.get("/me")
async def my_permissions(request: Request):
    role = request.state.user_role
    restrictions = request.state.user_restrictions
    return success_response(
        data={
            "role": role,
            "restricted_permissions": restrictions,
            "effective_permissions": sorted(
                resolver.effective_permissions(role, restrictions)
            ),
        }
    )
