from .permissions import CATALOG, PERMISSIONS, PermissionCatalog, parse_permission
from .roles import (
    ROLES,
    ROLE_DEFINITIONS,
    AllPermissions,
    ExplicitPermissions,
    Role,
    RoleRegistry,
)
from .resolver import (
    PermissionResolver,
    resolver,
    has_permission,
    expand_role_permissions,
)

__all__ = [
    "CATALOG",
    "PERMISSIONS",
    "PermissionCatalog",
    "parse_permission",
    "ROLES",
    "ROLE_DEFINITIONS",
    "AllPermissions",
    "ExplicitPermissions",
    "Role",
    "RoleRegistry",
    "PermissionResolver",
    "resolver",
    "has_permission",
    "expand_role_permissions",
]
