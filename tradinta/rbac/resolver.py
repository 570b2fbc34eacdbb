"""
Permission resolution over the role inheritance graph.

Inheritance edges are treated as a possibly cyclic directed graph. Every
traversal keeps a visited set scoped to the single call, so each role key
is expanded at most once and a call finishes after at most len(registry)
role visits, whatever the shape of the graph.

Every miss (unknown role, unknown permission, exhausted inheritance) is a
plain False. Nothing here raises, logs, or caches.
"""

from collections.abc import Iterable, Iterator

from .permissions import CATALOG, PermissionCatalog
from .roles import ROLES, AllPermissions, Role, RoleRegistry


class PermissionResolver:
    def __init__(self, registry: RoleRegistry, catalog: PermissionCatalog):
        self.registry = registry
        self.catalog = catalog

    def _walk(self, role_key: str) -> Iterator[Role]:
        """
        Depth-first, pre-order walk from `role_key` through `inherits`.

        Parents are visited in declaration order. Unknown keys contribute
        nothing; already visited keys are skipped.
        """
        visited: set[str] = set()
        stack = [role_key]
        while stack:
            key = stack.pop()
            if key in visited:
                continue
            visited.add(key)
            role = self.registry.lookup(key)
            if role is None:
                continue
            yield role
            stack.extend(reversed(role.inherits))

    def reachable_roles(self, role_key: str) -> list[str]:
        return [role.key for role in self._walk(role_key)]

    def has_permission(self, role_key: str, permission: str) -> bool:
        """Does `role_key` grant `permission`, directly or through inheritance?"""
        for role in self._walk(role_key):
            if isinstance(role.grant, AllPermissions):
                return True
            if permission in role.grant.permissions:
                return True
        return False

    def expand_role_permissions(self, role_key: str) -> frozenset[str]:
        """
        Every concrete permission `role_key` grants.

        A wildcard anywhere in the reachable graph expands to the whole
        catalog, since callers subtract restrictions from this set.
        """
        granted: set[str] = set()
        for role in self._walk(role_key):
            if isinstance(role.grant, AllPermissions):
                return self.catalog.all()
            granted |= role.grant.permissions
        return frozenset(granted)

    def effective_permissions(
        self, role_key: str, restrictions: Iterable[str] = ()
    ) -> frozenset[str]:
        return self.expand_role_permissions(role_key) - frozenset(restrictions)

    def is_allowed(
        self, role_key: str, permission: str, restrictions: Iterable[str] = ()
    ) -> bool:
        """Access-gate decision: granted by the role and not restricted for the user."""
        if permission in frozenset(restrictions):
            return False
        return self.has_permission(role_key, permission)


# ── Process-wide resolver over the production configuration ─────
resolver = PermissionResolver(ROLES, CATALOG)


def has_permission(role_key: str, permission: str) -> bool:
    return resolver.has_permission(role_key, permission)


def expand_role_permissions(role_key: str) -> frozenset[str]:
    return resolver.expand_role_permissions(role_key)
