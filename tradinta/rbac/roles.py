"""
Role definitions and the role registry.

A role bundles explicit permissions and may inherit other roles by key.
The raw table below is configuration; `ROLES` is the immutable registry
built from it once at import time.

The literal "*" in a role's permission list is the wildcard grant. It is
converted to `AllPermissions` when the registry is built, so no real
permission string is ever compared against it.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Union

from .permissions import PermissionCatalog

WILDCARD = "*"


@dataclass(frozen=True)
class AllPermissions:
    """Grants every permission, unconditionally."""


@dataclass(frozen=True)
class ExplicitPermissions:
    permissions: frozenset[str] = frozenset()


PermissionGrant = Union[AllPermissions, ExplicitPermissions]


def grant_from_list(permissions: Iterable[str]) -> PermissionGrant:
    permissions = list(permissions)
    if WILDCARD in permissions:
        return AllPermissions()
    return ExplicitPermissions(frozenset(permissions))


@dataclass(frozen=True)
class Role:
    key: str
    name: str
    description: str = ""
    grant: PermissionGrant = field(default_factory=ExplicitPermissions)
    inherits: tuple[str, ...] = ()

    @property
    def grants_all(self) -> bool:
        return isinstance(self.grant, AllPermissions)

    @property
    def explicit_permissions(self) -> frozenset[str]:
        if isinstance(self.grant, ExplicitPermissions):
            return self.grant.permissions
        return frozenset()


class RoleRegistry(Mapping[str, Role]):
    """Read-only mapping of role key -> Role."""

    def __init__(self, roles: Iterable[Role]):
        self._roles: dict[str, Role] = {}
        for role in roles:
            if role.key in self._roles:
                raise ValueError(f"Duplicate role key '{role.key}'")
            self._roles[role.key] = role

    @classmethod
    def from_definitions(cls, definitions: Mapping[str, Mapping]) -> "RoleRegistry":
        return cls(
            Role(
                key=key,
                name=definition.get("name", key),
                description=definition.get("description", ""),
                grant=grant_from_list(definition.get("permissions", [])),
                inherits=tuple(definition.get("inherits", ())),
            )
            for key, definition in definitions.items()
        )

    def lookup(self, role_key: str) -> Role | None:
        """Return the role, or None for an unknown key."""
        return self._roles.get(role_key)

    def __getitem__(self, role_key: str) -> Role:
        return self._roles[role_key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._roles)

    def __len__(self) -> int:
        return len(self._roles)

    def options(self) -> list[tuple[str, str]]:
        """(key, display name) pairs for role pickers."""
        return [(key, role.name) for key, role in self._roles.items()]

    def validate(self, catalog: PermissionCatalog) -> list[str]:
        """
        Report configuration problems without raising.

        Checks:
          - inherits references that do not resolve to a role key
          - explicit permissions missing from the catalog
          - inheritance cycles
        """
        problems: list[str] = []
        for key, role in self._roles.items():
            for parent in role.inherits:
                if parent not in self._roles:
                    problems.append(f"Role '{key}' inherits unknown role '{parent}'")
            for permission in sorted(role.explicit_permissions):
                if permission not in catalog:
                    problems.append(
                        f"Role '{key}' grants permission '{permission}' "
                        "which is not in the catalog"
                    )

        for cycle in self._find_cycles():
            problems.append("Inheritance cycle: " + " -> ".join(cycle))
        return problems

    def _find_cycles(self) -> list[list[str]]:
        # Colour-marking DFS; each back edge yields one cycle path.
        WHITE, GREY, BLACK = 0, 1, 2
        colour = {key: WHITE for key in self._roles}
        cycles: list[list[str]] = []

        for start in self._roles:
            if colour[start] != WHITE:
                continue
            path = [start]
            stack = [(start, iter(self._roles[start].inherits))]
            colour[start] = GREY
            while stack:
                key, parents = stack[-1]
                parent = next(parents, None)
                if parent is None:
                    colour[key] = BLACK
                    stack.pop()
                    path.pop()
                    continue
                if parent not in self._roles:
                    continue
                if colour[parent] == GREY:
                    cycles.append(path[path.index(parent):] + [parent])
                elif colour[parent] == WHITE:
                    colour[parent] = GREY
                    path.append(parent)
                    stack.append((parent, iter(self._roles[parent].inherits)))
        return cycles


ROLE_DEFINITIONS: dict[str, dict] = {
    # ── Customer-facing roles ───────────────────────────────────
    "manufacturer": {
        "name": "Manufacturer",
        "description": "Verified seller on the platform.",
        "permissions": [
            "products:list",
            "products:create",
            "products:update",
            "products:delete",
            "products:generate_ai_metadata",
            "shop:update:profile",
            "shop:update:policies",
            "shop:update:settings",
            "shop:view:dashboard",
            "quotations:view:own",
            "quotations:respond",
        ],
    },
    "buyer": {
        "name": "Buyer",
        "description": "Verified buyer on the platform.",
        "permissions": [
            "buyer:view:dashboard",
            "buyer:manage:orders",
            "buyer:manage:wishlist",
            "buyer:manage:messages",
            "quotations:create",
            "quotations:view:own",
        ],
    },
    "partner": {
        "name": "Growth Partner",
        "description": "Influencers and ambassadors who promote the platform.",
        "permissions": [],
    },
    # ── Administrative roles ────────────────────────────────────
    "support": {
        "name": "Support",
        "description": "Handles customer tickets and basic user issues.",
        "permissions": [
            "users:list",
            "users:view_details",
            "disputes:view:all",
            "disputes:mediate",
        ],
    },
    "user-management": {
        "name": "User Management",
        "description": "Manages user accounts, roles, and status.",
        "inherits": ["support"],
        "permissions": [
            "users:create",
            "users:update:role",
            "users:update:status",
            "users:send_password_reset",
        ],
    },
    "operations-manager": {
        "name": "Operations Manager",
        "description": "Oversees daily marketplace functions.",
        "inherits": ["user-management"],
        "permissions": [
            "verifications:view:queue",
            "verifications:approve",
            "verifications:reject",
            "verifications:restrict",
            "orders:view:all",
            "orders:update:status",
            "system:view:activity_log",
            "system:view:platform_health",
        ],
    },
    "content-management": {
        "name": "Content Management",
        "description": "Manages all site content like banners and blog posts.",
        "permissions": [
            "content:manage:banners",
            "content:manage:blog_posts",
            "content:manage:site_pages",
        ],
    },
    "marketing-manager": {
        "name": "Marketing Manager",
        "description": "Manages marketing campaigns and the ambassador network.",
        "inherits": ["content-management"],
        "permissions": [
            "marketing:view:dashboard",
            "marketing:manage:campaigns",
            "marketing:manage:ambassadors",
            "marketing:manage:growth_plans",
        ],
    },
    "finance": {
        "name": "Finance",
        "description": "Manages all financial aspects of the platform.",
        "permissions": [
            "finance:view:dashboard",
            "finance:view:transactions",
            "finance:manage:payouts",
            "finance:manage:kyc",
            "finance:generate:reports",
        ],
    },
    "tradpay-admin": {
        "name": "TradPay Admin",
        "description": "Has special privileges for manual TradPay adjustments.",
        "inherits": ["finance"],
        "permissions": [
            "finance:manage:wallet_adjustments",
            "finance:manage:escrow",
        ],
    },
    "tradcoin-airdrop": {
        "name": "TradCoin Airdrop",
        "description": "Manages the TradCoin airdrop phases and rules.",
        "permissions": [
            "tradcoin:view:dashboard",
            "tradcoin:manage:airdrop_phases",
            "tradcoin:manage:conversion_rules",
        ],
    },
    "tradinta-direct-admin": {
        "name": "Tradinta Direct Admin",
        "description": "Manages B2C orders and fulfillment.",
        "permissions": [
            "td_orders:view",
            "td_orders:update:status",
        ],
    },
    "admin": {
        "name": "Admin",
        "description": "General administrator with broad access.",
        "inherits": [
            "operations-manager",
            "marketing-manager",
            "tradpay-admin",
            "tradcoin-airdrop",
            "tradinta-direct-admin",
        ],
        "permissions": [],
    },
    "super-admin": {
        "name": "Super Admin",
        "description": "Has all possible permissions, including system-level ones.",
        "permissions": [WILDCARD],
    },
}


ROLES = RoleRegistry.from_definitions(ROLE_DEFINITIONS)
