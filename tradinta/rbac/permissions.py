"""
Permission catalog — every action the marketplace recognizes.

Permission format:  "{resource}:{action}" or "{resource}:{action}:{scope}"
  e.g. "products:create", "users:update:role"

Groups exist only for presentation (admin screens that toggle individual
permissions per user). The permission string itself is the unit of
authorization. Renaming or removing one breaks any stored per-user
restriction that references it.
"""

from collections.abc import Iterable, Mapping


PERMISSIONS: dict[str, dict[str, str]] = {
    # ── User & role management ──────────────────────────────────
    "USERS": {
        "LIST": "users:list",
        "VIEW_DETAILS": "users:view_details",
        "CREATE": "users:create",
        "UPDATE_ROLE": "users:update:role",
        "UPDATE_STATUS": "users:update:status",
        "SEND_PASSWORD_RESET": "users:send_password_reset",
        "DELETE": "users:delete",
    },
    # ── Manufacturer (seller) products ──────────────────────────
    "PRODUCTS": {
        "LIST": "products:list",
        "CREATE": "products:create",
        "UPDATE": "products:update",
        "DELETE": "products:delete",
        "VIEW_ANALYTICS": "products:view:analytics",
        "GENERATE_AI_METADATA": "products:generate_ai_metadata",
    },
    # ── Manufacturer (seller) shop profile ──────────────────────
    "SHOP": {
        "UPDATE_PROFILE": "shop:update:profile",
        "UPDATE_POLICIES": "shop:update:policies",
        "UPDATE_SETTINGS": "shop:update:settings",
        "UPDATE_KRA_PIN": "shop:update:kra_pin",
        "UPDATE_LOGO": "shop:update:logo",
        "VIEW_DASHBOARD": "shop:view:dashboard",
        "CUSTOM_THEME": "shop:custom_theme",
    },
    # ── Buyer ───────────────────────────────────────────────────
    "BUYER": {
        "VIEW_DASHBOARD": "buyer:view:dashboard",
        "MANAGE_ORDERS": "buyer:manage:orders",
        "MANAGE_WISHLIST": "buyer:manage:wishlist",
        "MANAGE_MESSAGES": "buyer:manage:messages",
    },
    # ── Quotations (RFQ) ────────────────────────────────────────
    "QUOTATIONS": {
        "CREATE": "quotations:create",
        "VIEW_OWN": "quotations:view:own",
        "RESPOND": "quotations:respond",
    },
    # ── Platform orders ─────────────────────────────────────────
    "ORDERS": {
        "VIEW_ALL": "orders:view:all",
        "UPDATE_STATUS": "orders:update:status",
    },
    # ── Tradinta Direct (B2C) orders ────────────────────────────
    "TD_ORDERS": {
        "VIEW": "td_orders:view",
        "UPDATE_STATUS": "td_orders:update:status",
    },
    # ── Site content ────────────────────────────────────────────
    "CONTENT": {
        "MANAGE_BANNERS": "content:manage:banners",
        "MANAGE_BLOG_POSTS": "content:manage:blog_posts",
        "MANAGE_SITE_PAGES": "content:manage:site_pages",
    },
    # ── Verification & compliance ───────────────────────────────
    "VERIFICATIONS": {
        "VIEW_QUEUE": "verifications:view:queue",
        "APPROVE": "verifications:approve",
        "REJECT": "verifications:reject",
        "RESTRICT": "verifications:restrict",
    },
    # ── Disputes ────────────────────────────────────────────────
    "DISPUTES": {
        "VIEW_ALL": "disputes:view:all",
        "MEDIATE": "disputes:mediate",
    },
    # ── Finance & TradPay ───────────────────────────────────────
    "FINANCE": {
        "VIEW_DASHBOARD": "finance:view:dashboard",
        "VIEW_TRANSACTIONS": "finance:view:transactions",
        "MANAGE_PAYOUTS": "finance:manage:payouts",
        "MANAGE_KYC": "finance:manage:kyc",
        "GENERATE_REPORTS": "finance:generate:reports",
        "MANAGE_WALLET_ADJUSTMENTS": "finance:manage:wallet_adjustments",
        "MANAGE_ESCROW": "finance:manage:escrow",
    },
    # ── Marketing ───────────────────────────────────────────────
    "MARKETING": {
        "VIEW_DASHBOARD": "marketing:view:dashboard",
        "MANAGE_CAMPAIGNS": "marketing:manage:campaigns",
        "MANAGE_AMBASSADORS": "marketing:manage:ambassadors",
        "MANAGE_GROWTH_PLANS": "marketing:manage:growth_plans",
    },
    # ── TradCoin airdrop ────────────────────────────────────────
    "TRADCOIN": {
        "VIEW_DASHBOARD": "tradcoin:view:dashboard",
        "MANAGE_AIRDROP_PHASES": "tradcoin:manage:airdrop_phases",
        "MANAGE_CONVERSION_RULES": "tradcoin:manage:conversion_rules",
    },
    # ── System level ────────────────────────────────────────────
    "SYSTEM": {
        "VIEW_ACTIVITY_LOG": "system:view:activity_log",
        "VIEW_PLATFORM_HEALTH": "system:view:platform_health",
        "MANAGE_GLOBAL_SETTINGS": "system:manage:global_settings",
        "TOGGLE_MAINTENANCE_MODE": "system:toggle:maintenance_mode",
    },
}


def parse_permission(permission: str) -> tuple[str, str, str | None]:
    """
    Split a permission string into (resource, action, scope).

    Raises ValueError for anything that is not "resource:action" or
    "resource:action:scope" with non-empty segments.
    """
    parts = permission.split(":")
    if len(parts) not in (2, 3) or not all(parts):
        raise ValueError(f"Malformed permission '{permission}'")
    scope = parts[2] if len(parts) == 3 else None
    return parts[0], parts[1], scope


def resource_title(resource: str) -> str:
    """'td_orders' -> 'Td Orders'"""
    return " ".join(word.capitalize() for word in resource.split("_"))


class PermissionCatalog:
    """Immutable set of recognized permissions, grouped for display."""

    def __init__(self, groups: Mapping[str, Mapping[str, str]]):
        seen: dict[str, str] = {}
        frozen: dict[str, tuple[str, ...]] = {}
        for group, entries in groups.items():
            for permission in entries.values():
                parse_permission(permission)
                if permission in seen:
                    raise ValueError(
                        f"Permission '{permission}' defined in both "
                        f"{seen[permission]} and {group}"
                    )
                seen[permission] = group
            frozen[group] = tuple(entries.values())

        self._groups = frozen
        self._group_of = seen
        self._all = frozenset(seen)

    @property
    def groups(self) -> dict[str, tuple[str, ...]]:
        return dict(self._groups)

    def all(self) -> frozenset[str]:
        return self._all

    def group_of(self, permission: str) -> str | None:
        return self._group_of.get(permission)

    def __contains__(self, permission: object) -> bool:
        return permission in self._all

    def __len__(self) -> int:
        return len(self._all)

    def group_by_resource(self, permissions: Iterable[str]) -> dict[str, list[str]]:
        """
        Group permissions by the resource prefix of each string.

        Groups appear in the order their first permission appears in the
        catalog; permissions unknown to the catalog sort last. Within a
        group, catalog order is kept.
        """
        order = {p: i for i, p in enumerate(
            p for entries in self._groups.values() for p in entries
        )}
        ranked = sorted(set(permissions), key=lambda p: (order.get(p, len(order)), p))

        grouped: dict[str, list[str]] = {}
        for permission in ranked:
            title = resource_title(permission.split(":", 1)[0])
            grouped.setdefault(title, []).append(permission)
        return grouped


CATALOG = PermissionCatalog(PERMISSIONS)
