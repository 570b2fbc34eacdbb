"""Tests for tradinta.rbac.resolver."""

import pytest

from tradinta.rbac import (
    CATALOG,
    ROLES,
    PermissionCatalog,
    PermissionResolver,
    RoleRegistry,
    expand_role_permissions,
    has_permission,
)
from tradinta.rbac.resolver import resolver


SMALL_CATALOG = PermissionCatalog(
    {
        "DOCS": {"READ": "docs:read", "WRITE": "docs:write"},
        "BILLING": {"VIEW": "billing:view", "REFUND": "billing:refund:full"},
    }
)


def make_resolver(definitions: dict) -> PermissionResolver:
    return PermissionResolver(RoleRegistry.from_definitions(definitions), SMALL_CATALOG)


# ── Production configuration ────────────────────────────────────


def test_direct_grant():
    assert has_permission("user-management", "users:update:role")


def test_inherited_grant():
    assert has_permission("user-management", "users:list")


def test_inheritance_does_not_flow_upward():
    assert not has_permission("support", "users:update:role")


def test_admin_reaches_escrow_through_tradpay_and_finance():
    assert ROLES["admin"].explicit_permissions == frozenset()
    assert has_permission("admin", "finance:manage:escrow")
    assert has_permission("admin", "finance:view:dashboard")


def test_admin_does_not_get_system_settings():
    assert not has_permission("admin", "system:manage:global_settings")
    assert not has_permission("admin", "products:create")


def test_super_admin_wildcard():
    assert has_permission("super-admin", "system:toggle:maintenance_mode")
    assert all(has_permission("super-admin", p) for p in CATALOG.all())
    assert expand_role_permissions("super-admin") == CATALOG.all()


def test_every_direct_permission_resolves():
    for key, role in ROLES.items():
        for permission in role.explicit_permissions:
            assert has_permission(key, permission)


def test_every_expanded_permission_resolves():
    for key in ROLES:
        for permission in expand_role_permissions(key):
            assert has_permission(key, permission)


def test_partner_grants_nothing():
    assert expand_role_permissions("partner") == frozenset()
    assert not has_permission("partner", "users:list")


def test_unknown_role_fails_closed():
    assert has_permission("root", "users:list") is False
    assert expand_role_permissions("root") == frozenset()
    assert resolver.reachable_roles("root") == []


def test_unknown_permission_is_false():
    assert not has_permission("admin", "spaceships:launch")


def test_admin_expansion():
    expanded = expand_role_permissions("admin")
    assert len(expanded) == 35
    assert "users:list" in expanded
    assert "content:manage:banners" in expanded
    assert "td_orders:update:status" in expanded
    assert "users:delete" not in expanded


def test_reachable_roles_follow_declaration_order():
    assert resolver.reachable_roles("admin") == [
        "admin",
        "operations-manager",
        "user-management",
        "support",
        "marketing-manager",
        "content-management",
        "tradpay-admin",
        "finance",
        "tradcoin-airdrop",
        "tradinta-direct-admin",
    ]


# ── Restrictions ────────────────────────────────────────────────


@pytest.mark.parametrize(
    "restrictions",
    [
        [],
        ["users:list"],
        ["users:list", "finance:manage:escrow", "not:a:permission"],
        sorted(CATALOG.all()),
    ],
)
def test_effective_set_never_contains_restrictions(restrictions):
    for key in ROLES:
        effective = resolver.effective_permissions(key, restrictions)
        assert not effective & set(restrictions)
        assert effective <= expand_role_permissions(key)


def test_restriction_removes_only_that_permission():
    effective = resolver.effective_permissions("support", ["disputes:mediate"])
    assert effective == {"users:list", "users:view_details", "disputes:view:all"}


def test_is_allowed_honours_restrictions():
    assert resolver.is_allowed("support", "users:list")
    assert not resolver.is_allowed("support", "users:list", ["users:list"])
    assert not resolver.is_allowed("super-admin", "system:toggle:maintenance_mode",
                                   ["system:toggle:maintenance_mode"])
    assert resolver.is_allowed("super-admin", "users:list", ["users:delete"])


def test_is_allowed_unknown_role():
    assert not resolver.is_allowed("ghost", "users:list")


# ── Fabricated graphs ───────────────────────────────────────────


def test_transitive_chain():
    r = make_resolver(
        {
            "a": {"inherits": ["b"]},
            "b": {"inherits": ["c"]},
            "c": {"permissions": ["docs:read"]},
        }
    )
    assert r.has_permission("a", "docs:read")
    assert r.expand_role_permissions("a") == {"docs:read"}
    assert not r.has_permission("c", "docs:write")


def test_two_role_cycle_terminates():
    r = make_resolver(
        {
            "admin": {"inherits": ["ops"], "permissions": ["docs:write"]},
            "ops": {"inherits": ["admin"], "permissions": ["docs:read"]},
        }
    )
    assert r.has_permission("admin", "docs:read") is True
    assert r.has_permission("ops", "docs:write") is True
    assert r.has_permission("admin", "billing:view") is False
    assert r.expand_role_permissions("ops") == {"docs:read", "docs:write"}
    assert r.reachable_roles("admin") == ["admin", "ops"]


def test_self_cycle_terminates():
    r = make_resolver({"loop": {"inherits": ["loop"]}})
    assert r.has_permission("loop", "docs:read") is False
    assert r.expand_role_permissions("loop") == frozenset()


def test_cycle_with_dangling_reference():
    r = make_resolver(
        {
            "a": {"inherits": ["missing", "b"]},
            "b": {"inherits": ["a", "missing"], "permissions": ["billing:view"]},
        }
    )
    assert r.has_permission("a", "billing:view")
    assert r.reachable_roles("a") == ["a", "b"]


def test_diamond_visits_shared_parent_once():
    r = make_resolver(
        {
            "top": {"inherits": ["left", "right"]},
            "left": {"inherits": ["base"]},
            "right": {"inherits": ["base"]},
            "base": {"permissions": ["docs:read"]},
        }
    )
    assert r.reachable_roles("top") == ["top", "left", "base", "right"]
    assert r.expand_role_permissions("top") == {"docs:read"}


def test_deep_chain_does_not_hit_recursion_limit():
    depth = 5000
    definitions = {f"r{i}": {"inherits": [f"r{i + 1}"]} for i in range(depth)}
    definitions[f"r{depth}"] = {"permissions": ["docs:write"], "inherits": ["r0"]}
    r = make_resolver(definitions)
    assert r.has_permission("r0", "docs:write")
    assert len(r.reachable_roles("r0")) == depth + 1


def test_inherited_wildcard_expands_to_catalog():
    r = make_resolver(
        {
            "owner": {"inherits": ["root"], "permissions": ["docs:read"]},
            "root": {"permissions": ["*"]},
        }
    )
    assert r.has_permission("owner", "billing:refund:full")
    assert r.expand_role_permissions("owner") == SMALL_CATALOG.all()


def test_literal_star_is_not_a_permission_name():
    r = make_resolver({"reader": {"permissions": ["docs:read"]}})
    assert not r.has_permission("reader", "*")


def test_resolver_uses_injected_registry_only():
    r = make_resolver({"support": {"permissions": ["docs:read"]}})
    assert not r.has_permission("support", "users:list")
    assert r.has_permission("support", "docs:read")
