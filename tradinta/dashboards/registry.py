"""Dashboards and the permission that opens each of them."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Dashboard:
    key: str
    title: str
    permission: str


DASHBOARDS: dict[str, Dashboard] = {
    d.key: d
    for d in [
        Dashboard("buyer", "Buyer", "buyer:view:dashboard"),
        Dashboard("seller-centre", "Seller Centre", "shop:view:dashboard"),
        Dashboard("support", "Support", "disputes:view:all"),
        Dashboard("user-management", "User Management", "users:update:status"),
        Dashboard("operations-manager", "Operations", "verifications:view:queue"),
        Dashboard("content-management", "Content Management", "content:manage:site_pages"),
        Dashboard("marketing-manager", "Marketing", "marketing:view:dashboard"),
        Dashboard("finance", "Finance", "finance:view:dashboard"),
        Dashboard("tradpay-admin", "TradPay Admin", "finance:manage:escrow"),
        Dashboard("tradcoin-airdrop", "TradCoin Airdrop", "tradcoin:view:dashboard"),
        Dashboard("tradinta-direct-admin", "Tradinta Direct", "td_orders:view"),
        Dashboard("super-admin", "Super Admin", "system:manage:global_settings"),
    ]
}
