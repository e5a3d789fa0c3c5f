"""
Client side of ServeLink: API access, session, cart and screen logic.
"""

from servelink.client.api import APIResult, ServeLinkClient
from servelink.client.auth import AuthSession
from servelink.client.cart import Cart, CartLine, CheckoutResult
from servelink.client.views import (
    AnalyticsView,
    KitchenView,
    MenuManager,
    MenuView,
    Notice,
    OrdersBoard,
    StaffDirectory,
    TableManager,
    WaiterView,
)

__all__ = [
    "APIResult",
    "ServeLinkClient",
    "AuthSession",
    "Cart",
    "CartLine",
    "CheckoutResult",
    "AnalyticsView",
    "KitchenView",
    "MenuManager",
    "MenuView",
    "Notice",
    "OrdersBoard",
    "StaffDirectory",
    "TableManager",
    "WaiterView",
]
