"""
HTTP API routers.
"""

from servelink.routers import (
    analytics,
    auth,
    menu,
    orders,
    public,
    realtime,
    restaurants,
    staff,
    tables,
)

__all__ = [
    "analytics",
    "auth",
    "menu",
    "orders",
    "public",
    "realtime",
    "restaurants",
    "staff",
    "tables",
]
