"""
Owner Dashboard Statistics

Totals, revenue per day and best sellers for one restaurant. Orders with
no total_amount count as orders but not as revenue.
"""

import logging
from collections import OrderedDict
from datetime import datetime
from typing import Iterable, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from servelink.core.config import get_settings
from servelink.models import MenuItem, Order, OrderItem, RestaurantTable
from servelink.schemas import AnalyticsResponse, DailyRevenue, TopItem

logger = logging.getLogger(__name__)


def day_label(moment: datetime) -> str:
    """Chart label, e.g. "19 Oct"."""
    return moment.strftime("%d %b")


def summarize(
    orders: Iterable[Tuple[Optional[float], datetime]],
    item_lines: Iterable[Tuple[Optional[str], int]],
    total_tables: int,
    days: int = 7,
    top: int = 5,
) -> AnalyticsResponse:
    """
    Build the dashboard from raw rows.

    Args:
        orders: (total_amount, created_at) per order, oldest first
        item_lines: (menu item name, quantity) per order line
        total_tables: Number of tables of the restaurant
        days: Most recent day buckets to keep
        top: Number of best sellers to keep
    """
    orders = list(orders)
    totals = [amount for amount, _ in orders if amount is not None]
    revenue = sum(totals)

    by_day: "OrderedDict[str, float]" = OrderedDict()
    for amount, created_at in orders:
        label = day_label(created_at)
        by_day[label] = by_day.get(label, 0.0) + (amount or 0.0)
    revenue_by_day = [
        DailyRevenue(day=label, revenue=round(value, 2))
        for label, value in list(by_day.items())[-days:]
    ]

    grouped: dict[str, int] = {}
    for name, quantity in item_lines:
        name = name or "Unknown"
        grouped[name] = grouped.get(name, 0) + quantity
    top_items = [
        TopItem(name=name, quantity=quantity)
        for name, quantity in sorted(grouped.items(), key=lambda kv: kv[1], reverse=True)[:top]
    ]

    return AnalyticsResponse(
        total_orders=len(orders),
        total_revenue=round(revenue, 2),
        avg_order_value=round(revenue / len(totals), 2) if totals else 0.0,
        total_tables=total_tables,
        revenue_by_day=revenue_by_day,
        top_items=top_items,
    )


async def fetch_dashboard(db: AsyncSession, restaurant_id: str) -> AnalyticsResponse:
    """Query one restaurant's rows and summarize them."""
    settings = get_settings()

    order_rows = await db.execute(
        select(Order.total_amount, Order.created_at)
        .where(Order.restaurant_id == restaurant_id)
        .order_by(Order.created_at.asc())
    )
    table_count = await db.execute(
        select(func.count(RestaurantTable.id)).where(RestaurantTable.restaurant_id == restaurant_id)
    )
    item_rows = await db.execute(
        select(MenuItem.name, OrderItem.quantity)
        .join(MenuItem, OrderItem.menu_item_id == MenuItem.id)
        .where(MenuItem.restaurant_id == restaurant_id)
    )

    stats = summarize(
        orders=order_rows.all(),
        item_lines=item_rows.all(),
        total_tables=table_count.scalar() or 0,
        days=settings.analytics_days,
        top=settings.analytics_top_items,
    )
    logger.debug(f"Analytics for {restaurant_id}: {stats.total_orders} orders")
    return stats
