"""
Screen logic for the customer, kitchen, waiter and owner panels.

Every view keeps a local copy of the rows it shows and reloads all of them
on refresh(). Change-feed events carry no row data, so on_change() just
refreshes. Mutations go straight to the API; failures become notices and
the local rows are left alone.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from servelink.client.api import APIResult, ServeLinkClient
from servelink.client.cart import Cart, CheckoutResult
from servelink.core.config import get_settings
from servelink.enums import OrderStatus
from servelink.services.order_workflow import (
    KITCHEN_STATUSES,
    WAITER_HIDDEN_STATUSES,
    Panel,
    StatusAction,
    available_actions,
    filter_by_status,
    partition_active_past,
)

logger = logging.getLogger(__name__)

ALL_ITEMS = "all"


@dataclass
class Notice:
    """User-visible notification (a toast)."""
    title: str
    description: Optional[str] = None
    variant: str = "default"  # or "destructive"


class BaseView:
    feed_tables: Tuple[str, ...] = ()

    def __init__(self, client: ServeLinkClient):
        self.client = client
        self.rows: List[dict] = []
        self.notices: List[Notice] = []
        self.loading = False

    def notify(self, title: str, description: Optional[str] = None, variant: str = "default") -> Notice:
        notice = Notice(title, description, variant)
        self.notices.append(notice)
        return notice

    def fail(self, title: str, result: APIResult) -> None:
        self.notify(title, result.error, variant="destructive")

    async def _load(self) -> APIResult:
        raise NotImplementedError

    def _apply(self, data: Any) -> None:
        self.rows = data

    async def refresh(self) -> bool:
        """Refetch everything; on failure keep the old rows and add a notice."""
        self.loading = True
        try:
            result = await self._load()
        finally:
            self.loading = False
        if result.error:
            self.fail("Error loading data", result)
            return False
        self._apply(result.data)
        return True

    async def on_change(self, event=None) -> None:
        await self.refresh()


# =============================================================================
# ORDER BOARDS
# =============================================================================

class _OrderBoard(BaseView):
    feed_tables = ("orders",)
    panel = Panel.OWNER

    def _apply(self, data: Any) -> None:
        self.rows = data["orders"]

    def actions_for(self, order: dict) -> List[StatusAction]:
        return available_actions(OrderStatus(order["status"]), self.panel)

    async def set_status(self, order_id: str, status: OrderStatus, success: str = "Order updated") -> bool:
        result = await self.client.update_order_status(order_id, status)
        if result.error:
            self.fail("Error updating order", result)
            return False
        self.notify(success, f"Order #{result.data['order_number']} is now {OrderStatus(status).value}")
        await self.refresh()
        return True


class KitchenView(_OrderBoard):
    """Pending and preparing orders, oldest first."""
    panel = Panel.KITCHEN

    async def _load(self) -> APIResult:
        return await self.client.list_orders(statuses=KITCHEN_STATUSES, ascending=True)

    @property
    def pending(self) -> List[dict]:
        return filter_by_status(self.rows, [OrderStatus.PENDING])

    @property
    def preparing(self) -> List[dict]:
        return filter_by_status(self.rows, [OrderStatus.PREPARING])

    async def start_preparing(self, order_id: str) -> bool:
        return await self.set_status(order_id, OrderStatus.PREPARING, "Order accepted")

    async def mark_ready(self, order_id: str) -> bool:
        return await self.set_status(order_id, OrderStatus.READY, "Order ready")

    async def cancel(self, order_id: str) -> bool:
        return await self.set_status(order_id, OrderStatus.CANCELLED, "Order cancelled")


class WaiterView(_OrderBoard):
    """Every order except cancelled ones, newest first."""
    panel = Panel.WAITER

    async def _load(self) -> APIResult:
        return await self.client.list_orders(exclude=WAITER_HIDDEN_STATUSES)

    @property
    def ready(self) -> List[dict]:
        return filter_by_status(self.rows, [OrderStatus.READY])

    @property
    def active(self) -> List[dict]:
        return filter_by_status(self.rows, [OrderStatus.PENDING, OrderStatus.PREPARING])

    @property
    def completed(self) -> List[dict]:
        return filter_by_status(self.rows, [OrderStatus.COMPLETED])

    async def mark_served(self, order_id: str) -> bool:
        return await self.set_status(order_id, OrderStatus.COMPLETED, "Order served")


class OrdersBoard(_OrderBoard):
    """Owner's latest orders, newest first; actions follow the legal next statuses."""

    def __init__(self, client: ServeLinkClient, limit: Optional[int] = None):
        super().__init__(client)
        self.limit = limit or get_settings().orders_board_limit

    async def _load(self) -> APIResult:
        return await self.client.list_orders(limit=self.limit)

    @property
    def active(self) -> List[dict]:
        return partition_active_past(self.rows)[0]

    @property
    def past(self) -> List[dict]:
        return partition_active_past(self.rows)[1]

    @property
    def all(self) -> List[dict]:
        return list(self.rows)


# =============================================================================
# MENU
# =============================================================================

class MenuView(BaseView):
    """
    Customer menu opened from a table's QR code.

    Uncategorised items only show under "all".
    """
    feed_tables = ("menu_items", "menu_categories")

    def __init__(self, client: ServeLinkClient, restaurant_id: str, table_number: Optional[str] = None):
        super().__init__(client)
        self.restaurant_id = restaurant_id
        self.table_number = table_number
        self.table_id: Optional[str] = None
        self.restaurant_name: Optional[str] = None
        self.categories: List[dict] = []
        self.cart = Cart()

    async def _load(self) -> APIResult:
        return await self.client.public_menu(self.restaurant_id, table=self.table_number)

    def _apply(self, data: Any) -> None:
        self.restaurant_name = data["restaurant_name"]
        self.table_id = data["table_id"]
        self.categories = data["categories"]
        self.rows = data["items"]

    @property
    def items(self) -> List[dict]:
        return self.rows

    def items_for(self, category_id: str = ALL_ITEMS) -> List[dict]:
        if category_id == ALL_ITEMS:
            return list(self.rows)
        return [item for item in self.rows if item["category_id"] == category_id]

    async def place_order(self, notes: Optional[str] = None) -> CheckoutResult:
        result = await self.cart.checkout(
            self.client, self.restaurant_id, table_id=self.table_id, notes=notes
        )
        if result.ok:
            self.notify("Order placed!", f"Your order #{result.order['order_number']} has been received")
        else:
            self.notify("Could not place order", result.error, variant="destructive")
        return result


class MenuManager(BaseView):
    """Owner's menu editor: every category and item, refetched after each change."""
    feed_tables = ("menu_items", "menu_categories")

    def __init__(self, client: ServeLinkClient, restaurant_id: str):
        super().__init__(client)
        self.restaurant_id = restaurant_id
        self.categories: List[dict] = []

    async def _load(self) -> APIResult:
        categories = await self.client.list_categories(self.restaurant_id)
        if categories.error:
            return categories
        items = await self.client.list_menu_items(self.restaurant_id)
        if items.error:
            return items
        return APIResult(data={"categories": categories.data, "items": items.data})

    def _apply(self, data: Any) -> None:
        self.categories = data["categories"]
        self.rows = data["items"]

    @property
    def items(self) -> List[dict]:
        return self.rows

    async def _mutate(self, result: APIResult, success: str, failure: str) -> bool:
        if result.error:
            self.fail(failure, result)
            return False
        self.notify(success)
        await self.refresh()
        return True

    async def add_category(self, name: str, **fields) -> bool:
        result = await self.client.create_category(name=name, **fields)
        return await self._mutate(result, "Category added", "Error adding category")

    async def update_category(self, category_id: str, **fields) -> bool:
        result = await self.client.update_category(category_id, **fields)
        return await self._mutate(result, "Category updated", "Error updating category")

    async def delete_category(self, category_id: str) -> bool:
        result = await self.client.delete_category(category_id)
        return await self._mutate(result, "Category deleted", "Error deleting category")

    async def add_item(self, name: str, price: float, **fields) -> bool:
        result = await self.client.create_menu_item(name=name, price=price, **fields)
        return await self._mutate(result, "Menu item added", "Error adding menu item")

    async def update_item(self, item_id: str, **fields) -> bool:
        result = await self.client.update_menu_item(item_id, **fields)
        return await self._mutate(result, "Menu item updated", "Error updating menu item")

    async def set_availability(self, item_id: str, available: bool) -> bool:
        return await self.update_item(item_id, is_available=available)

    async def delete_item(self, item_id: str) -> bool:
        result = await self.client.delete_menu_item(item_id)
        return await self._mutate(result, "Menu item deleted", "Error deleting menu item")


# =============================================================================
# OWNER DASHBOARD
# =============================================================================

class TableManager(BaseView):
    feed_tables = ("restaurant_tables",)

    async def _load(self) -> APIResult:
        return await self.client.list_tables()

    async def add_table(self, table_number: str, capacity: Optional[int] = None) -> bool:
        result = await self.client.create_table(table_number, capacity)
        if result.error:
            self.fail("Error adding table", result)
            return False
        self.notify("Table added", f"Table {result.data['table_number']} with QR code")
        await self.refresh()
        return True

    async def delete_table(self, table_id: str) -> bool:
        result = await self.client.delete_table(table_id)
        if result.error:
            self.fail("Error deleting table", result)
            return False
        self.notify("Table deleted")
        await self.refresh()
        return True

    async def download_qr(self, table_id: str) -> Optional[bytes]:
        result = await self.client.table_qr_png(table_id)
        if result.error:
            self.fail("Error downloading QR code", result)
            return None
        return result.data


class StaffDirectory(BaseView):
    feed_tables = ("profiles",)

    async def _load(self) -> APIResult:
        return await self.client.list_staff()

    async def assign(self, email: str, role: str) -> bool:
        result = await self.client.assign_staff(email, role)
        if result.error:
            self.fail("Error adding staff", result)
            return False
        self.notify("Staff added", f"Panel link: {result.data['panel_link']}")
        await self.refresh()
        return True


class AnalyticsView(BaseView):
    feed_tables = ("orders",)

    def __init__(self, client: ServeLinkClient):
        super().__init__(client)
        self.stats: Optional[dict] = None

    async def _load(self) -> APIResult:
        return await self.client.analytics()

    def _apply(self, data: Any) -> None:
        self.stats = data

    @property
    def revenue_label(self) -> str:
        symbol = get_settings().currency_symbol
        return f"{symbol}{(self.stats or {}).get('total_revenue', 0):.2f}"
