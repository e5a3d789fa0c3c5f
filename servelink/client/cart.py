"""
Customer cart and checkout.

The cart lives only in memory. Checkout is two independent calls:

    1. insert the order with total_amount = cart total
    2. insert the order's items in one batch

No transaction spans them. If step 2 fails the order stays on the server
without items; the result reports it as `orphan_order_id` and the cart is
kept so the customer can try again. Nothing is retried or cleaned up.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, List, Optional

from servelink.client.api import ServeLinkClient

logger = logging.getLogger(__name__)


@dataclass
class CartLine:
    menu_item_id: str
    name: str
    price: float
    quantity: int = 1
    special_instructions: Optional[str] = None

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


@dataclass
class CheckoutResult:
    order: Optional[dict] = None
    error: Optional[str] = None
    orphan_order_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _field(item: Any, name: str):
    if isinstance(item, dict):
        return item[name]
    return getattr(item, name)


class Cart:
    """Menu item id -> quantity, with the item's name and price at add time."""

    def __init__(self):
        self._lines: "OrderedDict[str, CartLine]" = OrderedDict()

    def add(self, item: Any, special_instructions: Optional[str] = None) -> CartLine:
        """Add one unit of a menu item (a dict or object with id, name, price)."""
        item_id = _field(item, "id")
        line = self._lines.get(item_id)
        if line is None:
            line = CartLine(
                menu_item_id=item_id,
                name=_field(item, "name"),
                price=float(_field(item, "price")),
                quantity=0,
            )
            self._lines[item_id] = line
        line.quantity += 1
        if special_instructions is not None:
            line.special_instructions = special_instructions
        return line

    def remove(self, item_id: str) -> None:
        """Take one unit away; the line disappears at zero."""
        line = self._lines.get(item_id)
        if line is None:
            return
        line.quantity -= 1
        if line.quantity <= 0:
            del self._lines[item_id]

    def set_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self._lines.pop(item_id, None)
            return
        if item_id in self._lines:
            self._lines[item_id].quantity = quantity

    def quantity_of(self, item_id: str) -> int:
        line = self._lines.get(item_id)
        return line.quantity if line else 0

    def clear(self) -> None:
        self._lines.clear()

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    @property
    def total(self) -> float:
        return round(sum(line.price * line.quantity for line in self._lines.values()), 2)

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def order_items_payload(self) -> List[dict]:
        return [
            {
                "menu_item_id": line.menu_item_id,
                "quantity": line.quantity,
                "unit_price": line.price,
                "special_instructions": line.special_instructions,
            }
            for line in self._lines.values()
        ]

    async def checkout(
        self,
        client: ServeLinkClient,
        restaurant_id: str,
        table_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> CheckoutResult:
        if self.is_empty:
            return CheckoutResult(error="Your cart is empty")

        order_result = await client.create_order(
            restaurant_id,
            total_amount=self.total,
            table_id=table_id,
            customer_notes=notes or None,
        )
        if order_result.error:
            return CheckoutResult(error=order_result.error)

        order = order_result.data
        items_result = await client.add_order_items(order["id"], self.order_items_payload())
        if items_result.error:
            logger.warning(f"Order {order['id']} saved without items: {items_result.error}")
            return CheckoutResult(order=order, error=items_result.error, orphan_order_id=order["id"])

        order["items"] = items_result.data
        self.clear()
        logger.info(f"Order #{order['order_number']} placed")
        return CheckoutResult(order=order)
