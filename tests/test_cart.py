import pytest

from servelink.client.api import APIResult
from servelink.client.cart import Cart

SAMOSA = {"id": "a", "name": "Samosa", "price": 100.0}
THALI = {"id": "b", "name": "Thali", "price": 50.0}


class FakeClient:
    """Records checkout calls; can fail either step."""

    def __init__(self, fail_order=False, fail_items=False):
        self.fail_order = fail_order
        self.fail_items = fail_items
        self.calls = []

    async def create_order(self, restaurant_id, total_amount, table_id=None, customer_notes=None):
        self.calls.append(("create_order", restaurant_id, total_amount, table_id, customer_notes))
        if self.fail_order:
            return APIResult(error="Restaurant not found", status_code=404)
        return APIResult(data={"id": "order-1", "order_number": "0001", "total_amount": total_amount})

    async def add_order_items(self, order_id, items):
        self.calls.append(("add_order_items", order_id, items))
        if self.fail_items:
            return APIResult(error="Unknown menu item", status_code=400)
        return APIResult(data=[{"id": f"line-{i}", **item} for i, item in enumerate(items)])


def test_adding_same_item_twice_increments_quantity():
    cart = Cart()
    cart.add(SAMOSA)
    cart.add(SAMOSA)

    assert len(cart.lines) == 1
    assert cart.quantity_of("a") == 2
    assert cart.count == 2


def test_remove_to_zero_drops_line():
    cart = Cart()
    cart.add(SAMOSA)
    cart.add(SAMOSA)
    cart.remove("a")
    assert cart.quantity_of("a") == 1

    cart.remove("a")
    assert cart.lines == []
    assert cart.is_empty

    cart.remove("missing")
    assert cart.is_empty


def test_set_quantity():
    cart = Cart()
    cart.add(THALI)
    cart.set_quantity("b", 4)
    assert cart.quantity_of("b") == 4

    cart.set_quantity("b", 0)
    assert cart.is_empty


def test_total_and_count():
    cart = Cart()
    cart.add(SAMOSA)
    cart.add(SAMOSA)
    cart.add(THALI)

    assert cart.total == 250.0
    assert cart.count == 3
    assert [line.line_total for line in cart.lines] == [200.0, 50.0]


def test_total_rounds_to_cents():
    cart = Cart()
    for _ in range(3):
        cart.add({"id": "c", "name": "Chai", "price": 0.1})
    assert cart.total == 0.3


async def test_empty_cart_makes_no_calls():
    client = FakeClient()
    result = await Cart().checkout(client, "r1")

    assert not result.ok
    assert result.error == "Your cart is empty"
    assert client.calls == []


async def test_checkout_inserts_order_then_items_and_clears():
    client = FakeClient()
    cart = Cart()
    cart.add(SAMOSA)
    cart.add(SAMOSA)
    cart.add(THALI, special_instructions="no onion")

    result = await cart.checkout(client, "r1", table_id="t1", notes="window seat")

    assert result.ok
    assert result.order["total_amount"] == 250.0
    assert len(result.order["items"]) == 2
    assert client.calls[0] == ("create_order", "r1", 250.0, "t1", "window seat")
    _, order_id, items = client.calls[1]
    assert order_id == "order-1"
    assert items == [
        {"menu_item_id": "a", "quantity": 2, "unit_price": 100.0, "special_instructions": None},
        {"menu_item_id": "b", "quantity": 1, "unit_price": 50.0, "special_instructions": "no onion"},
    ]
    assert cart.is_empty


async def test_failed_order_insert_keeps_cart():
    client = FakeClient(fail_order=True)
    cart = Cart()
    cart.add(SAMOSA)

    result = await cart.checkout(client, "r1")

    assert result.error == "Restaurant not found"
    assert result.orphan_order_id is None
    assert len(client.calls) == 1
    assert cart.count == 1


async def test_failed_item_insert_reports_orphan_order():
    client = FakeClient(fail_items=True)
    cart = Cart()
    cart.add(SAMOSA)

    result = await cart.checkout(client, "r1")

    assert not result.ok
    assert result.error == "Unknown menu item"
    assert result.orphan_order_id == "order-1"
    # Kept so the customer can retry by hand
    assert cart.count == 1


@pytest.mark.parametrize("notes", ["", None])
async def test_blank_notes_are_sent_as_none(notes):
    client = FakeClient()
    cart = Cart()
    cart.add(THALI)

    await cart.checkout(client, "r1", notes=notes)

    assert client.calls[0][4] is None
