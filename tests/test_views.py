import httpx
import pytest

from servelink.client import (
    AnalyticsView,
    KitchenView,
    MenuManager,
    MenuView,
    OrdersBoard,
    ServeLinkClient,
    StaffDirectory,
    TableManager,
    WaiterView,
)
from servelink.client.cart import Cart
from servelink.enums import OrderStatus
from servelink.main import app


@pytest.fixture
async def owner_api(api):
    """Signed-in owner client plus a small menu: (client, restaurant_id, items by name)."""
    await api.signup("owner@example.com", "secret123", full_name="Asha Rao")
    rid = (await api.my_restaurant()).data["id"]
    mains = (await api.create_category(name="Mains")).data
    items = {}
    for payload in (
        {"name": "Samosa", "price": 100.0},
        {"name": "Thali", "price": 50.0, "category_id": mains["id"]},
    ):
        items[payload["name"]] = (await api.create_menu_item(**payload)).data
    return api, rid, items


async def checkout(api, rid, lines):
    cart = Cart()
    for item, quantity in lines:
        for _ in range(quantity):
            cart.add(item)
    result = await cart.checkout(api, rid)
    assert result.ok, result.error
    return result.order


async def test_checkout_example_through_client(owner_api):
    api, rid, items = owner_api
    order = await checkout(api, rid, [(items["Samosa"], 2), (items["Thali"], 1)])

    assert order["total_amount"] == 250.0
    assert len(order["items"]) == 2

    stored = (await api.get_order(order["id"])).data
    assert stored["total_amount"] == 250.0
    assert len(stored["items"]) == 2


async def test_large_quantity_checkout(owner_api):
    api, rid, items = owner_api
    cart = Cart()
    cart.add(items["Thali"], special_instructions="No onion. " * 40)
    cart.set_quantity(items["Thali"]["id"], 150)

    result = await cart.checkout(api, rid)

    assert result.ok, result.error
    assert result.orphan_order_id is None
    stored = (await api.get_order(result.order["id"])).data
    assert stored["total_amount"] == 7500.0
    assert [line["quantity"] for line in stored["items"]] == [150]


async def test_orphan_order_through_client(owner_api):
    api, rid, items = owner_api
    cart = Cart()
    cart.add({"id": "deleted-item", "name": "Ghost", "price": 10.0})

    result = await cart.checkout(api, rid)

    assert result.error == "Unknown menu item"
    assert result.orphan_order_id
    orphan = (await api.get_order(result.orphan_order_id)).data
    assert orphan["items"] == []
    assert cart.count == 1


async def test_kitchen_view(owner_api):
    api, rid, items = owner_api
    first = await checkout(api, rid, [(items["Samosa"], 1)])
    second = await checkout(api, rid, [(items["Thali"], 1)])
    done = await checkout(api, rid, [(items["Thali"], 1)])
    await api.update_order_status(done["id"], OrderStatus.READY)

    view = KitchenView(api)
    assert await view.refresh()
    # Oldest first, ready orders are not the kitchen's business
    assert [o["id"] for o in view.rows] == [first["id"], second["id"]]
    assert [a.label for a in view.actions_for(view.rows[0])] == ["Start Preparing", "Cancel"]

    assert await view.start_preparing(first["id"])
    assert view.notices[-1].title == "Order accepted"
    # Rows are reloaded after every successful write
    assert [o["id"] for o in view.preparing] == [first["id"]]
    assert [o["id"] for o in view.pending] == [second["id"]]

    await view.mark_ready(first["id"])
    await view.cancel(second["id"])
    assert view.rows == []


async def test_failed_status_write_keeps_rows(owner_api):
    api, rid, items = owner_api
    order = await checkout(api, rid, [(items["Samosa"], 1)])
    view = KitchenView(api)
    await view.refresh()

    api.token = None
    assert not await view.start_preparing(order["id"])

    assert [o["status"] for o in view.rows] == ["pending"]
    assert view.notices[-1].title == "Error updating order"


async def test_waiter_view_tabs(owner_api):
    api, rid, items = owner_api
    pending = await checkout(api, rid, [(items["Samosa"], 1)])
    ready = await checkout(api, rid, [(items["Samosa"], 1)])
    cancelled = await checkout(api, rid, [(items["Samosa"], 1)])
    await api.update_order_status(ready["id"], "ready")
    await api.update_order_status(cancelled["id"], "cancelled")

    view = WaiterView(api)
    await view.refresh()

    assert cancelled["id"] not in [o["id"] for o in view.rows]
    assert [o["id"] for o in view.ready] == [ready["id"]]
    assert [o["id"] for o in view.active] == [pending["id"]]
    assert view.completed == []
    assert [a.label for a in view.actions_for(view.ready[0])] == ["Mark Served"]

    assert await view.mark_served(ready["id"])
    assert view.ready == []
    assert [o["id"] for o in view.completed] == [ready["id"]]


async def test_orders_board_partitions(owner_api):
    api, rid, items = owner_api
    orders = [await checkout(api, rid, [(items["Thali"], 1)]) for _ in range(4)]
    await api.update_order_status(orders[0]["id"], "completed")
    await api.update_order_status(orders[1]["id"], "cancelled")

    board = OrdersBoard(api)
    await board.refresh()

    assert len(board.all) == 4
    assert {o["id"] for o in board.past} == {orders[0]["id"], orders[1]["id"]}
    assert {o["id"] for o in board.active} == {orders[2]["id"], orders[3]["id"]}
    # Newest first
    assert board.all[0]["id"] == orders[3]["id"]

    assert await board.set_status(orders[2]["id"], OrderStatus.COMPLETED)
    assert {o["id"] for o in board.active} == {orders[3]["id"]}
    assert {o["id"] for o in board.past} == {orders[0]["id"], orders[1]["id"], orders[2]["id"]}


async def test_orders_board_limit(owner_api):
    api, rid, items = owner_api
    for _ in range(3):
        await checkout(api, rid, [(items["Thali"], 1)])

    board = OrdersBoard(api, limit=2)
    await board.refresh()
    assert len(board.rows) == 2


async def test_failed_load_keeps_rows_and_adds_notice(owner_api):
    api, rid, items = owner_api
    await checkout(api, rid, [(items["Thali"], 1)])
    view = KitchenView(api)
    await view.refresh()
    assert len(view.rows) == 1

    api.token = None
    assert not await view.refresh()

    assert len(view.rows) == 1
    assert view.notices[-1].title == "Error loading data"
    assert view.notices[-1].variant == "destructive"


async def test_failed_status_update_adds_notice(owner_api):
    api, _, _ = owner_api
    view = KitchenView(api)

    assert not await view.mark_ready("missing-order")
    assert view.notices[-1].title == "Error updating order"
    assert view.notices[-1].variant == "destructive"


async def test_menu_view_filters_and_places_order(owner_api):
    api, rid, items = owner_api
    await api.create_table("4")
    mains = next(iter((await api.list_categories(rid)).data))

    async with ServeLinkClient("http://testserver", transport=httpx.ASGITransport(app=app)) as guest:
        view = MenuView(guest, rid, table_number="4")
        await view.refresh()

        assert view.restaurant_name == "Asha Rao's Restaurant"
        assert view.table_id is not None
        assert [i["name"] for i in view.items_for("all")] == ["Samosa", "Thali"]
        # Uncategorised items only show under "all"
        assert [i["name"] for i in view.items_for(mains["id"])] == ["Thali"]

        empty = await view.place_order()
        assert empty.error == "Your cart is empty"
        assert view.notices[-1].variant == "destructive"

        view.cart.add(items["Samosa"])
        view.cart.add(items["Thali"])
        result = await view.place_order(notes="Extra napkins")

    assert result.ok
    assert view.cart.is_empty
    assert view.notices[-1].title == "Order placed!"
    order = (await api.get_order(result.order["id"])).data
    assert order["table_number"] == "4"
    assert order["customer_notes"] == "Extra napkins"
    assert order["total_amount"] == 150.0


async def test_menu_manager(owner_api):
    api, rid, items = owner_api
    manager = MenuManager(api, rid)
    await manager.refresh()
    assert [c["name"] for c in manager.categories] == ["Mains"]
    assert [i["name"] for i in manager.items] == ["Samosa", "Thali"]

    assert await manager.add_category("Drinks", display_order=5)
    assert await manager.add_item("Lassi", 89.0)
    assert [i["name"] for i in manager.items] == ["Lassi", "Samosa", "Thali"]
    assert [c["name"] for c in manager.categories] == ["Mains", "Drinks"]

    assert await manager.set_availability(items["Samosa"]["id"], False)
    samosa = next(i for i in manager.items if i["name"] == "Samosa")
    assert samosa["is_available"] is False

    assert await manager.delete_item(items["Samosa"]["id"])
    assert "Samosa" not in [i["name"] for i in manager.items]

    assert not await manager.add_item("", 10.0)
    assert manager.notices[-1].title == "Error adding menu item"


async def test_table_manager(owner_api):
    api, _, _ = owner_api
    tables = TableManager(api)

    assert await tables.add_table("2")
    assert await tables.add_table("1", capacity=8)
    assert [(t["table_number"], t["capacity"]) for t in tables.rows] == [("1", 8), ("2", 4)]

    png = await tables.download_qr(tables.rows[0]["id"])
    assert png.startswith(b"\x89PNG")

    assert await tables.delete_table(tables.rows[0]["id"])
    assert [t["table_number"] for t in tables.rows] == ["2"]


async def test_staff_directory(owner_api):
    api, _, _ = owner_api
    async with ServeLinkClient("http://testserver", transport=httpx.ASGITransport(app=app)) as cook:
        await cook.signup("cook@example.com", "secret123", full_name="Cook", role="kitchen")

    directory = StaffDirectory(api)
    assert await directory.assign("cook@example.com", "kitchen")
    assert [(m["full_name"], m["panel_link"]) for m in directory.rows] == [
        ("Cook", "http://testserver/kitchen")
    ]

    assert not await directory.assign("ghost@example.com", "waiter")
    assert directory.notices[-1].variant == "destructive"


async def test_analytics_view(owner_api):
    api, rid, items = owner_api
    await checkout(api, rid, [(items["Samosa"], 2), (items["Thali"], 1)])

    view = AnalyticsView(api)
    await view.refresh()

    assert view.stats["total_orders"] == 1
    assert view.revenue_label == "₹250.00"
