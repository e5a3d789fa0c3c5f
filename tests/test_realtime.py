import asyncio

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from servelink.client.feed import FeedListener, feed_url
from servelink.services.realtime import (
    ChangeEvent,
    ChangeType,
    MemoryChangeFeed,
    get_change_feed,
)
from servelink.services.realtime.redis import RedisChangeFeed


async def next_event(subscription, timeout=1.0):
    return await asyncio.wait_for(subscription.next_event(), timeout)


def test_change_event_json():
    event = ChangeEvent("orders", ChangeType.UPDATE, "o-1", restaurant_id="r-1")
    restored = ChangeEvent.from_json(event.to_json())

    assert restored.table == "orders"
    assert restored.event is ChangeType.UPDATE
    assert restored.id == "o-1"
    assert restored.restaurant_id == "r-1"
    assert restored.timestamp == event.timestamp


def test_redis_channel_names():
    feed = RedisChangeFeed(redis_url="redis://localhost:6379/0", channel_prefix="test:changes")
    assert feed.channel_for("orders") == "test:changes:orders"


async def test_memory_feed_fans_out_to_every_subscriber():
    feed = MemoryChangeFeed()
    first = await feed.subscribe("orders")
    second = await feed.subscribe("orders")
    other = await feed.subscribe("menu_items")

    await feed.publish(ChangeEvent("orders", ChangeType.INSERT, "o-1"))

    assert (await next_event(first)).id == "o-1"
    assert (await next_event(second)).id == "o-1"
    assert other.queue.empty()


async def test_closed_subscription_stops_receiving():
    feed = MemoryChangeFeed()
    subscription = await feed.subscribe("orders")
    assert feed.subscriber_count("orders") == 1

    await subscription.aclose()
    await feed.publish(ChangeEvent("orders", ChangeType.DELETE, "o-1"))

    assert feed.subscriber_count("orders") == 0
    with pytest.raises(StopAsyncIteration):
        await subscription.next_event()


async def test_full_queue_drops_events():
    feed = MemoryChangeFeed(max_queue_size=1)
    subscription = await feed.subscribe("orders")

    await feed.publish(ChangeEvent("orders", ChangeType.INSERT, "o-1"))
    await feed.publish(ChangeEvent("orders", ChangeType.INSERT, "o-2"))

    assert (await next_event(subscription)).id == "o-1"
    assert subscription.queue.empty()


async def test_every_order_write_reaches_subscribers(client, owner):
    rid = owner["restaurant"]["id"]
    feed = get_change_feed()
    kitchen = await feed.subscribe("orders")
    waiter = await feed.subscribe("orders")

    order = (await client.post("/api/orders", json={"restaurant_id": rid, "total_amount": 10})).json()
    await client.patch(
        f"/api/orders/{order['id']}/status", json={"status": "preparing"}, headers=owner["headers"]
    )
    await client.delete(f"/api/orders/{order['id']}", headers=owner["headers"])

    for subscription in (kitchen, waiter):
        events = [await next_event(subscription) for _ in range(3)]
        assert [e.event for e in events] == [ChangeType.INSERT, ChangeType.UPDATE, ChangeType.DELETE]
        assert {e.id for e in events} == {order["id"]}
        assert {e.restaurant_id for e in events} == {rid}


def test_feed_url():
    assert feed_url("http://localhost:8001/", "orders") == "ws://localhost:8001/realtime/orders"
    assert feed_url("https://eat.example.com", "orders", "r 1") == (
        "wss://eat.example.com/realtime/orders?restaurant_id=r+1"
    )


async def test_listener_dispatches_changes_to_views():
    class RecordingView:
        def __init__(self):
            self.events = []

        async def on_change(self, event=None):
            self.events.append(event)

    listener = FeedListener("http://testserver", "orders")
    view = RecordingView()
    listener.register(view)

    assert await listener.dispatch('{"type": "subscribed", "table": "orders"}') is None
    event = await listener.dispatch(
        ChangeEvent("orders", ChangeType.INSERT, "o-1").to_json().replace("{", '{"type": "change", ', 1)
    )

    assert event.id == "o-1"
    assert [e.id for e in view.events] == ["o-1"]


def test_websocket_streams_order_changes(sync_fresh_db):
    from servelink.main import app

    with TestClient(app) as tc:
        signup = tc.post(
            "/api/auth/signup",
            json={"email": "owner@example.com", "password": "secret123", "full_name": "Owner"},
        ).json()
        headers = {"Authorization": f"Bearer {signup['access_token']}"}
        rid = tc.get("/api/restaurants/me", headers=headers).json()["id"]

        with tc.websocket_connect(f"/realtime/orders?restaurant_id={rid}") as ws:
            assert ws.receive_json() == {"type": "subscribed", "table": "orders"}

            order = tc.post("/api/orders", json={"restaurant_id": rid, "total_amount": 99.0}).json()
            message = ws.receive_json()
            assert message["type"] == "change"
            assert message["table"] == "orders"
            assert message["event"] == "INSERT"
            assert message["id"] == order["id"]

            ws.send_text("ping")
            assert ws.receive_json() == {"type": "pong"}


def test_websocket_rejects_unknown_table(sync_fresh_db):
    from servelink.main import app

    with TestClient(app) as tc:
        with pytest.raises(WebSocketDisconnect):
            with tc.websocket_connect("/realtime/users") as ws:
                ws.receive_json()
