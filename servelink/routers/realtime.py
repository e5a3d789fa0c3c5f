"""
Change feed over websockets.

A client connects to /realtime/{table} and receives one JSON message per
insert, update or delete on that table:

    {"type": "change", "table": "orders", "event": "UPDATE", "id": "...", ...}

The first message is {"type": "subscribed", "table": ...}; anything sent
after it is a change. Clients may send "ping" and get {"type": "pong"}.
"""

import asyncio
import json
import logging
from typing import Dict, Optional, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from servelink.services.realtime import FEED_TABLES, Subscription, get_change_feed

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


class FeedConnectionManager:
    """Open websocket connections per table."""

    def __init__(self):
        # table -> set(WebSocket)
        self.connections: Dict[str, Set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, table: str):
        await websocket.accept()
        async with self._lock:
            self.connections.setdefault(table, set()).add(websocket)

    async def disconnect(self, websocket: WebSocket, table: str):
        async with self._lock:
            sockets = self.connections.get(table, set())
            sockets.discard(websocket)
            if not sockets:
                self.connections.pop(table, None)

    def count(self, table: Optional[str] = None) -> int:
        if table is not None:
            return len(self.connections.get(table, ()))
        return sum(len(sockets) for sockets in self.connections.values())


feed_connections = FeedConnectionManager()


async def _forward(websocket: WebSocket, subscription: Subscription, restaurant_id: Optional[str]):
    async for event in subscription:
        # Events without an owner (e.g. profiles) go to everyone
        if restaurant_id and event.restaurant_id not in (None, restaurant_id):
            continue
        await websocket.send_text(json.dumps({"type": "change", **event.to_dict()}))


@router.websocket("/realtime/{table}")
async def realtime_feed(websocket: WebSocket, table: str, restaurant_id: Optional[str] = None):
    if table not in FEED_TABLES:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    subscription = await get_change_feed().subscribe(table)
    await feed_connections.connect(websocket, table)
    logger.info(f"Feed listener joined '{table}' ({feed_connections.count(table)} open)")

    sender = None
    try:
        await websocket.send_text(json.dumps({"type": "subscribed", "table": table}))
        sender = asyncio.create_task(_forward(websocket, subscription, restaurant_id))
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
    except WebSocketDisconnect:
        pass
    finally:
        if sender is not None:
            sender.cancel()
            try:
                await sender
            except (asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
                pass
        await subscription.aclose()
        await feed_connections.disconnect(websocket, table)
        logger.info(f"Feed listener left '{table}'")
