"""
Change-feed listener.

Connects to /realtime/{table} and hands every change to the registered
views, which refetch their rows.

Usage:
    listener = FeedListener("http://localhost:8001", "orders")
    listener.register(kitchen_view)
    task = asyncio.create_task(listener.run())
    ...
    listener.stop()
"""

import asyncio
import json
import logging
from typing import List, Optional
from urllib.parse import urlencode

import websockets

from servelink.client.views import BaseView
from servelink.services.realtime.base import ChangeEvent

logger = logging.getLogger(__name__)


def feed_url(base_url: str, table: str, restaurant_id: Optional[str] = None) -> str:
    """Websocket URL of a table's feed (http -> ws, https -> wss)."""
    base = base_url.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://"):]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://"):]
    url = f"{base}/realtime/{table}"
    if restaurant_id:
        url += "?" + urlencode({"restaurant_id": restaurant_id})
    return url


class FeedListener:
    def __init__(self, base_url: str, table: str, restaurant_id: Optional[str] = None):
        self.url = feed_url(base_url, table, restaurant_id)
        self.table = table
        self.views: List[BaseView] = []
        self._stopped = asyncio.Event()

    def register(self, view: BaseView) -> None:
        self.views.append(view)

    def stop(self) -> None:
        self._stopped.set()

    async def dispatch(self, raw: str) -> Optional[ChangeEvent]:
        """Deliver one feed message; returns the change if it was one."""
        message = json.loads(raw)
        if message.get("type") != "change":
            return None
        event = ChangeEvent.from_dict(message)
        for view in self.views:
            await view.on_change(event)
        return event

    async def run(self) -> None:
        """Listen until stop() is called or the server closes the socket."""
        async with websockets.connect(self.url) as ws:
            logger.info(f"Listening to {self.url}")
            stop_task = asyncio.create_task(self._stopped.wait())
            try:
                while not self._stopped.is_set():
                    receive = asyncio.create_task(ws.recv())
                    done, _ = await asyncio.wait(
                        {receive, stop_task}, return_when=asyncio.FIRST_COMPLETED
                    )
                    if receive not in done:
                        receive.cancel()
                        break
                    await self.dispatch(receive.result())
            except websockets.ConnectionClosed:
                logger.info(f"Feed {self.table} closed by server")
            finally:
                stop_task.cancel()
