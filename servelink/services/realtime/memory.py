"""
In-Process Change Feed

Fans events out to asyncio queues, one per subscriber. Used in development
mode and in tests where the API runs as a single process.
"""

import asyncio
import logging
from typing import Dict, Set

from servelink.services.realtime.base import BaseChangeFeed, ChangeEvent, Subscription

logger = logging.getLogger(__name__)


class QueueSubscription(Subscription):
    """Subscription reading from a private queue."""

    def __init__(self, feed: "MemoryChangeFeed", table: str, max_queue_size: int):
        super().__init__(table)
        self._feed = feed
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self.closed = False

    async def next_event(self) -> ChangeEvent:
        if self.closed:
            raise StopAsyncIteration
        return await self.queue.get()

    async def aclose(self) -> None:
        if not self.closed:
            self.closed = True
            self._feed._remove(self)


class MemoryChangeFeed(BaseChangeFeed):
    """
    Change feed backed by in-memory queues.

    Attributes:
        max_queue_size: Events buffered per subscriber before new ones
            are dropped for that subscriber
    """

    def __init__(self, max_queue_size: int = 1000):
        self.max_queue_size = max_queue_size
        # table -> set(subscription)
        self._subscribers: Dict[str, Set[QueueSubscription]] = {}
        logger.info(f"MemoryChangeFeed initialized (queue_size={max_queue_size})")

    @property
    def provider_name(self) -> str:
        return "memory"

    def subscriber_count(self, table: str) -> int:
        return len(self._subscribers.get(table, ()))

    async def publish(self, event: ChangeEvent) -> None:
        subscriptions = list(self._subscribers.get(event.table, ()))
        logger.debug(
            f"Publishing {event.event.value} on {event.table} ({event.id}) "
            f"to {len(subscriptions)} subscriber(s)"
        )
        for subscription in subscriptions:
            try:
                subscription.queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Subscriber queue full on {event.table}, event dropped")

    async def subscribe(self, table: str) -> QueueSubscription:
        subscription = QueueSubscription(self, table, self.max_queue_size)
        self._subscribers.setdefault(table, set()).add(subscription)
        logger.debug(f"Subscribed to {table} ({self.subscriber_count(table)} active)")
        return subscription

    def _remove(self, subscription: QueueSubscription) -> None:
        subscriptions = self._subscribers.get(subscription.table)
        if subscriptions is None:
            return
        subscriptions.discard(subscription)
        if not subscriptions:
            del self._subscribers[subscription.table]
        logger.debug(f"Unsubscribed from {subscription.table}")

    async def health_check(self) -> bool:
        return True
