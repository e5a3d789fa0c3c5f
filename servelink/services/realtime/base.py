"""
Change Feed Abstract Base Class

Defines the interface for the row-level change notifications every open
screen listens to. An event names the table, the kind of change and the
row id; it never carries the row itself, so listeners refetch.

Design Pattern: Strategy Pattern
    - MemoryChangeFeed for a single process (development, tests)
    - RedisChangeFeed when several worker processes share one feed
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


# Tables a client may subscribe to
FEED_TABLES = (
    "restaurants",
    "menu_categories",
    "menu_items",
    "restaurant_tables",
    "orders",
    "order_items",
    "profiles",
)


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class ChangeEvent:
    """
    One insert/update/delete on a table.

    Attributes:
        table: Table name (e.g. "orders")
        event: Kind of change
        id: Primary key of the affected row
        restaurant_id: Owning restaurant when known, for client-side filtering
        timestamp: When the change was published
    """
    table: str
    event: ChangeType
    id: str
    restaurant_id: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "table": self.table,
            "event": self.event.value,
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "ChangeEvent":
        timestamp = data.get("timestamp")
        return cls(
            table=data["table"],
            event=ChangeType(data["event"]),
            id=data["id"],
            restaurant_id=data.get("restaurant_id"),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now(timezone.utc),
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> "ChangeEvent":
        return cls.from_dict(json.loads(raw))


class Subscription(ABC):
    """
    Live stream of events for one table.

    Registered as soon as it is returned by subscribe(), so events published
    after that point are never missed. Iterate with `async for`; call
    aclose() to unsubscribe.
    """

    def __init__(self, table: str):
        self.table = table

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> ChangeEvent:
        return await self.next_event()

    @abstractmethod
    async def next_event(self) -> ChangeEvent:
        """Wait for the next event."""
        pass

    @abstractmethod
    async def aclose(self) -> None:
        """Stop receiving events."""
        pass


class BaseChangeFeed(ABC):
    """
    Abstract base class for change feeds.

    Publishing never raises for delivery problems: a write that already
    committed stays committed even if nobody hears about it.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the feed backend name (e.g. "memory", "redis")."""
        pass

    @abstractmethod
    async def publish(self, event: ChangeEvent) -> None:
        """Deliver an event to every current subscriber of its table."""
        pass

    @abstractmethod
    async def subscribe(self, table: str) -> Subscription:
        """Start listening to one table."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the feed backend is reachable."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None
