"""
Shared enumerations.

Kept apart from the ORM models so the client package can use them
without loading the database layer.
"""

import enum


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class StaffRole(str, enum.Enum):
    """Staff role - decides which panel a signed-in user is routed to."""
    OWNER = "owner"
    KITCHEN = "kitchen"
    WAITER = "waiter"
