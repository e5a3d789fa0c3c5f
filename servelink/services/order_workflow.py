"""
Order Status Workflow

Five states, operator-driven, no timeouts:

    pending ──► preparing ──► ready ──► completed
       │            │
       └────────────┴──► cancelled

Completed and cancelled are terminal. Screens only offer the actions in
TRANSITIONS; the write path itself accepts any status unless
strict_status_transitions is enabled.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple, TypeVar

from servelink.enums import OrderStatus


TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

ACTIVE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY})
PAST_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})
TERMINAL_STATUSES = PAST_STATUSES

# Statuses each staff queue shows
KITCHEN_STATUSES = (OrderStatus.PENDING, OrderStatus.PREPARING)
WAITER_HIDDEN_STATUSES = (OrderStatus.CANCELLED,)


class Panel(str, Enum):
    KITCHEN = "kitchen"
    WAITER = "waiter"
    OWNER = "owner"


@dataclass(frozen=True)
class StatusAction:
    """A button a screen shows for an order."""
    label: str
    target: OrderStatus


_PANEL_ACTIONS: dict[Panel, dict[OrderStatus, Tuple[StatusAction, ...]]] = {
    Panel.KITCHEN: {
        OrderStatus.PENDING: (
            StatusAction("Start Preparing", OrderStatus.PREPARING),
            StatusAction("Cancel", OrderStatus.CANCELLED),
        ),
        OrderStatus.PREPARING: (
            StatusAction("Mark Ready", OrderStatus.READY),
            StatusAction("Cancel", OrderStatus.CANCELLED),
        ),
    },
    Panel.WAITER: {
        OrderStatus.READY: (StatusAction("Mark Served", OrderStatus.COMPLETED),),
    },
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in TRANSITIONS[current]


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def available_actions(status: OrderStatus, panel: Panel = Panel.OWNER) -> List[StatusAction]:
    """
    Actions a panel offers for an order in the given status.

    The owner's board offers every legal next status; kitchen and waiter
    panels offer only their own buttons. Terminal orders get nothing.
    """
    if panel == Panel.OWNER:
        return [
            StatusAction(target.value.capitalize(), target)
            for target in OrderStatus
            if target in TRANSITIONS[status]
        ]
    return list(_PANEL_ACTIONS[panel].get(status, ()))


T = TypeVar("T")


def filter_by_status(orders: Iterable[T], statuses: Iterable[OrderStatus]) -> List[T]:
    """Keep orders whose `status` is in statuses (order-preserving)."""
    wanted = {OrderStatus(s) for s in statuses}
    return [o for o in orders if OrderStatus(_status_of(o)) in wanted]


def partition_active_past(orders: Iterable[T]) -> Tuple[List[T], List[T]]:
    """Split orders into (active, past); every order lands in exactly one."""
    orders = list(orders)
    return filter_by_status(orders, ACTIVE_STATUSES), filter_by_status(orders, PAST_STATUSES)


def _status_of(order) -> str:
    if isinstance(order, dict):
        return order["status"]
    return order.status
