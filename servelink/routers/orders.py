"""
Orders and order items.

Customers place orders without signing in, in two separate calls: the
order header first, then the batch of its items. Nothing ties the two
together; an order whose item batch fails simply stays with no items.

Staff read and update orders of their own restaurant. Status writes are
last-write-wins unless strict_status_transitions is enabled.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from servelink import crud
from servelink.core.config import get_settings
from servelink.database import get_db
from servelink.dependencies import get_current_restaurant, get_owned_restaurant
from servelink.enums import OrderStatus
from servelink.models import Order, Restaurant, RestaurantTable
from servelink.schemas import (
    ErrorResponse,
    MessageResponse,
    OrderCreate,
    OrderItemCreate,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from servelink.services.order_workflow import can_transition

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("", response_model=OrderListResponse)
async def list_orders(
    restaurant_id: Optional[str] = Query(None),
    status_in: Optional[List[OrderStatus]] = Query(None, alias="status"),
    exclude_status: Optional[List[OrderStatus]] = Query(None),
    ascending: bool = Query(False),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    restaurant: Restaurant = Depends(get_current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> OrderListResponse:
    """
    Orders of the caller's restaurant, newest first by default.

    `status` keeps only the given statuses, `exclude_status` drops them;
    both may be repeated.
    """
    if restaurant_id is not None and restaurant_id != restaurant.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your restaurant")

    where = []
    if status_in:
        where.append(Order.status.in_(status_in))
    if exclude_status:
        where.append(Order.status.not_in(exclude_status))

    orders = await crud.orders.get_all(
        db,
        filters={"restaurant_id": restaurant.id},
        where=where,
        order_by="created_at",
        descending=not ascending,
        limit=limit or get_settings().orders_board_limit,
    )
    return OrderListResponse(
        total=len(orders),
        orders=[OrderResponse.model_validate(order) for order in orders],
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    restaurant: Restaurant = Depends(get_current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    order = await crud.orders.get(db, order_id, restaurant_id=restaurant.id)
    return OrderResponse.model_validate(order)


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def create_order(
    payload: OrderCreate,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """
    Insert an order header.

    The total is whatever the caller computed; it is not checked against
    the items sent afterwards.
    """
    if await db.get(Restaurant, payload.restaurant_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Restaurant not found")
    if payload.table_id is not None:
        table = await db.get(RestaurantTable, payload.table_id)
        if table is None or table.restaurant_id != payload.restaurant_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Table not found")

    order_number = await crud.next_order_number(db, payload.restaurant_id)
    order = await crud.orders.create(
        db,
        {
            **payload.model_dump(),
            "order_number": order_number,
            "status": OrderStatus.PENDING,
        },
    )
    logger.info(f"Order #{order_number} placed ({payload.total_amount})")
    order = await crud.orders.get(db, order.id)
    return OrderResponse.model_validate(order)


@router.post(
    "/{order_id}/items",
    response_model=List[OrderItemResponse],
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def add_order_items(
    order_id: str,
    items: List[OrderItemCreate],
    db: AsyncSession = Depends(get_db),
) -> List[OrderItemResponse]:
    """Insert a batch of lines for an existing order in one commit."""
    await crud.orders.get(db, order_id)
    if not items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No items given")

    try:
        created = await crud.order_items.create_many(
            db, [{**item.model_dump(), "order_id": order_id} for item in items]
        )
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Item batch for order {order_id} rejected: unknown menu item")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown menu item")
    new_ids = {line.id for line in created}

    order = await crud.orders.get(db, order_id)
    return [
        OrderItemResponse.model_validate(line)
        for line in order.items
        if line.id in new_ids
    ]


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    responses={409: {"model": ErrorResponse}},
)
async def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    restaurant: Restaurant = Depends(get_current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    order = await crud.orders.get(db, order_id, restaurant_id=restaurant.id)
    current = order.status

    if get_settings().strict_status_transitions and not can_transition(current, payload.status):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot move order from {current.value} to {payload.status.value}",
        )

    await crud.orders.update(db, order, {"status": payload.status})
    logger.info(f"Order #{order.order_number}: {current.value} -> {payload.status.value}")
    order = await crud.orders.get(db, order_id)
    return OrderResponse.model_validate(order)


@router.delete("/{order_id}", response_model=MessageResponse)
async def delete_order(
    order_id: str,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    order = await crud.orders.get(db, order_id, restaurant_id=restaurant.id)
    await crud.orders.remove(db, order)
    return MessageResponse(message=f"Order #{order.order_number} deleted")
