"""
Customer menu reached by scanning a table's QR code.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from servelink import crud
from servelink.database import get_db
from servelink.models import Restaurant
from servelink.schemas import CategoryResponse, MenuItemResponse, PublicMenuResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/public", tags=["Public Menu"])


@router.get("/menu/{restaurant_id}", response_model=PublicMenuResponse)
async def public_menu(
    restaurant_id: str,
    table: Optional[str] = Query(None, description="Table number from the QR code"),
    db: AsyncSession = Depends(get_db),
) -> PublicMenuResponse:
    """
    Active categories and available items of a restaurant.

    An unknown table number is not an error: the menu still loads, the
    order just won't be linked to a table.
    """
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Restaurant not found")

    categories = await crud.categories.get_all(
        db,
        filters={"restaurant_id": restaurant_id, "is_active": True},
        order_by="display_order",
    )
    items = await crud.menu_items.get_all(
        db,
        filters={"restaurant_id": restaurant_id, "is_available": True},
        order_by="name",
    )

    table_id = None
    if table:
        matches = await crud.tables.get_all(
            db, filters={"restaurant_id": restaurant_id, "table_number": table}, limit=1
        )
        if matches:
            table_id = matches[0].id
        else:
            logger.warning(f"Table {table} not found in restaurant {restaurant_id}")

    return PublicMenuResponse(
        restaurant_id=restaurant.id,
        restaurant_name=restaurant.name,
        table_number=table,
        table_id=table_id,
        categories=[CategoryResponse.model_validate(c) for c in categories],
        items=[MenuItemResponse.model_validate(i) for i in items],
    )
