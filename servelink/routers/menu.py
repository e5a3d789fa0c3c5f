"""
Menu categories and menu items.

Reads are public (the customer menu uses them); writes are restricted to
the owner and scoped to the owner's restaurant.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from servelink import crud
from servelink.database import get_db
from servelink.dependencies import get_owned_restaurant
from servelink.models import Restaurant
from servelink.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ErrorResponse,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Menu"])


# =============================================================================
# CATEGORIES
# =============================================================================

@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(
    restaurant_id: str = Query(...),
    active_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """Categories of a restaurant by display order."""
    return await crud.categories.get_all(
        db,
        filters={"restaurant_id": restaurant_id, "is_active": True if active_only else None},
        order_by="display_order",
    )


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
):
    return await crud.categories.create(db, {**payload.model_dump(), "restaurant_id": restaurant.id})


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
):
    category = await crud.categories.get(db, category_id, restaurant_id=restaurant.id)
    return await crud.categories.update(db, category, payload.model_dump(exclude_unset=True))


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: str,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
):
    """Delete a category; its items become uncategorised."""
    category = await crud.categories.get(db, category_id, restaurant_id=restaurant.id)
    await crud.categories.remove(db, category)
    return MessageResponse(message="Category deleted")


# =============================================================================
# MENU ITEMS
# =============================================================================

@router.get("/menu-items", response_model=List[MenuItemResponse])
async def list_menu_items(
    restaurant_id: str = Query(...),
    available_only: bool = Query(False),
    category_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Items of a restaurant by name."""
    return await crud.menu_items.get_all(
        db,
        filters={
            "restaurant_id": restaurant_id,
            "is_available": True if available_only else None,
            "category_id": category_id,
        },
        order_by="name",
    )


@router.post("/menu-items", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
async def create_menu_item(
    payload: MenuItemCreate,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
):
    return await crud.menu_items.create(db, {**payload.model_dump(), "restaurant_id": restaurant.id})


@router.patch("/menu-items/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    item_id: str,
    payload: MenuItemUpdate,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
):
    item = await crud.menu_items.get(db, item_id, restaurant_id=restaurant.id)
    return await crud.menu_items.update(db, item, payload.model_dump(exclude_unset=True))


@router.delete(
    "/menu-items/{item_id}",
    response_model=MessageResponse,
    responses={409: {"model": ErrorResponse}},
)
async def delete_menu_item(
    item_id: str,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
):
    item = await crud.menu_items.get(db, item_id, restaurant_id=restaurant.id)
    try:
        await crud.menu_items.remove(db, item)
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Menu item {item_id} is referenced by orders, not deleted")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Menu item appears on existing orders; mark it unavailable instead",
        )
    return MessageResponse(message="Menu item deleted")
