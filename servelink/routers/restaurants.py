"""
The signed-in user's restaurant.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from servelink import crud
from servelink.database import get_db
from servelink.dependencies import get_current_restaurant, get_owned_restaurant
from servelink.models import Restaurant
from servelink.schemas import RestaurantResponse, RestaurantUpdate

router = APIRouter(prefix="/api/restaurants", tags=["Restaurants"])


@router.get("/me", response_model=RestaurantResponse)
async def my_restaurant(restaurant: Restaurant = Depends(get_current_restaurant)) -> Restaurant:
    """
    Restaurant the caller works in.

    Owners that have none yet get one created on first call.
    """
    return restaurant


@router.patch("/{restaurant_id}", response_model=RestaurantResponse)
async def rename_restaurant(
    restaurant_id: str,
    payload: RestaurantUpdate,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
) -> Restaurant:
    if restaurant.id != restaurant_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your restaurant")
    return await crud.restaurants.update(db, restaurant, {"name": payload.name.strip()})
