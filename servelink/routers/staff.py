"""
Staff of the owner's restaurant.

Staff sign up on their own (choosing kitchen or waiter); the owner then
attaches them to the restaurant by email.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from servelink import crud
from servelink.database import get_db
from servelink.dependencies import get_owned_restaurant
from servelink.enums import StaffRole
from servelink.models import Profile, Restaurant, User
from servelink.schemas import ErrorResponse, StaffAssignRequest, StaffMemberResponse
from servelink.services.restaurants import get_profile, panel_link

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/staff", tags=["Staff"])


def _member(profile: Profile) -> StaffMemberResponse:
    link = None
    if profile.role and profile.role != StaffRole.OWNER:
        link = panel_link(profile.role)
    return StaffMemberResponse(
        user_id=profile.user_id,
        full_name=profile.full_name,
        role=profile.role,
        restaurant_id=profile.restaurant_id,
        panel_link=link,
    )


@router.get("", response_model=List[StaffMemberResponse])
async def list_staff(
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
) -> List[StaffMemberResponse]:
    profiles = await crud.profiles.get_all(
        db, filters={"restaurant_id": restaurant.id}, order_by="full_name"
    )
    return [_member(profile) for profile in profiles]


@router.post(
    "/assign",
    response_model=StaffMemberResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def assign_staff(
    payload: StaffAssignRequest,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
) -> StaffMemberResponse:
    """Link an existing account to this restaurant with a role."""
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No account registered with {payload.email}",
        )

    owned = await db.execute(select(Restaurant.id).where(Restaurant.owner_id == user.id).limit(1))
    if owned.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{payload.email} owns a restaurant and cannot be assigned as staff",
        )

    profile = await get_profile(db, user.id)
    if profile and profile.restaurant_id and profile.restaurant_id != restaurant.id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{payload.email} already works at another restaurant",
        )

    changes = {"role": payload.role, "restaurant_id": restaurant.id}
    if profile is None:
        profile = await crud.profiles.create(
            db, {"user_id": user.id, "full_name": user.full_name, **changes}
        )
    else:
        profile = await crud.profiles.update(db, profile, changes)

    logger.info(f"{user.email} assigned to {restaurant.name} as {payload.role.value}")
    return _member(profile)
