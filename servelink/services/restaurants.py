"""
Restaurant resolution and role routing.

A signed-in user works inside exactly one restaurant:
    1. Staff (kitchen / waiter) linked through their profile use that one.
    2. Otherwise the first restaurant the user owns.
    3. Owners (or users without a profile) who own nothing get one created,
       named after them.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from servelink import crud
from servelink.core.config import get_settings
from servelink.enums import StaffRole
from servelink.models import Profile, Restaurant, User

logger = logging.getLogger(__name__)

HOME_ROUTES = {
    StaffRole.OWNER: "/dashboard",
    StaffRole.KITCHEN: "/kitchen",
    StaffRole.WAITER: "/waiter",
}


def home_route_for(role: Optional[StaffRole]) -> str:
    """Screen a user is sent to after signing in."""
    if role is None:
        return HOME_ROUTES[StaffRole.OWNER]
    return HOME_ROUTES[StaffRole(role)]


def panel_link(role: Optional[StaffRole], base_url: Optional[str] = None) -> str:
    """Direct link to a staff member's panel."""
    base = (base_url or get_settings().app_base_url).rstrip("/")
    name = StaffRole(role).value if role else "staff"
    return f"{base}/{name}"


def default_restaurant_name(full_name: Optional[str]) -> str:
    if full_name:
        return f"{full_name}'s Restaurant"
    return "My Restaurant"


async def get_profile(db: AsyncSession, user_id: str) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def resolve_restaurant(db: AsyncSession, user: User) -> Optional[Restaurant]:
    """
    Find, or for owners create, the restaurant the user works in.

    Returns None for staff that have not been assigned anywhere yet.
    """
    profile = await get_profile(db, user.id)

    if profile and profile.restaurant_id and profile.role != StaffRole.OWNER:
        return await db.get(Restaurant, profile.restaurant_id)

    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.owner_id == user.id)
        .order_by(Restaurant.created_at)
        .limit(1)
    )
    owned = result.scalar_one_or_none()
    if owned:
        return owned

    if profile is None or profile.role in (StaffRole.OWNER, None):
        restaurant = await crud.restaurants.create(
            db, {"name": default_restaurant_name(user.full_name), "owner_id": user.id}
        )
        logger.info(f"Created restaurant '{restaurant.name}' for {user.email}")
        return restaurant

    return None
