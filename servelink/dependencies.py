"""
FastAPI dependencies for authentication and restaurant scoping.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from servelink.core.security import TokenError, decode_access_token
from servelink.database import get_db
from servelink.enums import StaffRole
from servelink.models import Restaurant, RevokedToken, User
from servelink.services.restaurants import get_profile, resolve_restaurant

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    jti = payload.get("jti")
    if jti and await db.get(RevokedToken, jti):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has been revoked")
    return payload


async def get_current_user(
    payload: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await db.get(User, payload["sub"])
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User no longer exists")
    return user


def require_role(*roles: StaffRole):
    """
    Dependency factory restricting a route to some staff roles.

    Users without a profile role are treated as owners, matching how
    their restaurant gets resolved.
    """
    allowed = set(roles)

    async def dependency(
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ) -> User:
        profile = await get_profile(db, user.id)
        role = profile.role if profile and profile.role else StaffRole.OWNER
        if role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
        return user

    return dependency


async def get_current_restaurant(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Restaurant:
    restaurant = await resolve_restaurant(db, user)
    if restaurant is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No restaurant assigned to this account yet",
        )
    return restaurant


async def get_owned_restaurant(
    user: User = Depends(require_role(StaffRole.OWNER)),
    db: AsyncSession = Depends(get_db),
) -> Restaurant:
    """Restaurant of an owner, for management routes."""
    return await get_current_restaurant(user, db)
