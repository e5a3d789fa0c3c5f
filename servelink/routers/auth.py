"""
Sign-up, sign-in and sign-out.

A successful sign-in tells the client where to go next: owners land on
the dashboard, kitchen staff on the kitchen panel, waiters on the waiter
panel.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from servelink import crud
from servelink.core.security import create_access_token, hash_password, verify_password
from servelink.database import get_db
from servelink.dependencies import get_current_user, get_token_payload
from servelink.models import RevokedToken, User
from servelink.schemas import (
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    SessionResponse,
    SignupRequest,
    TokenResponse,
    UserResponse,
)
from servelink.services.restaurants import get_profile, home_route_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


async def _session(db: AsyncSession, user: User) -> SessionResponse:
    profile = await get_profile(db, user.id)
    return SessionResponse(
        user=UserResponse.model_validate(user),
        profile=ProfileResponse.model_validate(profile) if profile else None,
        home_route=home_route_for(profile.role if profile else None),
    )


async def _token_response(db: AsyncSession, user: User) -> TokenResponse:
    session = await _session(db, user)
    return TokenResponse(access_token=create_access_token(user.id), **session.model_dump())


@router.post(
    "/signup",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def signup(payload: SignupRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Create an account and its staff profile, then sign it in."""
    existing = await db.execute(select(User).where(User.email == payload.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(
        email=payload.email,
        password_hash=hash_password(payload.password),
        full_name=payload.full_name,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    await crud.profiles.create(
        db,
        {"user_id": user.id, "full_name": payload.full_name, "role": payload.role},
    )
    logger.info(f"New {payload.role.value} account: {user.email}")
    return await _token_response(db, user)


@router.post("/login", response_model=TokenResponse, responses={401: {"model": ErrorResponse}})
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning(f"Failed sign-in for {payload.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    logger.info(f"Signed in: {user.email}")
    return await _token_response(db, user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    db.add(RevokedToken(jti=token["jti"]))
    await db.commit()
    logger.info(f"Signed out: {token['sub']}")
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=SessionResponse)
async def me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    return await _session(db, user)
