"""Authentication and profile route handlers."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sport_scheduler.api.routes import limiter, INVALID_CREDENTIALS_RESPONSE
from sport_scheduler.database.db import get_db_session
from sport_scheduler.services import auth_service, user_service
from sport_scheduler.services.user_service import public_user
from sport_scheduler.api.auth_dependencies import get_current_user
from sport_scheduler.models.schemas import (
    SignupRequest,
    SigninRequest,
    AuthResponse,
    UpdateProfileRequest,
    MessageResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _issue_token(user: dict) -> str:
    return auth_service.create_access_token(data={"user_id": user["id"], "role": user["role"]})


@router.post("/api/auth/signup", response_model=AuthResponse)
@limiter.limit("10/minute")
async def signup(
    request: Request, payload: SignupRequest, session: AsyncSession = Depends(get_db_session)
):
    """Create an account and return it with an access token."""
    role = payload.role or "player"
    auth_service.validate_password(payload.password)
    password_hash = auth_service.hash_password(payload.password)

    user_id = await user_service.create_user(
        session,
        name=payload.name,
        email=payload.email,
        password_hash=password_hash,
        role=role,
    )
    user = await user_service.get_user_by_id(session, user_id)
    return {"user": public_user(user), "token": _issue_token(user)}


@router.post("/api/auth/signin", response_model=AuthResponse)
@limiter.limit("10/minute")
async def signin(
    request: Request, payload: SigninRequest, session: AsyncSession = Depends(get_db_session)
):
    """Login with email and password."""
    user = await user_service.get_user_by_email(session, payload.email)
    if not user:
        raise INVALID_CREDENTIALS_RESPONSE
    if not auth_service.verify_password(payload.password, user["password_hash"]):
        raise INVALID_CREDENTIALS_RESPONSE

    return {"user": public_user(user), "token": _issue_token(user)}


@router.post("/api/auth/signout", response_model=MessageResponse)
async def signout(user: dict = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy."""
    return {"message": "Signed out successfully"}


@router.put("/api/auth/update-profile", response_model=MessageResponse)
async def update_profile(
    payload: UpdateProfileRequest,
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Update name and/or password. A new password needs the current one."""
    logger.info(
        f"Profile update for user {user['id']} "
        f"(name={'yes' if payload.name else 'no'}, password={'yes' if payload.newPassword else 'no'})"
    )
    await user_service.update_profile(
        session,
        user["id"],
        name=payload.name,
        current_password=payload.currentPassword,
        new_password=payload.newPassword,
    )
    return {"message": "Profile updated successfully"}
