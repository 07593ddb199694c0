"""Session scheduling, joining and cancellation route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sport_scheduler.database.db import get_db_session
from sport_scheduler.services import session_service
from sport_scheduler.api.auth_dependencies import get_current_user
from sport_scheduler.models.schemas import (
    CreateSessionRequest,
    CreateSessionResponse,
    SessionResponse,
    JoinSessionResponse,
    CancelSessionRequest,
    MessageResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/sessions", response_model=CreateSessionResponse)
async def create_session(
    payload: CreateSessionRequest,
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Schedule a session owned by the caller.

    Body: { sport_id, date_time, venue, max_players, existing_players?: [user_id] }
    Pre-seeded players alternate between team 1 and team 2 in list order.
    """
    return await session_service.create_session(
        session,
        creator_id=user["id"],
        sport_id=payload.sport_id,
        date_time=payload.date_time,
        venue=payload.venue,
        max_players=payload.max_players,
        existing_players=payload.existing_players,
    )


@router.get("/api/sessions", response_model=List[SessionResponse])
async def list_sessions(
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """All sessions with current_players, is_joinable and has_joined."""
    return await session_service.list_sessions(session, user["id"])


@router.get("/api/sessions/my", response_model=List[SessionResponse])
async def list_my_sessions(
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Sessions created by the caller."""
    return await session_service.list_my_sessions(session, user["id"])


@router.get("/api/sessions/joined", response_model=List[SessionResponse])
async def list_joined_sessions(
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Active sessions the caller has joined, with their team."""
    return await session_service.list_joined_sessions(session, user["id"])


@router.post("/api/sessions/{session_id}/join", response_model=JoinSessionResponse)
async def join_session(
    session_id: int,
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Join a session; the caller is put on the smaller team."""
    return await session_service.join_session(session, session_id, user["id"])


@router.put("/api/sessions/{session_id}/cancel", response_model=MessageResponse)
async def cancel_session(
    session_id: int,
    payload: CancelSessionRequest,
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Cancel a session (creator only). Body: { reason?: string }"""
    return await session_service.cancel_session(
        session, session_id, user["id"], reason=payload.reason
    )
