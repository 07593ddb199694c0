"""Sport catalogue route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sport_scheduler.database.db import get_db_session
from sport_scheduler.services import sport_service
from sport_scheduler.api.auth_dependencies import require_admin
from sport_scheduler.models.schemas import SportCreate, SportResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/sports", response_model=List[SportResponse])
async def list_sports(session: AsyncSession = Depends(get_db_session)):
    """List all sports (public)."""
    return await sport_service.list_sports(session)


@router.post("/api/sports", response_model=SportResponse)
async def create_sport(
    payload: SportCreate,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a sport (admin only)."""
    return await sport_service.create_sport(session, payload.name, created_by=user["id"])
