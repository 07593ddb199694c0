"""Liveness, health and token check route handlers."""

import logging

from fastapi import APIRouter, Depends

from sport_scheduler.database import db
from sport_scheduler.api.auth_dependencies import get_current_user
from sport_scheduler.models.schemas import HealthResponse
from sport_scheduler.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/ping")
async def ping():
    return {"pong": True}


@router.get("/api/health", response_model=HealthResponse)
async def health():
    """Report whether the database answers; failures surface as 503."""
    await db.check_database()
    return {"status": "ok", "database": "reachable"}


@router.get("/api/test")
async def auth_test(user: dict = Depends(get_current_user)):
    """Echo the authenticated identity."""
    logger.info(f"Test endpoint called by user {user['id']}")
    return {
        "message": "Server and authentication are working!",
        "user": user,
        "timestamp": utcnow().isoformat(),
    }
