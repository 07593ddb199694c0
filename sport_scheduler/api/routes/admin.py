"""Admin reporting route handlers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sport_scheduler.database.db import get_db_session
from sport_scheduler.services import report_service
from sport_scheduler.api.auth_dependencies import require_admin
from sport_scheduler.models.schemas import SessionReportResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/admin/reports/sessions", response_model=SessionReportResponse)
async def get_session_report(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Total sessions and per-sport counts between two dates (admin only).

    Query: start_date, end_date as YYYY-MM-DD; both optional.
    """
    report = await report_service.get_session_report(session, start_date, end_date)
    logger.info(
        f"Admin {user['id']} ran session report {start_date or '*'}..{end_date or '*'}: "
        f"{report['total_sessions']} sessions"
    )
    return report
