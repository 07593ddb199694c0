"""
Read-only aggregate reports over scheduled sessions.
"""

import logging
from typing import Dict, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from sport_scheduler.database.models import Session, Sport
from sport_scheduler.services.errors import InvalidInput
from sport_scheduler.utils.datetime_utils import local_day_bounds, parse_date

logger = logging.getLogger(__name__)

DEFAULT_START_DATE = "1970-01-01"
DEFAULT_END_DATE = "2100-01-01"


async def get_session_report(
    session: AsyncSession, start_date: Optional[str] = None, end_date: Optional[str] = None
) -> Dict:
    """
    Count sessions scheduled between two calendar dates (inclusive).

    Sessions of every status are counted. Dates are YYYY-MM-DD in the
    scheduler time zone; a missing bound means "unbounded".

    Returns:
        {"total_sessions": int,
         "sport_popularity": [{"name": str, "session_count": int}, ...]}
        with sports ordered by session count, most popular first.

    Raises:
        InvalidInput: If a date is malformed
    """
    start_str = start_date or DEFAULT_START_DATE
    end_str = end_date or DEFAULT_END_DATE
    try:
        start = parse_date(start_str)
        end = parse_date(end_str)
    except ValueError:
        raise InvalidInput("Dates must be in YYYY-MM-DD format")

    lower, upper = local_day_bounds(start, end)
    in_range = (Session.date_time >= lower, Session.date_time < upper)
    logger.debug(f"Session report for {start} .. {end}")

    total_result = await session.execute(select(func.count(Session.id)).where(*in_range))
    total_sessions = total_result.scalar() or 0

    session_count = func.count(Session.id).label("session_count")
    sport_result = await session.execute(
        select(Sport.name, session_count)
        .join(Sport, Sport.id == Session.sport_id)
        .where(*in_range)
        .group_by(Sport.name)
        .order_by(session_count.desc(), Sport.name.asc())
    )

    return {
        "total_sessions": int(total_sessions),
        "sport_popularity": [
            {"name": name, "session_count": int(count)} for name, count in sport_result.all()
        ],
    }
