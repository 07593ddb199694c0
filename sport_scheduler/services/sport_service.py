"""
Sport catalogue operations.
"""

import logging
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sport_scheduler.database.models import Sport
from sport_scheduler.services.errors import InvalidInput

logger = logging.getLogger(__name__)


async def list_sports(session: AsyncSession) -> List[Dict]:
    """List all sports, newest first."""
    result = await session.execute(
        select(Sport).order_by(Sport.created_at.desc(), Sport.id.desc())
    )
    return [_sport_to_dict(sport) for sport in result.scalars().all()]


async def create_sport(session: AsyncSession, name: str, created_by: int) -> Dict:
    """
    Create a sport. Callers are responsible for the admin check.

    Raises:
        InvalidInput: If the name is blank
    """
    if not name or not name.strip():
        raise InvalidInput("Sport name is required")

    sport = Sport(name=name.strip(), created_by=created_by)
    session.add(sport)
    await session.commit()
    await session.refresh(sport)

    logger.info(f"User {created_by} created sport {sport.id} ({sport.name})")
    return _sport_to_dict(sport)


def _sport_to_dict(sport: Sport) -> Dict:
    return {
        "id": sport.id,
        "name": sport.name,
        "created_by": sport.created_by,
        "created_at": sport.created_at.isoformat() if sport.created_at else None,
    }
