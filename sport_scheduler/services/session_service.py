"""
Session lifecycle service.

Creates sessions (with an optional pre-seeded roster), decides join requests,
assigns teams, detects time conflicts between a player's sessions, cancels
sessions and builds the per-requester listing views.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy import Integer, exists, func, insert, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sport_scheduler.database.models import (
    Session,
    SessionPlayer,
    SessionStatus,
    Sport,
    User,
)
from sport_scheduler.services.errors import (
    AlreadyJoined,
    Forbidden,
    InvalidInput,
    NotFound,
    NotJoinable,
    SchedulerError,
    SessionFull,
    TimeConflict,
)
from sport_scheduler.utils.datetime_utils import (
    ensure_utc,
    format_display_datetime,
    local_date,
    local_day_bounds,
    to_utc,
    utcnow,
)

logger = logging.getLogger(__name__)

# Two memberships conflict when they are this close on the same calendar date
CONFLICT_WINDOW_SECONDS = 3600
TEAMS = (1, 2)


#
# Predicates and team rules
#


def is_open(status: Union[str, SessionStatus], date_time: datetime, now: datetime) -> bool:
    """Active and scheduled strictly in the future."""
    return status == SessionStatus.ACTIVE and ensure_utc(date_time) > now


def is_joinable(
    status: Union[str, SessionStatus],
    date_time: datetime,
    current_players: int,
    max_players: int,
    now: datetime,
) -> bool:
    """
    Joinable = open and not full.

    Used both for the ``is_joinable`` flag in listings and for the first two
    gates of join_session.
    """
    return is_open(status, date_time, now) and current_players < max_players


def seed_team(index: int) -> int:
    """Team for the index-th pre-seeded player: 1, 2, 1, 2, ..."""
    return (index % 2) + 1


def pick_team(team_counts: Dict[int, int]) -> int:
    """Smaller team wins; ties go to team 1."""
    return min(TEAMS, key=lambda team: (team_counts.get(team, 0), team))


#
# Creation
#


async def create_session(
    session: AsyncSession,
    creator_id: int,
    sport_id: Optional[int],
    date_time: Union[str, datetime, None],
    venue: Optional[str],
    max_players: Optional[int],
    existing_players: Optional[Iterable[int]] = None,
) -> Dict:
    """
    Create a session owned by creator_id and seed its roster.

    Pre-seeded players alternate teams in list order. The roster is not
    checked against max_players. Entries that cannot be seeded (unknown user,
    repeated id, time conflict with another of the player's sessions) are
    skipped and listed under ``seed_failures``; the session and the other
    memberships are kept.

    Raises:
        InvalidInput: On missing/malformed fields or an unknown sport
    """
    if sport_id is None:
        raise InvalidInput("Sport is required")
    if venue is None or not str(venue).strip():
        raise InvalidInput("Venue is required")
    if date_time is None or (isinstance(date_time, str) and not date_time.strip()):
        raise InvalidInput("Date and time are required")
    if isinstance(max_players, bool) or not isinstance(max_players, int) or max_players <= 0:
        raise InvalidInput("max_players must be a positive integer")

    try:
        scheduled_at = to_utc(date_time)
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid date_time: {date_time}")

    sport_result = await session.execute(select(Sport.id).where(Sport.id == sport_id))
    if sport_result.scalar_one_or_none() is None:
        raise InvalidInput("Sport not found")

    roster = list(existing_players or [])
    if len(roster) > max_players:
        # Seeded rosters are not capped
        logger.warning(
            f"Seeding {len(roster)} players into a session capped at {max_players} "
            f"(creator {creator_id})"
        )

    new_session = Session(
        sport_id=sport_id,
        creator_id=creator_id,
        date_time=scheduled_at,
        venue=str(venue).strip(),
        max_players=max_players,
        status=SessionStatus.ACTIVE,
    )
    session.add(new_session)
    await session.flush()

    known_users = set()
    if roster:
        result = await session.execute(select(User.id).where(User.id.in_(set(roster))))
        known_users = set(result.scalars().all())

    seed_failures = []
    seeded = set()
    for index, player_id in enumerate(roster):
        if player_id in seeded:
            seed_failures.append({"player_id": player_id, "reason": "Duplicate player in roster"})
            continue
        if player_id not in known_users:
            seed_failures.append({"player_id": player_id, "reason": "User not found"})
            continue
        conflict = await find_time_conflict(session, player_id, scheduled_at)
        if conflict:
            seed_failures.append({"player_id": player_id, "reason": _conflict_reason(conflict)})
            continue
        seeded.add(player_id)
        session.add(
            SessionPlayer(session_id=new_session.id, player_id=player_id, team=seed_team(index))
        )

    await session.commit()
    await session.refresh(new_session)

    logger.info(
        f"User {creator_id} created session {new_session.id} "
        f"(sport {sport_id}, {len(seeded)} seeded, {len(seed_failures)} seed failures)"
    )
    if seed_failures:
        logger.warning(f"Session {new_session.id} seed failures: {seed_failures}")

    result = _session_to_dict(new_session, current_players=len(seeded))
    result["seed_failures"] = seed_failures
    return result


#
# Joining
#


def _conflict_clauses(player_id: int, date_time: datetime) -> List:
    """
    WHERE clauses matching the player's active memberships that conflict with
    a session at date_time: same local calendar date and at most
    CONFLICT_WINDOW_SECONDS apart.
    """
    target_time = ensure_utc(date_time)
    window = timedelta(seconds=CONFLICT_WINDOW_SECONDS)
    day = local_date(target_time)
    day_start, next_day = local_day_bounds(day, day)

    clauses = [
        SessionPlayer.player_id == player_id,
        Session.status == SessionStatus.ACTIVE,
        Session.date_time >= max(target_time - window, day_start),
    ]
    if target_time + window < next_day:
        clauses.append(Session.date_time <= target_time + window)
    else:
        clauses.append(Session.date_time < next_day)
    return clauses


def _conflict_reason(conflict: Dict) -> str:
    return (
        f"Time conflict: {conflict['sport_name']} on "
        f"{format_display_datetime(conflict['date_time'])}"
    )


async def find_time_conflict(
    session: AsyncSession, player_id: int, date_time: datetime
) -> Optional[Dict]:
    """
    Find an active session of player_id on the same calendar date within
    CONFLICT_WINDOW_SECONDS (inclusive) of date_time.

    Returns:
        The conflicting session with the lowest id, or None
    """
    result = await session.execute(
        select(Session.id, Sport.name, Session.date_time, Session.venue)
        .join(SessionPlayer, SessionPlayer.session_id == Session.id)
        .join(Sport, Sport.id == Session.sport_id)
        .where(*_conflict_clauses(player_id, date_time))
        .order_by(Session.id.asc())
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None
    other_id, sport_name, other_time, venue = row
    return {
        "session_id": other_id,
        "sport_name": sport_name,
        "date_time": ensure_utc(other_time),
        "venue": venue,
    }


async def get_team_counts(session: AsyncSession, session_id: int) -> Dict[int, int]:
    """Current member count per team."""
    result = await session.execute(
        select(SessionPlayer.team, func.count(SessionPlayer.id))
        .where(SessionPlayer.session_id == session_id)
        .group_by(SessionPlayer.team)
    )
    return {team: count for team, count in result.all()}


async def join_session(
    session: AsyncSession, session_id: int, player_id: int, now: Optional[datetime] = None
) -> Dict:
    """
    Add player_id to a session.

    Checks run in order and the first failure wins: open (NotJoinable), not
    full (SessionFull), not already a member (AlreadyJoined), no time
    conflict (TimeConflict). The player then goes to the smaller team.

    Everything happens in one transaction. Row locks on the player and the
    session serialize concurrent joins where the backend supports them, and
    the membership row is written by a single conditional INSERT that
    re-checks capacity and conflicts, so a session cannot be overfilled on
    any backend.

    Returns:
        {"message": ..., "team": 1 | 2}
    """
    now = ensure_utc(now) if now else utcnow()
    try:
        team = await _join_locked(session, session_id, player_id, now)
    except SchedulerError as e:
        await session.rollback()
        logger.info(f"Player {player_id} could not join session {session_id}: {e}")
        raise
    await session.commit()

    logger.info(f"Player {player_id} joined session {session_id} on team {team}")
    return {"message": "Joined successfully", "team": team}


async def _join_locked(
    session: AsyncSession, session_id: int, player_id: int, now: datetime
) -> int:
    # Lock order: player row, then session row
    await session.execute(select(User.id).where(User.id == player_id).with_for_update())
    result = await session.execute(
        select(Session).where(Session.id == session_id).with_for_update()
    )
    target = result.scalar_one_or_none()
    if target is None:
        logger.debug(f"Join rejected: session {session_id} does not exist")
        raise NotJoinable()

    await _check_join_gates(session, target, player_id, now)

    team = pick_team(await get_team_counts(session, session_id))
    try:
        inserted = await _insert_membership(session, target, player_id, team)
    except IntegrityError:
        raise AlreadyJoined()
    if not inserted:
        # A concurrent join won the race; report what changed
        logger.info(f"Conditional insert refused player {player_id} for session {session_id}")
        await _check_join_gates(session, target, player_id, now)
        raise SessionFull()
    return team


async def _check_join_gates(
    session: AsyncSession, target: Session, player_id: int, now: datetime
) -> None:
    current_players = await _count_players(session, target.id)
    if not is_open(target.status, target.date_time, now):
        logger.debug(
            f"Join rejected: session {target.id} is {target.status.value} "
            f"at {ensure_utc(target.date_time).isoformat()}"
        )
        raise NotJoinable()
    if not is_joinable(target.status, target.date_time, current_players, target.max_players, now):
        raise SessionFull()

    existing = await session.execute(
        select(SessionPlayer.id).where(
            SessionPlayer.session_id == target.id,
            SessionPlayer.player_id == player_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise AlreadyJoined()

    conflict = await find_time_conflict(session, player_id, target.date_time)
    if conflict:
        raise TimeConflict(
            "You are already joined to another session at this time: "
            f"{conflict['sport_name']} on {format_display_datetime(conflict['date_time'])}",
            conflict=conflict,
        )


async def _insert_membership(
    session: AsyncSession, target: Session, player_id: int, team: int
) -> bool:
    """
    INSERT ... SELECT guarded by the capacity and conflict rules.

    Returns False when the guard refused the row.
    """
    member_count = (
        select(func.count(SessionPlayer.id))
        .where(SessionPlayer.session_id == target.id)
        .correlate(None)
        .scalar_subquery()
    )
    conflicting = (
        select(SessionPlayer.id)
        .join(Session, Session.id == SessionPlayer.session_id)
        .where(*_conflict_clauses(player_id, target.date_time))
        .correlate(None)
    )
    guarded_row = select(
        literal(target.id, Integer),
        literal(player_id, Integer),
        literal(team, Integer),
    ).where(member_count < target.max_players, ~exists(conflicting))

    result = await session.execute(
        insert(SessionPlayer.__table__).from_select(
            ["session_id", "player_id", "team"], guarded_row
        )
    )
    return result.rowcount == 1


async def _count_players(session: AsyncSession, session_id: int) -> int:
    result = await session.execute(
        select(func.count(SessionPlayer.id)).where(SessionPlayer.session_id == session_id)
    )
    return result.scalar() or 0


#
# Cancellation
#


async def cancel_session(
    session: AsyncSession, session_id: int, requester_id: int, reason: Optional[str] = None
) -> Dict:
    """
    Cancel a session. Only its creator may do this.

    Cancelling an already cancelled session overwrites the reason.

    Raises:
        NotFound: If the session does not exist
        Forbidden: If requester_id is not the creator
    """
    result = await session.execute(
        select(Session).where(Session.id == session_id).with_for_update()
    )
    target = result.scalar_one_or_none()
    if target is None:
        await session.rollback()
        raise NotFound("Session not found")
    if target.creator_id != requester_id:
        await session.rollback()
        logger.info(f"User {requester_id} tried to cancel session {session_id} they did not create")
        raise Forbidden("Only creator can cancel")

    if target.status == SessionStatus.CANCELLED:
        logger.info(f"Session {session_id} is already cancelled; updating reason")
    target.status = SessionStatus.CANCELLED
    target.cancel_reason = reason
    await session.commit()

    logger.info(f"User {requester_id} cancelled session {session_id}")
    return {"message": "Session cancelled successfully"}


#
# Listing views
#


def _player_counts():
    return (
        select(
            SessionPlayer.session_id.label("session_id"),
            func.count(SessionPlayer.id).label("player_count"),
        )
        .group_by(SessionPlayer.session_id)
        .subquery()
    )


async def list_sessions(
    session: AsyncSession, requester_id: int, now: Optional[datetime] = None
) -> List[Dict]:
    """All sessions with current_players, is_joinable and has_joined for the requester."""
    now = ensure_utc(now) if now else utcnow()
    counts = _player_counts()
    result = await session.execute(
        select(
            Session,
            Sport.name,
            User.name,
            func.coalesce(counts.c.player_count, 0),
        )
        .join(Sport, Sport.id == Session.sport_id)
        .join(User, User.id == Session.creator_id)
        .outerjoin(counts, counts.c.session_id == Session.id)
        .order_by(Session.date_time.desc(), Session.id.desc())
    )
    rows = result.all()

    joined_result = await session.execute(
        select(SessionPlayer.session_id).where(SessionPlayer.player_id == requester_id)
    )
    joined_ids = set(joined_result.scalars().all())

    sessions = []
    for sess, sport_name, creator_name, current_players in rows:
        current_players = int(current_players)
        sessions.append(
            _session_to_dict(
                sess,
                sport_name=sport_name,
                creator_name=creator_name,
                current_players=current_players,
                is_joinable=is_joinable(
                    sess.status, sess.date_time, current_players, sess.max_players, now
                ),
                has_joined=sess.id in joined_ids,
            )
        )
    return sessions


async def list_my_sessions(session: AsyncSession, requester_id: int) -> List[Dict]:
    """Sessions created by the requester."""
    counts = _player_counts()
    result = await session.execute(
        select(Session, Sport.name, func.coalesce(counts.c.player_count, 0))
        .join(Sport, Sport.id == Session.sport_id)
        .outerjoin(counts, counts.c.session_id == Session.id)
        .where(Session.creator_id == requester_id)
        .order_by(Session.date_time.desc(), Session.id.desc())
    )
    return [
        _session_to_dict(sess, sport_name=sport_name, current_players=int(current_players))
        for sess, sport_name, current_players in result.all()
    ]


async def list_joined_sessions(session: AsyncSession, requester_id: int) -> List[Dict]:
    """Active sessions the requester belongs to, with their team."""
    result = await session.execute(
        select(Session, Sport.name, User.name, SessionPlayer.team)
        .join(SessionPlayer, SessionPlayer.session_id == Session.id)
        .join(Sport, Sport.id == Session.sport_id)
        .join(User, User.id == Session.creator_id)
        .where(
            SessionPlayer.player_id == requester_id,
            Session.status == SessionStatus.ACTIVE,
        )
        .order_by(Session.date_time.desc(), Session.id.desc())
    )
    return [
        _session_to_dict(sess, sport_name=sport_name, creator_name=creator_name, team=team)
        for sess, sport_name, creator_name, team in result.all()
    ]


def _session_to_dict(sess: Session, **extra) -> Dict:
    """Convert Session model to dict; extra keys are derived values."""
    data = {
        "id": sess.id,
        "sport_id": sess.sport_id,
        "creator_id": sess.creator_id,
        "date_time": ensure_utc(sess.date_time).isoformat() if sess.date_time else None,
        "venue": sess.venue,
        "max_players": sess.max_players,
        "status": sess.status.value if sess.status else None,
        "cancel_reason": sess.cancel_reason,
        "created_at": sess.created_at.isoformat() if sess.created_at else None,
    }
    data.update(extra)
    return data
