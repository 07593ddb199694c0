"""
Datetime utility functions.

Session times are stored in UTC. Calendar-date rules (time conflicts,
reporting ranges) and user-facing formatting use the scheduler time zone.
"""

import os
from datetime import datetime, date, time, timedelta
from typing import Tuple, Union
import pytz

SCHEDULER_TIMEZONE = os.getenv("SCHEDULER_TIMEZONE", "UTC")


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def get_scheduler_timezone():
    """Return the pytz timezone used for calendar dates and display."""
    return pytz.timezone(SCHEDULER_TIMEZONE)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime read from the database to aware UTC.

    Some backends (SQLite) hand back naive values even for timezone-aware
    columns; those are UTC by construction.
    """
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)


def to_utc(value: Union[str, datetime]) -> datetime:
    """
    Convert user input to aware UTC.

    Naive values are interpreted as wall-clock time in the scheduler time zone.

    Raises:
        ValueError: If a string cannot be parsed as ISO 8601
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = get_scheduler_timezone().localize(value)
    return value.astimezone(pytz.UTC)


def local_date(value: datetime) -> date:
    """Calendar date of a datetime in the scheduler time zone."""
    return ensure_utc(value).astimezone(get_scheduler_timezone()).date()


def local_day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """
    UTC bounds [start 00:00, day after end 00:00) for an inclusive range of
    local calendar dates.

    Bounds that fall outside the datetime range are clamped to
    datetime.min/datetime.max.
    """
    tz = get_scheduler_timezone()
    try:
        lower = tz.localize(datetime.combine(start, time.min)).astimezone(pytz.UTC)
    except OverflowError:
        lower = pytz.UTC.localize(datetime.min)
    try:
        upper = tz.localize(datetime.combine(end + timedelta(days=1), time.min)).astimezone(pytz.UTC)
    except OverflowError:
        upper = pytz.UTC.localize(datetime.max)
    return lower, upper


def parse_date(date_str: str) -> date:
    """
    Parse a YYYY-MM-DD date string.

    Raises:
        ValueError: If the string is not a valid ISO date
    """
    return datetime.strptime(date_str.strip(), "%Y-%m-%d").date()


def format_display_datetime(value: datetime) -> str:
    """
    Format a datetime for messages, e.g. "10/20/2026, 6:00:00 PM".

    The value is shown in the scheduler time zone, month/day without leading
    zeros.
    """
    local = ensure_utc(value).astimezone(get_scheduler_timezone())
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return (
        f"{local.month}/{local.day}/{local.year}, "
        f"{hour}:{local.minute:02d}:{local.second:02d} {suffix}"
    )
