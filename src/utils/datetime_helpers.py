"""
Standardized Date/Time Handling Utilities

This module provides the single calendar policy used by the progression
engine:
1. Every calendar-day and hour-of-day decision is taken in APP_TIMEZONE
2. Naive datetimes are interpreted as already being in APP_TIMEZONE
3. Aware datetimes are converted to APP_TIMEZONE before any decision
4. "Yesterday" is the calendar day of (timestamp - 24h), not date arithmetic

CRITICAL RULES:
- Never compare calendar days computed in different zones
- Store journal timestamps as ISO strings with their offset (use to_utc())
"""

import logging
from datetime import datetime, date, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from src.config import APP_TIMEZONE

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"

# Offset used to derive the previous calendar day for streaks
STREAK_DAY_OFFSET = timedelta(hours=24)


def get_app_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    """
    Get the zone used for calendar decisions

    Args:
        tz_name: Override zone name (defaults to APP_TIMEZONE)

    Returns:
        ZoneInfo object; falls back to UTC on an unknown zone
    """
    tz_str = tz_name or APP_TIMEZONE
    try:
        return ZoneInfo(tz_str)
    except Exception as e:
        logger.error(f"Invalid timezone '{tz_str}': {e}")
        return ZoneInfo(DEFAULT_TIMEZONE)


def now_local(tz_name: Optional[str] = None) -> datetime:
    """Current time as an aware datetime in the application zone"""
    return datetime.now(get_app_timezone(tz_name))


def to_local(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """
    Express a datetime in the application zone

    Args:
        dt: Naive (assumed local) or aware datetime
        tz_name: Override zone name

    Returns:
        Timezone-aware datetime in the application zone
    """
    tz = get_app_timezone(tz_name)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def to_utc(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """Convert a datetime to UTC; naive values are taken as application-local"""
    return to_local(dt, tz_name).astimezone(ZoneInfo("UTC"))


def local_date(dt: datetime, tz_name: Optional[str] = None) -> date:
    """Calendar day of a timestamp in the application zone"""
    return to_local(dt, tz_name).date()


def local_hour(dt: datetime, tz_name: Optional[str] = None) -> int:
    """Hour of day (0-23) of a timestamp in the application zone"""
    return to_local(dt, tz_name).hour


def previous_day(dt: datetime, tz_name: Optional[str] = None) -> date:
    """
    Calendar day considered "yesterday" for streak purposes

    Computed as the calendar day of (dt - 24h) on the absolute time line,
    so on a 23h or 25h day around a DST change the result can differ from
    local_date(dt) - 1 day.
    """
    shifted = to_utc(dt, tz_name) - STREAK_DAY_OFFSET
    return local_date(shifted, tz_name)


def day_key(dt: datetime, tz_name: Optional[str] = None) -> str:
    """ISO key (YYYY-MM-DD) of the calendar day, used by daily counters"""
    return local_date(dt, tz_name).isoformat()
