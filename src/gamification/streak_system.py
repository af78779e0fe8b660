"""
Daily Streak System

A streak counts consecutive calendar days with at least one session.

Logic:
- Same calendar day as the last session: no change (idempotent)
- Last session was "yesterday": streak continues (+1)
- Any larger gap, or no session yet: streak restarts at 1
- max_streak tracks the best streak ever reached

Calendar days are taken in APP_TIMEZONE; "yesterday" is the calendar day
of (timestamp - 24h), see utils.datetime_helpers.previous_day.
"""

from datetime import datetime
from typing import Optional
import logging

from src.models.progress import UserProgress
from src.utils.datetime_helpers import local_date, previous_day

logger = logging.getLogger(__name__)


def advance_streak(progress: UserProgress, timestamp: datetime) -> UserProgress:
    """
    Apply a session start to a progression record

    Args:
        progress: Current record (not mutated)
        timestamp: Moment the session started

    Returns:
        Updated copy of the record (the same values if already counted today)
    """
    today = local_date(timestamp)
    last_date = progress.last_session_date

    if last_date == today:
        return progress

    updated = progress.model_copy(deep=True)

    if last_date is not None and last_date == previous_day(timestamp):
        updated.current_streak = progress.current_streak + 1
    else:
        if last_date is not None and progress.current_streak > 1:
            logger.info(
                f"Streak broken: was {progress.current_streak} days, "
                f"last session {last_date}, today {today}"
            )
        updated.current_streak = 1

    updated.max_streak = max(progress.max_streak, updated.current_streak)
    updated.total_sessions = progress.total_sessions + 1
    updated.last_session_date = today
    return updated


def format_streak_display(progress: Optional[UserProgress]) -> str:
    """
    Format streak for chat display

    Args:
        progress: User's record (None for a user with no record yet)

    Returns:
        Formatted string for display
    """
    if progress is None or progress.current_streak == 0:
        return "Pas encore de série. Reviens demain pour la lancer ! 💪"

    line = f"🔥 Série : {progress.current_streak} jour"
    if progress.current_streak > 1:
        line += "s"
    if progress.max_streak > progress.current_streak:
        line += f" (record : {progress.max_streak})"
    return line
