"""
Points and Leveling System

Level table (see catalog.LEVELS):
- Level 1 (Nouveau Muslim): 0 points
- Level 2 (Student): 500 points
- Level 3 (Worshipper): 1500 points
- Level 4 (Devoted): 5000 points
- Level 5 (Righteous): 15000 points
- Level 6 (Spiritual Guide): 50000 points

Multiplier policy:
- Only the single highest-priority matching window applies (Friday, then
  early morning, then late evening); multipliers never stack
- Multiplied points are rounded half up to an integer
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
import logging

from src.config import POINT_MULTIPLIERS_ENABLED
from src.gamification.catalog import (
    EARLY_MORNING_END_HOUR,
    FRIDAY,
    LATE_EVENING_START_HOUR,
    LEVELS,
    MULTIPLIERS,
)
from src.models.gamification import Level, LevelProgress, Multiplier
from src.utils.datetime_helpers import to_local

logger = logging.getLogger(__name__)


def level_of(total_points: int, levels: tuple[Level, ...] = LEVELS) -> Level:
    """
    Highest level whose threshold is <= total_points

    Never fails: level 1 has threshold 0 and negative totals map to level 1.
    """
    for level in reversed(levels):
        if total_points >= level.min_points:
            return level
    return levels[0]


def progress_to_next_level(total_points: int, levels: tuple[Level, ...] = LEVELS) -> LevelProgress:
    """
    Calculate progress between the current level and the next one

    Returns:
        LevelProgress with percent in [0, 100]. At the top level next_level
        is None, percent is 100, points_needed is 0 and is_max_level is True.
    """
    current = level_of(total_points, levels)
    index = levels.index(current)

    if index + 1 >= len(levels):
        return LevelProgress(
            current_level=current,
            next_level=None,
            percent=100.0,
            points_needed=0,
            is_max_level=True,
        )

    next_level = levels[index + 1]
    span = next_level.min_points - current.min_points
    percent = (total_points - current.min_points) / span * 100

    return LevelProgress(
        current_level=current,
        next_level=next_level,
        percent=min(100.0, max(0.0, percent)),
        points_needed=max(0, next_level.min_points - total_points),
        is_max_level=False,
    )


def resolve_multiplier(
    timestamp: datetime,
    multipliers: tuple[Multiplier, ...] = MULTIPLIERS
) -> Optional[Multiplier]:
    """
    Find the highest-priority multiplier whose time window matches

    Args:
        timestamp: Moment of the message (interpreted in APP_TIMEZONE)
        multipliers: Priority-ordered table

    Returns:
        The matching Multiplier, or None
    """
    local = to_local(timestamp)
    windows = {
        "friday": local.weekday() == FRIDAY,
        "early_morning": local.hour < EARLY_MORNING_END_HOUR,
        "late_evening": local.hour >= LATE_EVENING_START_HOUR,
    }
    for multiplier in multipliers:
        if windows.get(multiplier.name):
            return multiplier
    return None


def apply_multiplier(base_points: int, multiplier: Optional[Multiplier]) -> int:
    """Scale points by a multiplier, rounding half up"""
    if multiplier is None or base_points == 0:
        return base_points
    scaled = Decimal(base_points) * Decimal(str(multiplier.factor))
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_points(
    base_points: int,
    timestamp: datetime,
    multipliers_enabled: bool = POINT_MULTIPLIERS_ENABLED
) -> tuple[int, Optional[Multiplier]]:
    """
    Calculate the points a message is worth

    Returns:
        (points, applied multiplier or None)
    """
    multiplier = resolve_multiplier(timestamp) if multipliers_enabled and base_points else None
    points = apply_multiplier(base_points, multiplier)
    if multiplier:
        logger.debug(f"Applied {multiplier.name} x{multiplier.factor}: {base_points} -> {points}")
    return points, multiplier


def format_level_display(total_points: int) -> str:
    """
    Format level and progress for chat display

    Args:
        total_points: User's point total

    Returns:
        Formatted string for display
    """
    info = progress_to_next_level(total_points)
    line = f"{info.current_level.name} (niveau {info.current_level.number}) - {total_points} points"
    if info.is_max_level:
        return line + "\nNiveau maximum atteint 🏆"
    return line + f"\n{info.percent:.0f}% vers {info.next_level.name} ({info.points_needed} points restants)"
