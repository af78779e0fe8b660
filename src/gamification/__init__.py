"""
Gamification system for coachbot

This module implements the progression rules of the coaching program:
- Action detection (devotional and engagement phrases)
- Points, time multipliers and levels
- Daily streak tracking
- Badges

Everything here is pure calculation over UserProgress records;
persistence lives in src.services.progression_ledger.
"""

from src.gamification.action_detector import detect
from src.gamification.xp_system import level_of, progress_to_next_level, calculate_points
from src.gamification.streak_system import advance_streak
from src.gamification.achievement_system import newly_earned_badges, merge_badges, badge_progress

__all__ = [
    "detect",
    "level_of",
    "progress_to_next_level",
    "calculate_points",
    "advance_streak",
    "newly_earned_badges",
    "merge_badges",
    "badge_progress",
]
