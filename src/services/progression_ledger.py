"""
ProgressionLedger - Gamification Business Logic

Per-user accumulator of points, streaks, session counts and per-action
tallies. Pure rules live in src.gamification; this service loads records,
applies the rules and persists through ProgressStore.update.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from src.config import POINT_MULTIPLIERS_ENABLED
from src.gamification.achievement_system import (
    badge_progress,
    describe_badges,
    merge_badges,
    newly_earned_badges,
)
from src.gamification.catalog import EARLY_MORNING_END_HOUR
from src.gamification.streak_system import advance_streak
from src.gamification.xp_system import calculate_points, level_of, progress_to_next_level
from src.models.gamification import ActionKind, DetectedAction, Level, LevelProgress, PointsAward
from src.models.progress import UserProgress
from src.utils.datetime_helpers import day_key, local_hour

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 20
DEFAULT_DISPLAY_NAME = "Utilisateur"


class ProgressionLedger:
    """
    Service for user progression.

    Responsibilities:
    - Points (with time multipliers) and per-day action counters
    - Dhikr and early-morning tallies
    - Daily streak state machine
    - Level derivation and badge awarding
    - Leaderboard ranking
    """

    def __init__(
        self,
        progress_store,
        multipliers_enabled: bool = POINT_MULTIPLIERS_ENABLED,
        meta_store=None
    ):
        """
        Initialize ProgressionLedger.

        Args:
            progress_store: ProgressStore instance
            multipliers_enabled: Apply time-window multipliers to awarded points
            meta_store: Optional MetaStore used for display names on the leaderboard
        """
        self.store = progress_store
        self.meta_store = meta_store
        self.multipliers_enabled = multipliers_enabled
        logger.debug("ProgressionLedger initialized")

    async def get_progress(self, user_id: str) -> UserProgress:
        """Current record (created with zero defaults on first access)"""
        return await self.store.get_or_create(user_id)

    async def apply_message_detailed(
        self,
        user_id: str,
        events: List[DetectedAction],
        timestamp: datetime
    ) -> PointsAward:
        """
        Apply the actions detected in one message.

        Args:
            user_id: User id
            events: Detector output (base points)
            timestamp: When the message was received

        Returns:
            PointsAward with the updated record

        Raises:
            StorageWriteError: If the record cannot be saved
        """
        base_points = sum(event.points for event in events)
        points, multiplier = calculate_points(base_points, timestamp, self.multipliers_enabled)
        dhikr_events = sum(1 for event in events if event.kind == ActionKind.DHIKR)
        today = day_key(timestamp)
        early_morning = local_hour(timestamp) < EARLY_MORNING_END_HOUR

        def transform(progress: UserProgress) -> UserProgress:
            updated = progress.model_copy(deep=True)
            updated.total_points = progress.total_points + points

            updated.daily_action_counts[today] = updated.daily_action_counts.get(today, 0) + 1
            if updated.daily_action_counts[today] > updated.max_actions_in_single_day:
                updated.max_actions_in_single_day = updated.daily_action_counts[today]

            updated.total_dhikr_count = progress.total_dhikr_count + dhikr_events
            if early_morning:
                updated.early_morning_session_count = progress.early_morning_session_count + 1
            return updated

        progress = await self.store.update(user_id, transform)

        logger.info(
            f"Awarded {points} points to user {user_id} "
            f"({base_points} base, {len(events)} actions"
            f"{f', {multiplier.name} x{multiplier.factor}' if multiplier else ''}). "
            f"Total: {progress.total_points}"
        )
        return PointsAward(
            base_points=base_points,
            multiplier=multiplier,
            points_awarded=points,
            progress=progress,
        )

    async def apply_message(
        self,
        user_id: str,
        events: List[DetectedAction],
        timestamp: datetime
    ) -> UserProgress:
        """Apply the actions detected in one message; returns the updated record"""
        award = await self.apply_message_detailed(user_id, events, timestamp)
        return award.progress

    async def register_session_start(self, user_id: str, timestamp: datetime) -> int:
        """
        Count a session for streak purposes.

        Idempotent per calendar day: a second call on the same day changes
        nothing and returns the same streak.

        Returns:
            Current streak after the call

        Raises:
            StorageWriteError: If the record cannot be saved
        """
        progress = await self.store.update(user_id, lambda current: advance_streak(current, timestamp))
        logger.info(
            f"Session registered for user {user_id}: streak {progress.current_streak} "
            f"(best {progress.max_streak}, sessions {progress.total_sessions})"
        )
        return progress.current_streak

    async def award_badges(self, user_id: str) -> List[str]:
        """
        Evaluate the badge catalog and merge newly earned badges.

        Returns:
            Ids of badges earned by this call (catalog order)

        Raises:
            StorageWriteError: If the record cannot be saved
        """
        earned: List[str] = []

        def transform(progress: UserProgress) -> UserProgress:
            earned.extend(newly_earned_badges(progress))
            return merge_badges(progress, earned) if earned else progress

        await self.store.update(user_id, transform)

        for badge in describe_badges(earned):
            logger.info(f"User {user_id} earned badge {badge['id']} ({badge['label']})")
        return earned

    @staticmethod
    def level_of(total_points: int) -> Level:
        return level_of(total_points)

    @staticmethod
    def progress_to_next_level(total_points: int) -> LevelProgress:
        return progress_to_next_level(total_points)

    @staticmethod
    def newly_earned_badges(progress: UserProgress) -> List[str]:
        return newly_earned_badges(progress)

    async def get_snapshot(self, user_id: str, progress: Optional[UserProgress] = None) -> Dict[str, Any]:
        """
        Gamification state for client notification.

        Returns:
            {
                'total_points': int,
                'level': {'number': int, 'name': str, 'min_points': int},
                'next_level': dict | None,
                'progress_percent': float,
                'points_needed': int,
                'is_max_level': bool,
                'current_streak': int,
                'max_streak': int,
                'total_sessions': int,
                'badges': [{'id', 'label', 'description'}],
                'locked_badges': [...]
            }
        """
        if progress is None:
            progress = await self.get_progress(user_id)
        info = progress_to_next_level(progress.total_points)

        return {
            'total_points': progress.total_points,
            'level': _level_dict(info.current_level),
            'next_level': _level_dict(info.next_level) if info.next_level else None,
            'progress_percent': round(info.percent, 1),
            'points_needed': info.points_needed,
            'is_max_level': info.is_max_level,
            'current_streak': progress.current_streak,
            'max_streak': progress.max_streak,
            'total_sessions': progress.total_sessions,
            'badges': describe_badges(progress.earned_badges),
            'locked_badges': badge_progress(progress),
        }

    async def get_leaderboard(self, user_id: str, limit: int = LEADERBOARD_SIZE) -> Dict[str, Any]:
        """
        Rank every known user by total points.

        Ties keep store order. Users without a stored name are shown as
        "Utilisateur".

        Returns:
            {
                'leaderboard': [{'user_id', 'name', 'total_points', 'level',
                                 'badges', 'streak'}],   # top `limit`
                'user_position': int | None,             # 1-based, None if outside the top
                'total_users': int
            }
        """
        records = await self.store.load_all_progress()
        ranked = sorted(records.items(), key=lambda item: item[1].total_points, reverse=True)[:limit]

        leaderboard = []
        for ranked_user_id, progress in ranked:
            leaderboard.append({
                'user_id': ranked_user_id,
                'name': await self._display_name(ranked_user_id),
                'total_points': progress.total_points,
                'level': _level_dict(level_of(progress.total_points)),
                'badges': len(progress.earned_badges),
                'streak': progress.current_streak,
            })

        position = next(
            (index + 1 for index, entry in enumerate(leaderboard) if entry['user_id'] == user_id),
            None
        )
        logger.debug(f"Leaderboard for {user_id}: position {position} of {len(records)} users")
        return {
            'leaderboard': leaderboard,
            'user_position': position,
            'total_users': len(records),
        }

    async def _display_name(self, user_id: str) -> str:
        if self.meta_store is None:
            return DEFAULT_DISPLAY_NAME
        meta = await self.meta_store.get_meta(user_id)
        return meta.name or DEFAULT_DISPLAY_NAME


def _level_dict(level: Level) -> Dict[str, Any]:
    return {'number': level.number, 'name': level.name, 'min_points': level.min_points}
