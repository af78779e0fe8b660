"""
Badge System

Badges are one-time achievements defined in catalog.BADGES. Each badge
unlocks when one UserProgress field reaches a threshold; all predicates are
">= threshold" checks over fields that never decrease, so a badge that
became earnable stays earnable.

This module is pure calculation. The ledger merges the result into
earned_badges and persists it.
"""

from typing import Dict, List, Any
import logging

from src.gamification.catalog import BADGES, BADGES_BY_ID
from src.models.gamification import Badge
from src.models.progress import UserProgress

logger = logging.getLogger(__name__)


def _is_owned(progress: UserProgress, badge: Badge) -> bool:
    # Older records stored the display label instead of the id
    return progress.has_badge(badge.id) or progress.has_badge(badge.label)


def newly_earned_badges(
    progress: UserProgress,
    badges: tuple[Badge, ...] = BADGES
) -> List[str]:
    """
    Badges whose predicate is now true and that are not owned yet

    Args:
        progress: Current record
        badges: Badge catalog

    Returns:
        Badge ids in catalog order
    """
    return [
        badge.id
        for badge in badges
        if not _is_owned(progress, badge) and badge.is_unlocked(progress)
    ]


def merge_badges(progress: UserProgress, badge_ids: List[str]) -> UserProgress:
    """
    Add badges to a record without ever removing one

    Returns:
        Updated copy of the record
    """
    updated = progress.model_copy(deep=True)
    for badge_id in badge_ids:
        if not updated.has_badge(badge_id):
            updated.earned_badges.append(badge_id)
    return updated


def badge_progress(progress: UserProgress, badges: tuple[Badge, ...] = BADGES) -> List[Dict[str, Any]]:
    """
    Progress towards every locked badge

    Returns:
        [
            {
                'badge_id': str,
                'label': str,
                'description': str,
                'current': int,
                'target': int,
                'percent': float
            }
        ]
    """
    locked = []
    for badge in badges:
        if _is_owned(progress, badge):
            continue
        current = getattr(progress, badge.field, 0)
        percent = 100.0 if badge.threshold == 0 else min(100.0, current / badge.threshold * 100)
        locked.append({
            'badge_id': badge.id,
            'label': badge.label,
            'description': badge.description,
            'current': current,
            'target': badge.threshold,
            'percent': percent,
        })
    return locked


def describe_badges(badge_ids: List[str]) -> List[Dict[str, str]]:
    """Resolve badge ids to display data, skipping unknown ids"""
    described = []
    for badge_id in badge_ids:
        badge = BADGES_BY_ID.get(badge_id)
        if badge is None:
            logger.debug(f"Unknown badge id {badge_id!r} skipped")
            continue
        described.append({'id': badge.id, 'label': badge.label, 'description': badge.description})
    return described


def format_badges_display(progress: UserProgress) -> str:
    """
    Format earned badges for chat display

    Returns:
        Formatted string for display
    """
    earned = describe_badges(progress.earned_badges)
    if not earned:
        return "Aucun badge pour l'instant. Continue, le premier arrive vite ! 🌱"

    lines = ["🏅 TES BADGES\n"]
    for badge in earned:
        lines.append(f"{badge['label']} - {badge['description']}")
    return "\n".join(lines)
