"""
Static gamification catalog

Single source of truth for point values, time multipliers, levels and badges.
Tables are immutable and validated once, when this module is imported.

Point values (base, before multipliers):
- Bismillah: 15
- Alhamdulillah: 20
- Astaghfirullah: 35
- Dhikr (tasbih / takbir): 10 each
- Ameen: 25
- Gratitude: 30

Multipliers (highest priority first, never stacked):
- Friday: x1.5
- Early morning (before 08:00): x1.3
- Late evening (from 20:00): x1.2
"""

import logging
from types import MappingProxyType
from typing import Mapping

from src.exceptions import ConfigurationError
from src.models.gamification import ActionCategory, ActionKind, Badge, Level, Multiplier
from src.models.progress import UserProgress

logger = logging.getLogger(__name__)

MIN_ACTION_POINTS = 10
MAX_ACTION_POINTS = 40

EARLY_MORNING_END_HOUR = 8
LATE_EVENING_START_HOUR = 20
FRIDAY = 4  # datetime.weekday()


ACTION_CATEGORIES: tuple[ActionCategory, ...] = (
    ActionCategory("bismillah", ActionKind.BISMILLAH, 15, ("bismillah", "بسم الله")),
    ActionCategory("alhamdulillah", ActionKind.ALHAMDULILLAH, 20, ("alhamdulillah", "الحمد لله")),
    ActionCategory("astaghfirullah", ActionKind.ASTAGHFIRULLAH, 35, ("astaghfirullah", "أستغفر الله")),
    ActionCategory("tasbih", ActionKind.DHIKR, 10, ("subhanallah", "سبحان الله")),
    ActionCategory("takbir", ActionKind.DHIKR, 10, ("allahu akbar", "الله أكبر")),
    ActionCategory("ameen", ActionKind.AMEEN, 25, ("ameen", "amin", "آمين")),
    ActionCategory("gratitude", ActionKind.GRATITUDE, 30, ("merci allah", "barakallahu fik", "jazak allah")),
)

MULTIPLIERS: tuple[Multiplier, ...] = (
    Multiplier("friday", 1.5, "Jumu'ah bonus"),
    Multiplier("early_morning", 1.3, f"Session before {EARLY_MORNING_END_HOUR:02d}:00"),
    Multiplier("late_evening", 1.2, f"Session from {LATE_EVENING_START_HOUR:02d}:00"),
)

LEVELS: tuple[Level, ...] = (
    Level(1, "🌱 Nouveau Muslim", 0),
    Level(2, "📚 Student", 500),
    Level(3, "🤲 Worshipper", 1500),
    Level(4, "📿 Devoted", 5000),
    Level(5, "🌟 Righteous", 15000),
    Level(6, "👑 Spiritual Guide", 50000),
)

BADGES: tuple[Badge, ...] = (
    Badge("new_muslim", "🌱 Nouveau Muslim", "Première session complète", "total_sessions", 1),
    Badge("first_dua", "🤲 Premier Du'a", "Premier du'a dans l'app", "total_points", 50),
    Badge("streak_3", "🔥 Streak 3", "3 jours consécutifs", "max_streak", 3),
    Badge("lightning", "⚡ Lightning", "5 actions en une journée", "max_actions_in_single_day", 5),
    Badge("fajr_warrior", "🌅 Fajr Warrior", "10 sessions avant 8h", "early_morning_session_count", 10),
    Badge("dhikr_master", "📿 Dhikr Master", "100 dhikr cumulés", "total_dhikr_count", 100),
    Badge("dedicated", "💎 Dedicated", "15 jours complétés", "total_sessions", 15),
    Badge("champion", "👑 Champion", "5000 points atteints", "total_points", 5000),
)

BADGES_BY_ID: Mapping[str, Badge] = MappingProxyType({badge.id: badge for badge in BADGES})


def validate_catalog(
    categories: tuple[ActionCategory, ...] = ACTION_CATEGORIES,
    multipliers: tuple[Multiplier, ...] = MULTIPLIERS,
    levels: tuple[Level, ...] = LEVELS,
    badges: tuple[Badge, ...] = BADGES,
) -> None:
    """
    Validate the static tables

    Raises:
        ConfigurationError: On the first inconsistency found
    """
    names = [c.name for c in categories]
    if len(names) != len(set(names)):
        raise ConfigurationError("Duplicate action category name", config_key="ACTION_CATEGORIES")
    for category in categories:
        if not MIN_ACTION_POINTS <= category.points <= MAX_ACTION_POINTS:
            raise ConfigurationError(
                f"Points for {category.name} must be within {MIN_ACTION_POINTS}-{MAX_ACTION_POINTS}, "
                f"got {category.points}",
                config_key="ACTION_CATEGORIES"
            )
        if not category.phrases or any(not p.strip() for p in category.phrases):
            raise ConfigurationError(f"Empty phrase in category {category.name}", config_key="ACTION_CATEGORIES")

    for multiplier in multipliers:
        if multiplier.factor <= 0:
            raise ConfigurationError(f"Multiplier {multiplier.name} must be positive", config_key="MULTIPLIERS")

    if not levels or levels[0].min_points != 0:
        raise ConfigurationError("Level 1 threshold must be 0", config_key="LEVELS")
    for previous, current in zip(levels, levels[1:]):
        if current.min_points <= previous.min_points or current.number <= previous.number:
            raise ConfigurationError(
                f"Level thresholds must be strictly increasing ({previous.number} -> {current.number})",
                config_key="LEVELS"
            )

    badge_ids = [b.id for b in badges]
    if len(badge_ids) != len(set(badge_ids)):
        raise ConfigurationError("Duplicate badge id", config_key="BADGES")
    for badge in badges:
        if badge.field not in UserProgress.model_fields:
            raise ConfigurationError(
                f"Badge {badge.id} references unknown field {badge.field}",
                config_key="BADGES"
            )
        if badge.threshold < 0:
            raise ConfigurationError(f"Badge {badge.id} threshold must be >= 0", config_key="BADGES")


validate_catalog()
logger.debug(
    f"Gamification catalog loaded: {len(ACTION_CATEGORIES)} categories, "
    f"{len(LEVELS)} levels, {len(BADGES)} badges"
)
