"""
Action Detector

Scans a user message for recognized devotional and engagement phrases
(Latin transliteration and Arabic script) and emits point-bearing actions.
Pure: no I/O, no time dependency, no multipliers.
"""

import logging
from typing import Iterable, Optional

from src.gamification.catalog import ACTION_CATEGORIES
from src.models.gamification import ActionCategory, DetectedAction, DetectionResult

logger = logging.getLogger(__name__)


def detect(
    message: Optional[str],
    categories: Iterable[ActionCategory] = ACTION_CATEGORIES
) -> DetectionResult:
    """
    Detect actions in a message

    Each category fires at most once per message, however many of its
    phrases appear; independent categories may all fire.

    Args:
        message: Raw user message
        categories: Phrase table (defaults to the static catalog)

    Returns:
        DetectionResult with events in catalog order and their base point sum

    Example:
        >>> detect("Bismillah, alhamdulillah !").total_points
        35
    """
    if not message:
        return DetectionResult()

    lowered = message.lower()
    events = []

    for category in categories:
        if any(phrase in lowered for phrase in category.phrases):
            events.append(DetectedAction(kind=category.kind, points=category.points, category=category.name))

    total = sum(event.points for event in events)
    if events:
        logger.debug(f"Detected {len(events)} actions ({total} base points): {[e.category for e in events]}")

    return DetectionResult(events=events, total_points=total)
