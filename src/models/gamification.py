"""Gamification models: action categories, levels, badges, multipliers"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any

from src.models.progress import UserProgress


class ActionKind(str, Enum):
    """Kinds of recognized user expressions"""
    BISMILLAH = "bismillah"
    ALHAMDULILLAH = "alhamdulillah"
    ASTAGHFIRULLAH = "astaghfirullah"
    DHIKR = "dhikr"
    AMEEN = "ameen"
    GRATITUDE = "gratitude"


@dataclass(frozen=True)
class ActionCategory:
    """A phrase group that fires one action of a fixed kind and value"""
    name: str
    kind: ActionKind
    points: int
    phrases: tuple[str, ...]


@dataclass(frozen=True)
class Multiplier:
    """A time window that scales the points of a message"""
    name: str
    factor: float
    description: str


@dataclass(frozen=True)
class Level:
    """Level definition"""
    number: int
    name: str
    min_points: int


@dataclass(frozen=True)
class Badge:
    """Badge definition

    Unlocked when the named UserProgress field reaches the threshold.
    """
    id: str
    label: str
    description: str
    field: str
    threshold: int

    def is_unlocked(self, progress: Any) -> bool:
        """Unlock predicate over a UserProgress"""
        return getattr(progress, self.field, 0) >= self.threshold


@dataclass
class DetectedAction:
    """One action found in a message (base points, no multiplier)"""
    kind: ActionKind
    points: int
    category: str = ""


@dataclass
class DetectionResult:
    """All actions found in a message"""
    events: list[DetectedAction] = field(default_factory=list)
    total_points: int = 0

    @property
    def has_actions(self) -> bool:
        return bool(self.events)


@dataclass
class LevelProgress:
    """Position of a point total between two level thresholds"""
    current_level: Level
    next_level: Optional[Level]
    percent: float
    points_needed: int
    is_max_level: bool


@dataclass
class PointsAward:
    """Outcome of applying a message's actions to the ledger"""
    base_points: int
    multiplier: Optional[Multiplier]
    points_awarded: int
    progress: UserProgress
