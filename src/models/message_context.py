"""Data models for the prompt context built per incoming message"""
from dataclasses import dataclass, field
from typing import Optional

from src.models.gamification import Level
from src.models.journal import JournalEntry


@dataclass
class ProfileHeader:
    """Who the user is, with placeholders for unknown fields"""
    display_name: str
    behavioral_style: str
    name_known: bool = False
    style_known: bool = False


@dataclass
class DayDigest:
    """Condensed summary of one past program day"""
    day: int
    objective: Optional[str] = None
    proposed_action: Optional[str] = None
    commitment: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.objective or self.proposed_action or self.commitment)


@dataclass
class ConversationContext:
    """Everything needed to prime a language-model call"""
    profile: ProfileHeader
    current_day: int
    prior_days: list[DayDigest] = field(default_factory=list)
    current_day_transcript: list[JournalEntry] = field(default_factory=list)
    current_message: Optional[str] = None
    is_first_session: bool = False


@dataclass
class MessageOutcome:
    """Result of handling one incoming message"""
    context: ConversationContext
    points_awarded: int
    new_badges: list[str]
    level: Level
    leveled_up: bool = False
    streak: int = 0
    total_points: int = 0
