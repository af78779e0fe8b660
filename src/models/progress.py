"""User progression record (one per user id)"""
import logging
from datetime import date, datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

# Day format written by older journal/gamification files ("Fri Mar 01 2024")
LEGACY_DATE_FORMAT = "%a %b %d %Y"

logger = logging.getLogger(__name__)


class UserProgress(BaseModel):
    """Accumulated gamification state of one user

    Older records used camelCase keys (totalPoints, badges, totalDhikr...);
    they are accepted on load and written back in snake_case.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    total_points: int = Field(default=0, ge=0, validation_alias=AliasChoices("total_points", "totalPoints"))
    total_sessions: int = Field(default=0, ge=0, validation_alias=AliasChoices("total_sessions", "totalSessions"))
    current_streak: int = Field(default=0, ge=0, validation_alias=AliasChoices("current_streak", "currentStreak"))
    max_streak: int = Field(default=0, ge=0, validation_alias=AliasChoices("max_streak", "maxStreak"))
    last_session_date: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices("last_session_date", "lastSessionDate")
    )
    total_dhikr_count: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("total_dhikr_count", "totalDhikr")
    )
    early_morning_session_count: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("early_morning_session_count", "earlyMorningSessions")
    )
    max_actions_in_single_day: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("max_actions_in_single_day", "maxActionsInSession")
    )
    daily_action_counts: dict[str, int] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("daily_action_counts", "dailyActions")
    )
    earned_badges: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("earned_badges", "badges")
    )

    @field_validator("last_session_date", mode="before")
    @classmethod
    def parse_legacy_date(cls, value):
        # An unreadable date degrades to None; the rest of the record is kept
        if isinstance(value, str):
            if not value:
                return None
            try:
                return date.fromisoformat(value)
            except ValueError:
                pass
            try:
                return datetime.strptime(value, LEGACY_DATE_FORMAT).date()
            except ValueError:
                logger.warning(f"Unreadable last_session_date {value!r}, treating as no session")
                return None
        return value

    @field_validator("earned_badges", mode="after")
    @classmethod
    def dedupe_badges(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def repair_invariants(self) -> "UserProgress":
        # current_streak <= max_streak and max_actions >= every daily count
        if self.current_streak > self.max_streak:
            self.max_streak = self.current_streak
        if self.daily_action_counts:
            busiest = max(self.daily_action_counts.values())
            if busiest > self.max_actions_in_single_day:
                self.max_actions_in_single_day = busiest
        return self

    def has_badge(self, badge_id: str) -> bool:
        return badge_id in self.earned_badges

    def to_record(self) -> dict:
        """Serialize for the JSON progress store"""
        return self.model_dump(mode="json")
