"""Journal (conversation history) and user meta models"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from src.utils.datetime_helpers import to_utc

DISC_STYLES = ("D", "I", "S", "C")


class Role(str, Enum):
    """Author of a journal entry"""
    USER = "user"
    ASSISTANT = "assistant"


class JournalEntry(BaseModel):
    """One message of the conversation, append-only"""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    role: Role
    text: str = Field(validation_alias=AliasChoices("text", "message"))
    timestamp: datetime = Field(validation_alias=AliasChoices("timestamp", "date"))

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, value):
        # Older journals tagged assistant replies as "ai"
        if isinstance(value, str) and value.lower() in ("ai", "assistant", "bot"):
            return Role.ASSISTANT
        return value

    @field_validator("timestamp", mode="after")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return to_utc(value)

    def to_record(self) -> dict:
        """Serialize for the JSON journal store"""
        return self.model_dump(mode="json")


class UserMeta(BaseModel):
    """Profile fields inferred from (or set for) a user"""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    disc: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("disc", mode="before")
    @classmethod
    def normalize_disc(cls, value):
        if isinstance(value, str):
            value = value.strip().upper()
            return value if value in DISC_STYLES else None
        return value
