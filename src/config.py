"""Configuration management"""
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

# Storage
DATA_PATH: Path = Path(os.getenv("DATA_PATH", "./data"))
PROGRESS_FILE: str = os.getenv("PROGRESS_FILE", "gamification.json")
JOURNAL_FILE: str = os.getenv("JOURNAL_FILE", "journal.json")
META_FILE: str = os.getenv("META_FILE", "meta.json")

# Base system prompt handed to the language model (optional file)
PROMPT_PATH: Path = Path(os.getenv("PROMPT_PATH", "./prompt.txt"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Calendar policy
# Every calendar-day and hour-of-day decision (streaks, daily counters,
# early-morning sessions, multipliers) is taken in this single zone.
# Naive timestamps are interpreted as already being in this zone.
APP_TIMEZONE: str = os.getenv("APP_TIMEZONE", "UTC")

# Coaching program
PROGRAM_LENGTH_DAYS: int = int(os.getenv("PROGRAM_LENGTH_DAYS", "15"))

# Gamification
# When enabled, the summed base points of a message are multiplied by the
# single highest-priority matching time window (see gamification.catalog.MULTIPLIERS).
POINT_MULTIPLIERS_ENABLED: bool = os.getenv("POINT_MULTIPLIERS_ENABLED", "true").lower() == "true"


# Validation
def validate_config() -> None:
    """Validate configuration, raising ConfigurationError on the first problem"""
    from src.exceptions import ConfigurationError

    try:
        ZoneInfo(APP_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(
            message=f"Unknown timezone '{APP_TIMEZONE}'",
            config_key="APP_TIMEZONE",
            cause=e
        )
    if PROGRAM_LENGTH_DAYS < 1:
        raise ConfigurationError(
            message=f"PROGRAM_LENGTH_DAYS must be positive, got {PROGRAM_LENGTH_DAYS}",
            config_key="PROGRAM_LENGTH_DAYS"
        )
    if not PROGRESS_FILE or not JOURNAL_FILE or not META_FILE:
        raise ConfigurationError(
            message="Store file names must not be empty",
            config_key="PROGRESS_FILE"
        )
