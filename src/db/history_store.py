"""Conversation journal persistence

Layout: {user_id: {"<day>": [entry, ...]}} with day numbers 1..N.
Entries are append-only. Older journals may hold a single entry object
instead of a list for a day, or use message/date keys; both are read.

Appends are serialized by a per-user asyncio.Lock, kept for the life of the
process (one per user id seen).
"""
import asyncio
import logging
from collections import defaultdict
from typing import Dict, List

from pydantic import ValidationError as PydanticValidationError

from src.config import PROGRAM_LENGTH_DAYS
from src.models.journal import JournalEntry

logger = logging.getLogger(__name__)


class HistoryStore:
    """Per-user, per-day message log"""

    def __init__(self, documents, program_length: int = PROGRAM_LENGTH_DAYS):
        """
        Args:
            documents: JsonDocumentStore or InMemoryDocumentStore
            program_length: Number of program days read by get_all_days
        """
        self.documents = documents
        self.program_length = program_length
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _load_all(self) -> dict:
        return self.documents.load_all()

    def _user_journal(self, data: dict, user_id: str) -> dict:
        journal = data.get(user_id)
        if not isinstance(journal, dict):
            if journal is not None:
                logger.warning(f"Malformed journal for user {user_id}, ignoring")
            return {}
        return journal

    @staticmethod
    def _raw_entries(value) -> list:
        if isinstance(value, list):
            return value
        if isinstance(value, dict):
            return [value]
        return []

    def _parse_entries(self, user_id: str, day: int, value) -> List[JournalEntry]:
        entries = []
        for raw in self._raw_entries(value):
            try:
                entries.append(JournalEntry.model_validate(raw))
            except PydanticValidationError:
                logger.warning(f"Skipping malformed journal entry for user {user_id}, day {day}")
        return entries

    async def append_entry(self, user_id: str, day: int, entry: JournalEntry) -> None:
        """
        Append one message to a day

        Raises:
            StorageWriteError: If the store cannot be written
        """
        async with self._locks[user_id]:
            data = self._load_all()
            journal = self._user_journal(data, user_id)
            key = str(day)
            entries = list(self._raw_entries(journal.get(key)))
            entries.append(entry.to_record())
            journal[key] = entries
            data[user_id] = journal
            self.documents.save_all(data)
        logger.debug(f"Saved {entry.role.value} message for user {user_id}, day {day}")

    async def get_entries_for_day(self, user_id: str, day: int) -> List[JournalEntry]:
        """Entries of one day in append order (empty when none)"""
        journal = self._user_journal(self._load_all(), user_id)
        return self._parse_entries(user_id, day, journal.get(str(day)))

    async def get_all_days(self, user_id: str) -> Dict[int, List[JournalEntry]]:
        """All program days (1..N) that hold at least one entry"""
        journal = self._user_journal(self._load_all(), user_id)
        days = {}
        for day in range(1, self.program_length + 1):
            entries = self._parse_entries(user_id, day, journal.get(str(day)))
            if entries:
                days[day] = entries
        return days
