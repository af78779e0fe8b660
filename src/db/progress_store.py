"""Progression record persistence

Every mutation goes through ProgressStore.update (load -> pure transform -> save).
Updates for the same user id are serialized by a per-user asyncio.Lock; the
whole-file load and save run without yielding to the event loop, so updates
for different users cannot interleave inside one process either. Across
processes sharing the same file the last save wins.

One lock is kept per user id seen since start-up and never evicted; the
map grows with the user base, like the document itself.
"""
import asyncio
import logging
from collections import defaultdict
from typing import Callable, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from src.models.progress import UserProgress

logger = logging.getLogger(__name__)


class ProgressStore:
    """Load and save UserProgress records keyed by user id"""

    def __init__(self, documents):
        """
        Args:
            documents: JsonDocumentStore or InMemoryDocumentStore
        """
        self.documents = documents
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _load_all(self) -> dict:
        return self.documents.load_all()

    def _parse(self, user_id: str, raw) -> Optional[UserProgress]:
        if raw is None:
            return None
        if not isinstance(raw, dict):
            logger.warning(f"Malformed progress record for user {user_id} ({type(raw).__name__}), ignoring")
            return None
        try:
            return UserProgress.model_validate(raw)
        except PydanticValidationError as e:
            logger.warning(f"Malformed progress record for user {user_id}, ignoring: {e.error_count()} errors")
            return None

    def _save(self, user_id: str, progress: UserProgress) -> None:
        data = self._load_all()
        data[user_id] = progress.to_record()
        self.documents.save_all(data)

    async def load_progress(self, user_id: str) -> Optional[UserProgress]:
        """Load a record; None when absent or malformed"""
        return self._parse(user_id, self._load_all().get(user_id))

    async def load_all_progress(self) -> Dict[str, UserProgress]:
        """All readable records keyed by user id; malformed ones are skipped"""
        records = {}
        for user_id, raw in self._load_all().items():
            progress = self._parse(user_id, raw)
            if progress is not None:
                records[user_id] = progress
        return records

    async def save_progress(self, user_id: str, progress: UserProgress) -> None:
        """
        Save a whole record

        Raises:
            StorageWriteError: If the store cannot be written
        """
        async with self._locks[user_id]:
            self._save(user_id, progress)

    async def get_or_create(self, user_id: str) -> UserProgress:
        """Load a record, creating and persisting zero defaults on first access"""
        async with self._locks[user_id]:
            return self._get_or_create(user_id)

    def _get_or_create(self, user_id: str) -> UserProgress:
        progress = self._parse(user_id, self._load_all().get(user_id))
        if progress is None:
            progress = UserProgress()
            self._save(user_id, progress)
            logger.info(f"Created progression record for user {user_id}")
        return progress

    async def update(
        self,
        user_id: str,
        transform: Callable[[UserProgress], UserProgress]
    ) -> UserProgress:
        """
        Transactional read-modify-write of one record

        Args:
            user_id: User id
            transform: Pure function returning the new record

        Returns:
            The saved record

        Raises:
            StorageWriteError: If the store cannot be written
        """
        async with self._locks[user_id]:
            current = self._get_or_create(user_id)
            updated = transform(current)
            if updated != current:
                self._save(user_id, updated)
            return updated
