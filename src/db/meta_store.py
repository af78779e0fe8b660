"""User meta persistence (display name, DISC style)

Writes are serialized by a per-user asyncio.Lock, kept for the life of the
process (one per user id seen).
"""
import asyncio
import logging
from collections import defaultdict
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from src.models.journal import UserMeta

logger = logging.getLogger(__name__)


class MetaStore:
    """Load and update UserMeta records keyed by user id"""

    def __init__(self, documents):
        self.documents = documents
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _load_all(self) -> dict:
        return self.documents.load_all()

    def _parse(self, user_id: str, raw) -> UserMeta:
        if not isinstance(raw, dict):
            return UserMeta()
        try:
            return UserMeta.model_validate(raw)
        except PydanticValidationError:
            logger.warning(f"Malformed meta for user {user_id}, ignoring")
            return UserMeta()

    async def get_meta(self, user_id: str) -> UserMeta:
        """Meta for a user; empty meta when absent"""
        return self._parse(user_id, self._load_all().get(user_id))

    async def set_meta(
        self,
        user_id: str,
        name: Optional[str] = None,
        disc: Optional[str] = None
    ) -> UserMeta:
        """
        Explicitly set fields (overwrites); None leaves a field untouched

        Raises:
            StorageWriteError: If the store cannot be written
        """
        return await self._write(user_id, name, disc, only_if_unset=False)

    async def set_if_unset(
        self,
        user_id: str,
        name: Optional[str] = None,
        disc: Optional[str] = None
    ) -> UserMeta:
        """
        Set fields that have no value yet (first value wins)

        Raises:
            StorageWriteError: If the store cannot be written
        """
        return await self._write(user_id, name, disc, only_if_unset=True)

    async def _write(self, user_id: str, name, disc, only_if_unset: bool) -> UserMeta:
        async with self._locks[user_id]:
            data = self._load_all()
            meta = self._parse(user_id, data.get(user_id))
            patch = UserMeta(name=name, disc=disc)

            changed = {}
            if patch.name and not (only_if_unset and meta.name):
                changed["name"] = patch.name
            if patch.disc and not (only_if_unset and meta.disc):
                changed["disc"] = patch.disc
            if not changed:
                return meta

            meta = meta.model_copy(update=changed)
            data[user_id] = meta.model_dump(mode="json")
            self.documents.save_all(data)

        logger.info(f"Updated meta fields {sorted(changed)} for user {user_id}")
        return meta
