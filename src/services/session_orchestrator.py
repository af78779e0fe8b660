"""
SessionOrchestrator - Per-message pipeline

For every incoming user message, strictly in this order:
1. Infer missing profile fields (name, DISC) - first inference wins
2. Detect actions in the text
3. Apply them to the progression ledger
4. Register the session start (streak, once per calendar day)
5. Append the user message to history
6. Build the conversation context
7. Award newly earned badges
8. Return context + gamification delta

The language-model call and the assistant reply happen afterwards, in the
transport layer, which calls record_assistant_reply() once generation
finishes. Nothing done in steps 1-7 is rolled back if that call fails:
points, streak and the stored user message stand on their own.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from src.config import PROGRAM_LENGTH_DAYS
from src.exceptions import ValidationError
from src.gamification.action_detector import detect
from src.gamification.catalog import ACTION_CATEGORIES
from src.gamification.xp_system import level_of
from src.memory.profile_inference import extract_name, infer_disc
from src.memory.system_prompt import render_conversation_context, render_system_prompt
from src.models.journal import JournalEntry, Role
from src.models.message_context import ConversationContext, MessageOutcome
from src.utils.datetime_helpers import now_local

logger = logging.getLogger(__name__)

RESERVED_NAME_PHRASES = tuple(phrase for category in ACTION_CATEGORIES for phrase in category.phrases)


class SessionOrchestrator:
    """
    Service combining detection, progression, history and context.

    Responsibilities:
    - Input validation (user id, program day)
    - Ordered per-message pipeline
    - Assistant reply recording
    - Prompt serialization for the language-model collaborator
    """

    def __init__(
        self,
        ledger,
        history_store,
        meta_store,
        summarizer,
        program_length: int = PROGRAM_LENGTH_DAYS
    ):
        """
        Initialize SessionOrchestrator.

        Args:
            ledger: ProgressionLedger instance
            history_store: HistoryStore instance
            meta_store: MetaStore instance
            summarizer: ContextSummarizer instance
            program_length: Number of program days (valid days are 1..N)
        """
        self.ledger = ledger
        self.history = history_store
        self.meta = meta_store
        self.summarizer = summarizer
        self.program_length = program_length

    def validate_day(self, day: Any, user_id: Optional[str] = None) -> int:
        """
        Check a program day number

        Raises:
            ValidationError: If day is not an integer in 1..program_length
        """
        if isinstance(day, bool) or not isinstance(day, int):
            raise ValidationError(
                message=f"Day must be an integer, got {type(day).__name__}",
                field="day",
                value=day,
                user_id=user_id,
                operation="validate_day"
            )
        if not 1 <= day <= self.program_length:
            raise ValidationError(
                message=f"Day must be between 1 and {self.program_length}",
                field="day",
                value=day,
                user_id=user_id,
                operation="validate_day"
            )
        return day

    @staticmethod
    def validate_user_id(user_id: Any) -> str:
        """
        Raises:
            ValidationError: If user_id is empty or not a string
        """
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError(
                message="User id must be a non-empty string",
                field="user_id",
                value=user_id,
                operation="validate_user_id"
            )
        return user_id

    async def _infer_profile(self, user_id: str, text: str) -> None:
        meta = await self.meta.get_meta(user_id)
        name = None if meta.name else extract_name(text, RESERVED_NAME_PHRASES)
        disc = None if meta.disc else infer_disc(text)
        if name or disc:
            await self.meta.set_if_unset(user_id, name=name, disc=disc)

    async def handle_incoming_message(
        self,
        user_id: str,
        day: int,
        text: str,
        now: Optional[datetime] = None
    ) -> MessageOutcome:
        """
        Process one user message.

        Args:
            user_id: User id
            day: Program day the message belongs to (1..N)
            text: Message text
            now: Reception time (defaults to current time in APP_TIMEZONE)

        Returns:
            MessageOutcome with the context and the gamification delta

        Raises:
            ValidationError: On invalid user id or day (before any side effect)
            StorageWriteError: If a store cannot be written; earlier steps are kept
        """
        self.validate_user_id(user_id)
        self.validate_day(day, user_id)
        text = text or ""
        now = now or now_local()

        before = await self.ledger.get_progress(user_id)

        # 1. Profile inference (one-shot per field)
        await self._infer_profile(user_id, text)

        # 2. Action detection
        detection = detect(text)

        # 3. Ledger
        award = await self.ledger.apply_message_detailed(user_id, detection.events, now)

        # 4. Streak
        streak = await self.ledger.register_session_start(user_id, now)

        # 5. History
        await self.history.append_entry(
            user_id, day, JournalEntry(role=Role.USER, text=text, timestamp=now)
        )

        # 6. Context (history holds the user message, not the reply)
        context = await self.summarizer.build_context(user_id, day)

        # 7. Badges
        new_badges = await self.ledger.award_badges(user_id)

        progress = await self.ledger.get_progress(user_id)
        level = level_of(progress.total_points)
        leveled_up = level.number > level_of(before.total_points).number
        if leveled_up:
            logger.info(f"User {user_id} reached level {level.number} ({level.name})")

        logger.info(
            f"Handled message for user {user_id}, day {day}: "
            f"points={award.points_awarded}, streak={streak}, badges={new_badges}"
        )

        return MessageOutcome(
            context=context,
            points_awarded=award.points_awarded,
            new_badges=new_badges,
            level=level,
            leveled_up=leveled_up,
            streak=streak,
            total_points=progress.total_points,
        )

    async def record_assistant_reply(
        self,
        user_id: str,
        day: int,
        text: str,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Store a completed assistant reply.

        Returns:
            True if stored, False for an empty reply (nothing generated)

        Raises:
            ValidationError: On invalid user id or day
            StorageWriteError: If the journal cannot be written
        """
        self.validate_user_id(user_id)
        self.validate_day(day, user_id)
        if not text or not text.strip():
            logger.info(f"Empty assistant reply for user {user_id}, day {day}: not stored")
            return False

        await self.history.append_entry(
            user_id, day, JournalEntry(role=Role.ASSISTANT, text=text, timestamp=now or now_local())
        )
        return True

    async def render_prompt(self, user_id: str, context: ConversationContext) -> Dict[str, str]:
        """
        Serialize a context for the language-model call.

        Returns:
            {'system': str, 'user': str}
        """
        return {
            'system': render_system_prompt(context.profile),
            'user': render_conversation_context(context),
        }

    async def gamification_snapshot(self, user_id: str) -> Dict[str, Any]:
        """Gamification state sent to the client after a reply"""
        self.validate_user_id(user_id)
        return await self.ledger.get_snapshot(user_id)


