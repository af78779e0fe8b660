"""
Conversation context summarization

Folds a user's whole program history into a bounded context:
- Profile header (name, DISC style, placeholders when unknown)
- One digest per past day (objective, proposed action, last commitment)
- Verbatim transcript of the current day, minus the message being answered

summarize_history() is a pure function; ContextSummarizer adds store access.
"""
import logging
import re
from typing import Dict, List, Optional

from src.exceptions import CoachBotError
from src.memory.templates import UNKNOWN_NAME, UNKNOWN_STYLE
from src.models.journal import JournalEntry, Role, UserMeta
from src.models.message_context import ConversationContext, DayDigest, ProfileHeader

logger = logging.getLogger(__name__)

# Intent expressed by the user ("mon objectif", "je veux")
OBJECTIVE_PATTERN = re.compile(r"\bobjectif|\bbut\b|\bveux\b", re.IGNORECASE)
# Action proposed by the coach
PROPOSAL_PATTERN = re.compile(r"micro-action|action pour|programme", re.IGNORECASE)
# Agreement / commitment from the user; the last one of a day wins
COMMITMENT_PATTERN = re.compile(r"\boui\b|\bok\b|d['’]accord|\bameen\b", re.IGNORECASE)


def build_profile_header(meta: Optional[UserMeta]) -> ProfileHeader:
    """Profile header with explicit placeholders for unknown fields"""
    meta = meta or UserMeta()
    return ProfileHeader(
        display_name=meta.name or UNKNOWN_NAME,
        behavioral_style=meta.disc or UNKNOWN_STYLE,
        name_known=bool(meta.name),
        style_known=bool(meta.disc),
    )


def digest_day(day: int, entries: List[JournalEntry]) -> DayDigest:
    """
    Condense one day of conversation

    Args:
        day: Program day number
        entries: The day's messages in chronological order

    Returns:
        DayDigest with first objective, first proposed action and last commitment
    """
    digest = DayDigest(day=day)
    for entry in entries:
        if entry.role == Role.USER:
            if digest.objective is None and OBJECTIVE_PATTERN.search(entry.text):
                digest.objective = entry.text
            if COMMITMENT_PATTERN.search(entry.text):
                digest.commitment = entry.text
        elif digest.proposed_action is None and PROPOSAL_PATTERN.search(entry.text):
            digest.proposed_action = entry.text
    return digest


def summarize_history(
    days: Dict[int, List[JournalEntry]],
    meta: Optional[UserMeta],
    current_day: int
) -> ConversationContext:
    """
    Reduce a full history to a ConversationContext

    Args:
        days: Mapping day -> entries (any order)
        meta: Known profile fields
        current_day: Day being answered

    Returns:
        ConversationContext; is_first_session when there is no history at all
    """
    profile = build_profile_header(meta)

    all_entries = [(day, entry) for day, entries in days.items() for entry in entries]
    if not all_entries:
        return ConversationContext(profile=profile, current_day=current_day, is_first_session=True)

    # Requests may have been appended out of order; stable sort keeps append order on ties
    all_entries.sort(key=lambda item: item[1].timestamp)

    by_day: Dict[int, List[JournalEntry]] = {}
    for day, entry in all_entries:
        by_day.setdefault(day, []).append(entry)

    prior_days = [digest_day(day, by_day[day]) for day in sorted(by_day) if day < current_day]

    today = by_day.get(current_day, [])
    return ConversationContext(
        profile=profile,
        current_day=current_day,
        prior_days=prior_days,
        current_day_transcript=today[:-1],
        current_message=today[-1].text if today else None,
        is_first_session=False,
    )


class ContextSummarizer:
    """Builds conversation contexts from the history and meta stores"""

    def __init__(self, history_store, meta_store):
        """
        Args:
            history_store: HistoryStore instance
            meta_store: MetaStore instance
        """
        self.history = history_store
        self.meta = meta_store

    async def build_context(self, user_id: str, current_day: int) -> ConversationContext:
        """
        Build the context for a user's current day

        Never raises on missing or unreadable data: store failures degrade
        to placeholders and a first-session context.
        """
        try:
            meta = await self.meta.get_meta(user_id)
        except CoachBotError:
            logger.warning(f"Meta unavailable for user {user_id}, using placeholders")
            meta = None

        try:
            days = await self.history.get_all_days(user_id)
        except CoachBotError:
            logger.warning(f"History unavailable for user {user_id}, building first-session context")
            days = {}

        context = summarize_history(days, meta, current_day)
        logger.debug(
            f"Built context for user {user_id}, day {current_day}: "
            f"{len(context.prior_days)} digests, {len(context.current_day_transcript)} transcript lines"
        )
        return context
