"""Prompt serialization: system prompt and conversation context text"""
import logging
from pathlib import Path
from typing import Optional

from src.config import PROMPT_PATH
from src.memory.templates import (
    CURRENT_SESSION_HEADER,
    DAY_PLANS,
    DEFAULT_SYSTEM_PROMPT,
    FIRST_SESSION_MARKER,
    HISTORY_HEADER,
    PROFILE_HEADER,
    ROLE_LABELS,
    SYSTEM_PROMPT_NOTE,
    UNKNOWN_PLAN,
)
from src.models.message_context import ConversationContext, ProfileHeader

logger = logging.getLogger(__name__)


def load_base_prompt(path: Path = PROMPT_PATH) -> str:
    """Read the base system prompt, falling back to the built-in one"""
    try:
        text = path.read_text(encoding="utf-8").strip()
    except OSError:
        logger.debug(f"No prompt file at {path}, using default system prompt")
        return DEFAULT_SYSTEM_PROMPT
    return text or DEFAULT_SYSTEM_PROMPT


def day_plan(day: int) -> str:
    """Theme of a program day"""
    return DAY_PLANS.get(day, UNKNOWN_PLAN)


def render_system_prompt(profile: ProfileHeader, base_prompt: Optional[str] = None) -> str:
    """
    Generate the system prompt for a user

    Args:
        profile: Profile header (placeholders already applied)
        base_prompt: Base text (defaults to load_base_prompt())

    Returns:
        Base prompt followed by the user note
    """
    base = base_prompt if base_prompt is not None else load_base_prompt()
    return base + SYSTEM_PROMPT_NOTE.format(name=profile.display_name, disc=profile.behavioral_style)


def render_conversation_context(context: ConversationContext) -> str:
    """
    Serialize a ConversationContext into the single user-turn text

    Sections:
        profile, history digests (or first-session marker), day plan,
        current-day transcript, current message
    """
    lines = [
        PROFILE_HEADER,
        f"Prénom: {context.profile.display_name}",
        f"Profil DISC: {context.profile.behavioral_style}",
        "",
    ]

    if context.is_first_session:
        lines.append(FIRST_SESSION_MARKER)
    else:
        lines.append(HISTORY_HEADER)
        for digest in context.prior_days:
            lines.append("")
            lines.append(f"--- JOUR {digest.day} ---")
            if digest.objective:
                lines.append(f"Objectifs identifiés: {digest.objective}")
            if digest.proposed_action:
                lines.append(f"Actions proposées: {digest.proposed_action}")
            if digest.commitment:
                lines.append(f"Engagement utilisateur: {digest.commitment}")

    lines.append("")
    lines.append(CURRENT_SESSION_HEADER.format(day=context.current_day))
    lines.append(f"Plan du jour : {day_plan(context.current_day)}")
    lines.append("")

    if context.current_day_transcript:
        lines.append("Messages du jour actuel :")
        for entry in context.current_day_transcript:
            lines.append(f"{ROLE_LABELS[entry.role.value]}: {entry.text}")
        lines.append("")

    if context.current_message is not None:
        lines.append(f"Message actuel de l'utilisateur : {context.current_message}")

    return "\n".join(lines).rstrip()
