"""Unit tests for prompt serialization"""
from datetime import datetime, timezone

from src.memory.system_prompt import (
    day_plan,
    load_base_prompt,
    render_conversation_context,
    render_system_prompt,
)
from src.memory.templates import DEFAULT_SYSTEM_PROMPT, FIRST_SESSION_MARKER, UNKNOWN_PLAN
from src.models.journal import JournalEntry, Role
from src.models.message_context import ConversationContext, DayDigest, ProfileHeader


PROFILE = ProfileHeader(display_name="Yasmine", behavioral_style="S", name_known=True, style_known=True)


def test_load_base_prompt_from_file(temp_data_dir):
    """Test the prompt file is used when present"""
    path = temp_data_dir / "prompt.txt"
    path.write_text("Tu es un coach.\n", encoding="utf-8")
    assert load_base_prompt(path) == "Tu es un coach."


def test_load_base_prompt_fallback(temp_data_dir):
    """Test the built-in prompt is used when the file is missing or blank"""
    assert load_base_prompt(temp_data_dir / "missing.txt") == DEFAULT_SYSTEM_PROMPT
    blank = temp_data_dir / "blank.txt"
    blank.write_text("   ", encoding="utf-8")
    assert load_base_prompt(blank) == DEFAULT_SYSTEM_PROMPT


def test_day_plan_lookup():
    """Test known and unknown program days"""
    assert day_plan(1).startswith("Clarification des intentions")
    assert day_plan(99) == UNKNOWN_PLAN


def test_render_system_prompt():
    """Test the user note is appended to the base prompt"""
    prompt = render_system_prompt(PROFILE, base_prompt="BASE")
    assert prompt.startswith("BASE")
    assert "Prénom: Yasmine" in prompt
    assert "DISC: S" in prompt


def test_render_first_session():
    """Test the first-session marker replaces the history section"""
    text = render_conversation_context(ConversationContext(
        profile=PROFILE, current_day=1, current_message="Salut", is_first_session=True
    ))
    assert FIRST_SESSION_MARKER in text
    assert "[SESSION ACTUELLE - JOUR 1]" in text
    assert text.endswith("Message actuel de l'utilisateur : Salut")


def test_render_history_and_transcript():
    """Test digests and current-day transcript sections"""
    context = ConversationContext(
        profile=PROFILE,
        current_day=2,
        prior_days=[DayDigest(day=1, objective="Mon objectif : courir", commitment="Ok")],
        current_day_transcript=[
            JournalEntry(role=Role.USER, text="Bonjour", timestamp=datetime(2024, 3, 5, 9, tzinfo=timezone.utc)),
            JournalEntry(role=Role.ASSISTANT, text="Salut !", timestamp=datetime(2024, 3, 5, 9, 1, tzinfo=timezone.utc)),
        ],
        current_message="On continue",
    )
    text = render_conversation_context(context)

    assert FIRST_SESSION_MARKER not in text
    assert "--- JOUR 1 ---" in text
    assert "Objectifs identifiés: Mon objectif : courir" in text
    assert "Engagement utilisateur: Ok" in text
    assert "Actions proposées" not in text
    assert "Utilisateur: Bonjour\nAssistant: Salut !" in text
    assert text.index("--- JOUR 1 ---") < text.index("[SESSION ACTUELLE - JOUR 2]")
