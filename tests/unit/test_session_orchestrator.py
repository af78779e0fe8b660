"""Unit tests for the per-message pipeline"""
import pytest
from datetime import datetime, timezone
from unittest.mock import patch

from src.exceptions import StorageWriteError, ValidationError
from src.models.journal import Role
from src.services.container import build_container


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


# ============================================
# Validation
# ============================================

@pytest.mark.asyncio
@pytest.mark.parametrize("day", [0, 16, -1, "3", 2.0, True, None])
async def test_invalid_day_rejected(orchestrator, history_store, test_user_id, day):
    """Test out-of-range or non-integer days fail before any side effect"""
    with pytest.raises(ValidationError) as exc_info:
        await orchestrator.handle_incoming_message(test_user_id, day, "Bismillah")
    assert exc_info.value.field == "day"
    assert await history_store.get_all_days(test_user_id) == {}


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", ["", "   ", None])
async def test_invalid_user_rejected(orchestrator, user_id):
    """Test empty user ids are rejected"""
    with pytest.raises(ValidationError):
        await orchestrator.handle_incoming_message(user_id, 1, "Salut")


# ============================================
# Pipeline
# ============================================

@pytest.mark.asyncio
async def test_first_message(orchestrator, meta_store, test_user_id, monday_noon):
    """Test a first message: name latched, points, streak, badge, context"""
    outcome = await orchestrator.handle_incoming_message(test_user_id, 1, "Je m'appelle Yasmine", monday_noon)

    assert outcome.points_awarded == 0
    assert outcome.streak == 1
    assert outcome.new_badges == ["new_muslim"]
    assert outcome.level.number == 1
    assert not outcome.leveled_up

    context = outcome.context
    assert context.profile.display_name == "Yasmine"
    assert context.current_message == "Je m'appelle Yasmine"
    assert context.current_day_transcript == []
    assert not context.is_first_session

    meta = await meta_store.get_meta(test_user_id)
    assert meta.name == "Yasmine"


@pytest.mark.asyncio
async def test_friday_scenario(orchestrator, ledger, test_user_id, friday_early):
    """Test Friday 07:00 "Astaghfirullah" awards 53 points and counts an early session"""
    outcome = await orchestrator.handle_incoming_message(test_user_id, 3, "Astaghfirullah", friday_early)

    assert outcome.points_awarded == 53
    assert outcome.total_points == 53
    assert outcome.new_badges == ["new_muslim", "first_dua"]

    progress = await ledger.get_progress(test_user_id)
    assert progress.early_morning_session_count == 1


@pytest.mark.asyncio
async def test_devotional_word_not_taken_as_name(orchestrator, meta_store, test_user_id, monday_noon):
    """Test a one-word devotional message does not set the display name"""
    await orchestrator.handle_incoming_message(test_user_id, 1, "Bismillah", monday_noon)
    meta = await meta_store.get_meta(test_user_id)
    assert meta.name is None


@pytest.mark.asyncio
async def test_name_resembling_a_phrase_is_stored(orchestrator, meta_store, test_user_id, monday_noon):
    """Test "Amine" as a whole message is taken as the display name"""
    await orchestrator.handle_incoming_message(test_user_id, 1, "Amine", monday_noon)
    assert (await meta_store.get_meta(test_user_id)).name == "Amine"


@pytest.mark.asyncio
async def test_name_latches_on_first_value(orchestrator, meta_store, test_user_id, monday_noon):
    """Test a later self-introduction does not overwrite the name"""
    await orchestrator.handle_incoming_message(test_user_id, 1, "Moi c'est Yasmine", monday_noon)
    await orchestrator.handle_incoming_message(test_user_id, 1, "Je m'appelle Karim", monday_noon)
    assert (await meta_store.get_meta(test_user_id)).name == "Yasmine"


@pytest.mark.asyncio
async def test_one_streak_increment_per_day(orchestrator, test_user_id):
    """Test several messages on one day count one session"""
    first = await orchestrator.handle_incoming_message(test_user_id, 1, "Salut", utc(2024, 3, 4, 9, 0))
    second = await orchestrator.handle_incoming_message(test_user_id, 1, "Encore", utc(2024, 3, 4, 18, 0))
    third = await orchestrator.handle_incoming_message(test_user_id, 2, "Jour 2", utc(2024, 3, 5, 9, 0))

    assert (first.streak, second.streak, third.streak) == (1, 1, 2)
    assert second.new_badges == []


@pytest.mark.asyncio
async def test_transcript_includes_assistant_reply(orchestrator, test_user_id):
    """Test a recorded reply appears in the next message's transcript"""
    await orchestrator.handle_incoming_message(test_user_id, 1, "Salut", utc(2024, 3, 4, 9, 0))
    stored = await orchestrator.record_assistant_reply(test_user_id, 1, "Bienvenue !", utc(2024, 3, 4, 9, 1))
    outcome = await orchestrator.handle_incoming_message(test_user_id, 1, "Merci", utc(2024, 3, 4, 9, 2))

    assert stored
    assert [(e.role, e.text) for e in outcome.context.current_day_transcript] == [
        (Role.USER, "Salut"),
        (Role.ASSISTANT, "Bienvenue !"),
    ]
    assert outcome.context.current_message == "Merci"


@pytest.mark.asyncio
async def test_empty_reply_not_stored(orchestrator, history_store, test_user_id, monday_noon):
    """Test an empty generation leaves the journal unchanged"""
    await orchestrator.handle_incoming_message(test_user_id, 1, "Salut", monday_noon)
    assert not await orchestrator.record_assistant_reply(test_user_id, 1, "  ", monday_noon)
    assert len(await history_store.get_entries_for_day(test_user_id, 1)) == 1


@pytest.mark.asyncio
async def test_prior_day_digest(orchestrator, test_user_id):
    """Test yesterday's exchange is digested into today's context"""
    await orchestrator.handle_incoming_message(test_user_id, 1, "Mon objectif : dormir mieux", utc(2024, 3, 4, 9, 0))
    await orchestrator.record_assistant_reply(test_user_id, 1, "Une micro-action : coucher 23h", utc(2024, 3, 4, 9, 1))
    await orchestrator.handle_incoming_message(test_user_id, 1, "Ok je tente", utc(2024, 3, 4, 9, 2))

    outcome = await orchestrator.handle_incoming_message(test_user_id, 2, "Bonjour", utc(2024, 3, 5, 9, 0))
    digest = outcome.context.prior_days[0]
    assert digest.day == 1
    assert digest.objective == "Mon objectif : dormir mieux"
    assert digest.proposed_action == "Une micro-action : coucher 23h"
    assert digest.commitment == "Ok je tente"


@pytest.mark.asyncio
async def test_level_up_reported(orchestrator, ledger, test_user_id, monday_noon):
    """Test crossing a level threshold sets leveled_up"""
    def near_level_two(progress):
        return progress.model_copy(update={"total_points": 490})

    await ledger.store.update(test_user_id, near_level_two)
    outcome = await orchestrator.handle_incoming_message(test_user_id, 1, "Bismillah", monday_noon)
    assert outcome.total_points == 505
    assert outcome.level.number == 2
    assert outcome.leveled_up


@pytest.mark.asyncio
async def test_history_write_failure_keeps_points(orchestrator, ledger, history_store, test_user_id, monday_noon):
    """Test a journal write failure propagates after points were applied"""
    with patch.object(history_store.documents, "save_all", side_effect=StorageWriteError("disk full", store="journal")):
        with pytest.raises(StorageWriteError):
            await orchestrator.handle_incoming_message(test_user_id, 1, "Alhamdulillah", monday_noon)

    progress = await ledger.get_progress(test_user_id)
    assert progress.total_points == 20
    assert progress.current_streak == 1


# ============================================
# Prompt & Snapshot
# ============================================

@pytest.mark.asyncio
async def test_render_prompt(orchestrator, test_user_id, monday_noon):
    """Test the prompt pair for the language-model call"""
    outcome = await orchestrator.handle_incoming_message(test_user_id, 1, "Salut", monday_noon)
    prompt = await orchestrator.render_prompt(test_user_id, outcome.context)
    assert "Prénom: Non défini" in prompt['system']
    assert "Message actuel de l'utilisateur : Salut" in prompt['user']


@pytest.mark.asyncio
async def test_gamification_snapshot(orchestrator, test_user_id, monday_noon):
    """Test the snapshot after a message"""
    await orchestrator.handle_incoming_message(test_user_id, 1, "Bismillah", monday_noon)
    snapshot = await orchestrator.gamification_snapshot(test_user_id)
    assert snapshot['total_points'] == 15
    assert snapshot['current_streak'] == 1


@pytest.mark.asyncio
async def test_container_wires_file_stores(temp_data_dir, test_user_id, monday_noon):
    """Test the container builds a working orchestrator over JSON files"""
    container = build_container(temp_data_dir, program_length=15)
    outcome = await container.orchestrator.handle_incoming_message(test_user_id, 1, "Bismillah", monday_noon)

    assert outcome.points_awarded == 15
    assert (temp_data_dir / "gamification.json").exists()
    assert (temp_data_dir / "journal.json").exists()
    assert container.orchestrator is container.orchestrator
