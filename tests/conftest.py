"""Global test fixtures and utilities for coachbot tests"""
import pytest
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from src.db.history_store import HistoryStore
from src.db.json_store import InMemoryDocumentStore, JsonDocumentStore
from src.db.meta_store import MetaStore
from src.db.progress_store import ProgressStore
from src.memory.context_summarizer import ContextSummarizer
from src.services.progression_ledger import ProgressionLedger
from src.services.session_orchestrator import SessionOrchestrator


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


# ============================================================================
# Time Fixtures
# ============================================================================
# 2024-03-04 is a Monday, 2024-03-01 a Friday. Tests run with APP_TIMEZONE=UTC.

@pytest.fixture
def monday_noon():
    """Weekday midday: no multiplier window"""
    return datetime(2024, 3, 4, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def friday_early():
    """Friday 07:00: Friday and early-morning windows both match"""
    return datetime(2024, 3, 1, 7, 0, tzinfo=timezone.utc)


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def temp_data_dir():
    """Temporary directory for JSON store files"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def progress_store():
    """In-memory progress store"""
    return ProgressStore(InMemoryDocumentStore("progress"))


@pytest.fixture
def history_store():
    """In-memory journal store (15-day program)"""
    return HistoryStore(InMemoryDocumentStore("journal"), program_length=15)


@pytest.fixture
def meta_store():
    """In-memory meta store"""
    return MetaStore(InMemoryDocumentStore("meta"))


@pytest.fixture
def file_stores(temp_data_dir):
    """File-backed stores in a temporary directory"""
    return (
        ProgressStore(JsonDocumentStore(temp_data_dir / "gamification.json")),
        HistoryStore(JsonDocumentStore(temp_data_dir / "journal.json"), program_length=15),
        MetaStore(JsonDocumentStore(temp_data_dir / "meta.json")),
    )


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def ledger(progress_store):
    """ProgressionLedger with multipliers enabled"""
    return ProgressionLedger(progress_store, multipliers_enabled=True)


@pytest.fixture
def summarizer(history_store, meta_store):
    """ContextSummarizer over in-memory stores"""
    return ContextSummarizer(history_store, meta_store)


@pytest.fixture
def orchestrator(ledger, history_store, meta_store, summarizer):
    """SessionOrchestrator wired to in-memory stores"""
    return SessionOrchestrator(ledger, history_store, meta_store, summarizer, program_length=15)
