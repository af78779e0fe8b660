"""
Service Container - Dependency Injection Container

Owns the three document stores and lazily builds the services on top of them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

from src.config import DATA_PATH, JOURNAL_FILE, META_FILE, PROGRAM_LENGTH_DAYS, PROGRESS_FILE
from src.db.history_store import HistoryStore
from src.db.json_store import JsonDocumentStore
from src.db.meta_store import MetaStore
from src.db.progress_store import ProgressStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Stores are injected; services are lazy-loaded on first access via properties.
    """

    # Infrastructure dependencies (injected)
    progress_store: ProgressStore
    history_store: HistoryStore
    meta_store: MetaStore
    program_length: int = PROGRAM_LENGTH_DAYS

    # Services (lazy-loaded via properties)
    _ledger: Optional[object] = field(default=None, init=False, repr=False)
    _summarizer: Optional[object] = field(default=None, init=False, repr=False)
    _orchestrator: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def ledger(self):
        """Get ProgressionLedger instance (lazy-loaded)"""
        if self._ledger is None:
            from src.services.progression_ledger import ProgressionLedger
            self._ledger = ProgressionLedger(self.progress_store, meta_store=self.meta_store)
            logger.debug("ProgressionLedger instantiated")
        return self._ledger

    @property
    def summarizer(self):
        """Get ContextSummarizer instance (lazy-loaded)"""
        if self._summarizer is None:
            from src.memory.context_summarizer import ContextSummarizer
            self._summarizer = ContextSummarizer(self.history_store, self.meta_store)
            logger.debug("ContextSummarizer instantiated")
        return self._summarizer

    @property
    def orchestrator(self):
        """Get SessionOrchestrator instance (lazy-loaded)"""
        if self._orchestrator is None:
            from src.services.session_orchestrator import SessionOrchestrator
            self._orchestrator = SessionOrchestrator(
                self.ledger,
                self.history_store,
                self.meta_store,
                self.summarizer,
                program_length=self.program_length
            )
            logger.debug("SessionOrchestrator instantiated")
        return self._orchestrator


# Global container instance (initialized in main.py)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() in main.py before using services."
        )
    return _container


def build_container(data_path: Path = DATA_PATH, program_length: int = PROGRAM_LENGTH_DAYS) -> ServiceContainer:
    """Create a container backed by JSON files under data_path"""
    data_path = Path(data_path)
    return ServiceContainer(
        progress_store=ProgressStore(JsonDocumentStore(data_path / PROGRESS_FILE)),
        history_store=HistoryStore(JsonDocumentStore(data_path / JOURNAL_FILE), program_length),
        meta_store=MetaStore(JsonDocumentStore(data_path / META_FILE)),
        program_length=program_length,
    )


def init_container(data_path: Path = DATA_PATH, program_length: int = PROGRAM_LENGTH_DAYS) -> ServiceContainer:
    """
    Initialize the global service container.

    Should be called once in main.py after configuration is validated.

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = build_container(data_path, program_length)

    logger.info(f"Service container initialized (data in {data_path})")
    return _container
