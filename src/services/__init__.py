"""
Service Layer Package

Business logic between the transport layer (CLI, chat server) and the stores.

Core Services:
- ProgressionLedger: points, multipliers, streaks, levels, badges
- SessionOrchestrator: ordered per-message pipeline and prompt serialization
"""

from src.services.container import ServiceContainer, build_container, get_container, init_container
from src.services.progression_ledger import ProgressionLedger
from src.services.session_orchestrator import SessionOrchestrator

__all__ = [
    "ServiceContainer",
    "build_container",
    "get_container",
    "init_container",
    "ProgressionLedger",
    "SessionOrchestrator",
]
