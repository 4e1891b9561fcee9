"""FastAPI dependencies for the conversation routes.

Tests override these through ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db
from .functions_client import FunctionsClient
from .session_registry import ConversationRegistry
from .session_store import SessionRepository, SqlSessionRepository
from .validation_orchestrator import ValidationOrchestrator
from .validation_policy import policy_from_env

_client: FunctionsClient | None = None
_orchestrator: ValidationOrchestrator | None = None
_orchestrator_key: tuple | None = None
_registry = ConversationRegistry()


def get_functions_client() -> FunctionsClient:
    global _client
    if _client is None:
        _client = FunctionsClient()
    return _client


def get_validation_orchestrator(
    client: FunctionsClient = Depends(get_functions_client),
) -> ValidationOrchestrator:
    """Compiled once per (client, policy mode); rebuilt when VALIDATION_POLICY changes."""
    global _orchestrator, _orchestrator_key
    policy = policy_from_env()
    key = (id(client), policy.mode)
    if _orchestrator is None or _orchestrator_key != key:
        _orchestrator = ValidationOrchestrator.for_client(client, policy=policy)
        _orchestrator_key = key
    return _orchestrator


def get_session_repository(db: Session = Depends(get_db)) -> SessionRepository:
    return SqlSessionRepository(db)


def get_conversation_registry() -> ConversationRegistry:
    return _registry
