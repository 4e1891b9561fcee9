"""Conversation snapshot persistence.

Snapshots are caches of a conversation, not its source of truth: the
``wrinkle_points`` stored with a snapshot is informational only and is
recomputed from the message log whenever a conversation is rebuilt.
"""

from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..constants import DEFAULT_RESPONSE_MODE, DEFAULT_SESSION_NAME
from ..models.chat_session import ChatSession
from ..schemas.chat_schema import Message, ResponseMode

logger = logging.getLogger(__name__)


class ConversationSnapshot(BaseModel):
    session_id: str
    name: str = DEFAULT_SESSION_NAME
    persona: Optional[str] = None
    messages: list[Message] = Field(default_factory=list)
    current_idea: str = ""
    has_valid_idea: bool = False
    off_topic_count: int = 0
    persistence_level: int = 0
    response_mode: ResponseMode = DEFAULT_RESPONSE_MODE
    stopped: bool = False
    wrinkle_points: float = 0.0


class SessionRepository(ABC):
    """load / save / clear of named snapshots."""

    @abstractmethod
    def load(self, session_id: str) -> Optional[ConversationSnapshot]:
        ...

    @abstractmethod
    def save(self, snapshot: ConversationSnapshot) -> None:
        ...

    @abstractmethod
    def clear(self, session_id: str) -> bool:
        """Remove a snapshot. Returns False if it did not exist."""
        ...


class InMemorySessionRepository(SessionRepository):
    def __init__(self):
        self._snapshots: dict[str, ConversationSnapshot] = {}

    def load(self, session_id: str) -> Optional[ConversationSnapshot]:
        snapshot = self._snapshots.get(session_id)
        return snapshot.model_copy(deep=True) if snapshot else None

    def save(self, snapshot: ConversationSnapshot) -> None:
        self._snapshots[snapshot.session_id] = snapshot.model_copy(deep=True)

    def clear(self, session_id: str) -> bool:
        return self._snapshots.pop(session_id, None) is not None


def _parse_uuid(session_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(session_id))
    except (ValueError, AttributeError):
        return None


class SqlSessionRepository(SessionRepository):
    """Stores each snapshot as one row of the ``chat_sessions`` table."""

    def __init__(self, db: Session):
        self.db = db

    def _row(self, session_id: str) -> Optional[ChatSession]:
        sid = _parse_uuid(session_id)
        if sid is None:
            return None
        return self.db.query(ChatSession).filter(ChatSession.id == sid).first()

    def load(self, session_id: str) -> Optional[ConversationSnapshot]:
        row = self._row(session_id)
        if row is None:
            return None
        payload = json.loads(row.state_json or "{}")
        payload.update(
            session_id=str(row.id),
            name=row.name,
            persona=row.persona,
            wrinkle_points=row.wrinkle_points or 0.0,
        )
        return ConversationSnapshot.model_validate(payload)

    def save(self, snapshot: ConversationSnapshot) -> None:
        sid = _parse_uuid(snapshot.session_id)
        if sid is None:
            raise ValueError(f"Invalid session id: {snapshot.session_id!r}")

        state = snapshot.model_dump(
            mode="json",
            exclude={"session_id", "name", "persona", "wrinkle_points"},
        )
        row = self._row(snapshot.session_id)
        if row is None:
            row = ChatSession(id=sid)
            self.db.add(row)

        row.name = snapshot.name
        row.persona = snapshot.persona
        row.wrinkle_points = snapshot.wrinkle_points
        row.state_json = json.dumps(state)
        self.db.commit()

    def clear(self, session_id: str) -> bool:
        row = self._row(session_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        logger.info("Deleted chat session %s", session_id)
        return True
