"""Live conversation objects shared by concurrent requests for one session.

A turn in flight and a reset arriving mid-turn must see the same object,
otherwise the stale turn could not be discarded. Idle conversations are
released after each request, so the repository stays the source of truth and
snapshots are reloaded whenever a session is not mid-turn.
"""

from __future__ import annotations

import random
from typing import Optional

from .conversation import IdeaConversation
from .functions_client import FunctionsClient
from .session_store import SessionRepository
from .validation_orchestrator import ValidationOrchestrator


class ConversationRegistry:
    def __init__(self, rng: Optional[random.Random] = None):
        self._live: dict[str, IdeaConversation] = {}
        self._rng = rng

    def create(
        self,
        client: FunctionsClient,
        orchestrator: ValidationOrchestrator,
        name: Optional[str] = None,
        persona: Optional[str] = None,
    ) -> IdeaConversation:
        conversation = IdeaConversation(client, orchestrator, name=name, persona=persona, rng=self._rng)
        self._live[conversation.session_id] = conversation
        return conversation

    def get(
        self,
        session_id: str,
        repository: SessionRepository,
        client: FunctionsClient,
        orchestrator: ValidationOrchestrator,
    ) -> Optional[IdeaConversation]:
        conversation = self._live.get(session_id)
        if conversation is not None:
            return conversation

        snapshot = repository.load(session_id)
        if snapshot is None:
            return None
        conversation = IdeaConversation.from_snapshot(snapshot, client, orchestrator, rng=self._rng)
        return self._live.setdefault(conversation.session_id, conversation)

    def discard(self, session_id: str) -> None:
        conversation = self._live.pop(session_id, None)
        if conversation is not None:
            # invalidates any turn still running for this session
            conversation.reset()

    def release(self, conversation: IdeaConversation) -> None:
        """Drop an idle conversation once its state has been saved.

        A conversation with a turn in flight stays live so a reset or delete
        arriving mid-turn still reaches it. Only the registered object is
        dropped; a newer object for the same session is left alone.
        """
        if conversation.in_flight:
            return
        if self._live.get(conversation.session_id) is conversation:
            del self._live[conversation.session_id]

    def __len__(self) -> int:
        return len(self._live)
