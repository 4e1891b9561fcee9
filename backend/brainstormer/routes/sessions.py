"""Brainstorming session routes.

Endpoints:
  POST   /sessions                         Create a session
  GET    /sessions/{session_id}            Current session view
  PUT    /sessions/{session_id}/name       Rename (opens a gated session)
  PUT    /sessions/{session_id}/response-mode
  POST   /sessions/{session_id}/messages   Run one conversation turn
  POST   /sessions/{session_id}/reset      Clear the log and idea
  DELETE /sessions/{session_id}
  GET    /sessions/{session_id}/summary    Conversation summary
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..schemas.chat_schema import (
    ResponseModeRequest,
    SessionCreateRequest,
    SessionRenameRequest,
    SessionView,
    SummaryResponse,
    TurnRequest,
    TurnResponse,
)
from ..services.conversation import IdeaConversation
from ..services.functions_client import FunctionsClient
from ..services.scoring import summarize_wrinkles
from ..services.session_dependency import (
    get_conversation_registry,
    get_functions_client,
    get_session_repository,
    get_validation_orchestrator,
)
from ..services.session_registry import ConversationRegistry
from ..services.session_store import SessionRepository
from ..services.validation_orchestrator import ValidationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/sessions",
    tags=["Sessions"],
)


def build_session_view(conversation: IdeaConversation) -> SessionView:
    messages = [m for m in conversation.messages if not m.is_typing]
    return SessionView(
        session_id=conversation.session_id,
        name=conversation.session_name,
        persona=conversation.persona,
        stage=conversation.stage.value,
        current_idea=conversation.current_idea,
        has_valid_idea=conversation.has_valid_idea,
        response_mode=conversation.response_mode,
        off_topic_count=conversation.off_topic_count,
        persistence_level=conversation.persistence_level,
        wrinkles=summarize_wrinkles(messages, conversation.has_valid_idea),
        messages=messages,
    )


def _load_or_404(
    session_id: str,
    registry: ConversationRegistry,
    repository: SessionRepository,
    client: FunctionsClient,
    orchestrator: ValidationOrchestrator,
) -> IdeaConversation:
    conversation = registry.get(session_id, repository, client, orchestrator)
    if conversation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return conversation


class _SessionContext:
    """Bundles the per-request dependencies every session route needs."""

    def __init__(
        self,
        registry: ConversationRegistry,
        repository: SessionRepository,
        client: FunctionsClient,
        orchestrator: ValidationOrchestrator,
    ):
        self.registry = registry
        self.repository = repository
        self.client = client
        self.orchestrator = orchestrator
        self._touched: List[IdeaConversation] = []

    def create(self, name: Optional[str], persona: Optional[str]) -> IdeaConversation:
        conversation = self.registry.create(self.client, self.orchestrator, name=name, persona=persona)
        self._touched.append(conversation)
        return conversation

    def load(self, session_id: str) -> IdeaConversation:
        conversation = _load_or_404(session_id, self.registry, self.repository, self.client, self.orchestrator)
        self._touched.append(conversation)
        return conversation

    def save(self, conversation: IdeaConversation) -> None:
        self.repository.save(conversation.to_snapshot())

    def release(self) -> None:
        for conversation in self._touched:
            self.registry.release(conversation)
        self._touched.clear()


def get_session_context(
    registry: ConversationRegistry = Depends(get_conversation_registry),
    repository: SessionRepository = Depends(get_session_repository),
    client: FunctionsClient = Depends(get_functions_client),
    orchestrator: ValidationOrchestrator = Depends(get_validation_orchestrator),
):
    ctx = _SessionContext(registry, repository, client, orchestrator)
    try:
        yield ctx
    finally:
        # idle sessions live in the repository, not in process memory
        ctx.release()


# ── Routes ────────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=SessionView,
    status_code=status.HTTP_201_CREATED,
    summary="Create a Session",
)
def create_session(
    body: Optional[SessionCreateRequest] = None,
    ctx: _SessionContext = Depends(get_session_context),
) -> SessionView:
    body = body or SessionCreateRequest()
    conversation = ctx.create(body.name, body.persona)
    ctx.save(conversation)
    print(f"🆕 [SESSIONS] Created {conversation.session_id} ({conversation.stage.value})")
    return build_session_view(conversation)


@router.get(
    "/{session_id}",
    response_model=SessionView,
    summary="Get a Session",
)
def get_session(session_id: str, ctx: _SessionContext = Depends(get_session_context)) -> SessionView:
    return build_session_view(ctx.load(session_id))


@router.put(
    "/{session_id}/name",
    response_model=SessionView,
    summary="Rename a Session",
)
def rename_session(
    session_id: str,
    body: SessionRenameRequest,
    ctx: _SessionContext = Depends(get_session_context),
) -> SessionView:
    conversation = ctx.load(session_id)
    conversation.rename(body.name)
    ctx.save(conversation)
    return build_session_view(conversation)


@router.put(
    "/{session_id}/response-mode",
    response_model=SessionView,
    summary="Set Response Mode",
)
def set_response_mode(
    session_id: str,
    body: ResponseModeRequest,
    ctx: _SessionContext = Depends(get_session_context),
) -> SessionView:
    conversation = ctx.load(session_id)
    conversation.set_response_mode(body.mode)
    ctx.save(conversation)
    return build_session_view(conversation)


@router.post(
    "/{session_id}/messages",
    response_model=TurnResponse,
    summary="Send a Message",
    response_description="Turn status plus the updated session view",
)
async def send_message(
    session_id: str,
    body: TurnRequest,
    ctx: _SessionContext = Depends(get_session_context),
) -> TurnResponse:
    """Run one conversation turn.

    A turn sent while another turn for the same session is still running is
    ignored. Connection errors leave the log as it was before the turn and
    return the text for retry.
    """
    conversation = ctx.load(session_id)
    outcome = await conversation.submit(body.message)

    if outcome.status != "ignored":
        ctx.save(conversation)

    return TurnResponse(
        status=outcome.status,
        error=outcome.error,
        retry_text=outcome.retry_text,
        session=build_session_view(conversation),
    )


@router.post(
    "/{session_id}/reset",
    response_model=SessionView,
    summary="Reset a Session",
)
def reset_session(session_id: str, ctx: _SessionContext = Depends(get_session_context)) -> SessionView:
    conversation = ctx.load(session_id)
    conversation.reset()
    ctx.save(conversation)
    return build_session_view(conversation)


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a Session",
)
def delete_session(session_id: str, ctx: _SessionContext = Depends(get_session_context)) -> Response:
    ctx.registry.discard(session_id)
    if not ctx.repository.clear(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{session_id}/summary",
    response_model=SummaryResponse,
    summary="Summarize the Conversation",
)
async def get_summary(session_id: str, ctx: _SessionContext = Depends(get_session_context)) -> SummaryResponse:
    conversation = ctx.load(session_id)
    summary = await conversation.conversation_summary()
    return SummaryResponse(session_id=conversation.session_id, summary=summary)
