"""Idea conversation state machine.

Stages:
  GATING         session still carries the default name
  AWAITING_IDEA  named, no validated idea yet
  REFINING       idea accepted; every chat call is grounded in it
  STOPPED        too many consecutive off-topic turns

Turn flow:
  1. Ignore empty text and turns submitted while another is in flight
  2. Trickery -> salty pushback (-5), persistence escalates
  3. No idea yet -> validation orchestrator (gate message on rejection)
  4. Idea set -> topic relevance check, off-topic redirect / stop
  5. idea-chat (typing placeholder) -> wrinkle evaluation -> suggestions

Remote failures are converted to fallbacks at the call site. The only failure
that reaches the caller is a failed chat call, reported as a connection error
with the user's text returned for retry.
"""

from __future__ import annotations

import logging
import random
import re
import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from ..constants import (
    ATTEMPT_TEXT,
    CONNECTION_ERROR,
    DEFAULT_RESPONSE_MODE,
    DEFAULT_SESSION_NAME,
    EMPTY_RESPONSE_FALLBACK,
    ESCALATED_TRICKERY_SUGGESTIONS,
    EVALUATION_HISTORY_TURNS,
    FALLBACK_CHAT_SUGGESTIONS,
    NAME_GATE_SUGGESTIONS,
    NAME_GATE_TEXT,
    OFF_TOPIC_LIMIT,
    OFF_TOPIC_REDIRECT_TEXT,
    OFF_TOPIC_STOP_TEXT,
    PMF_ANALYSIS_TEXT,
    SECOND_STRIKE_TEXT,
    SUMMARY_MODE_MIN_CHARS,
    TRICKERY_EXPLANATION,
    TRICKERY_POINTS,
    TRICKERY_SUGGESTIONS,
)
from ..schemas.chat_schema import Message, ResponseMode, TrickeryCheck, TurnStatus
from ..schemas.remote_schema import (
    HistoryEntry,
    IdeaChatRequest,
    SaltyEnhanceRequest,
    SuggestionRequest,
    WrinkleEvaluationRequest,
)
from ..timing import async_timer
from .functions_client import FunctionsClient, RemoteFunctionError, extract_json_object
from .idea_heuristics import detect_trickery
from .prompts import PromptKind, build_prompt
from .scoring import compute_wrinkle_points, fallback_point_change
from .session_store import ConversationSnapshot
from .suggestions import explain_suggestion_batch, fallback_suggestions, normalize_suggestions
from .validation_orchestrator import ValidationOrchestrator

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_KEY_POINT_RE = re.compile(r"(?:key|important|critical|main|primary)[^.!?]*[.!?]", re.IGNORECASE)


class ConversationStage(str, Enum):
    GATING = "gating"
    AWAITING_IDEA = "awaiting_idea"
    REFINING = "refining"
    STOPPED = "stopped"


class TurnOutcome(BaseModel):
    status: TurnStatus
    error: Optional[str] = None
    retry_text: Optional[str] = None


def is_default_session_name(name: Optional[str]) -> bool:
    return not name or not name.strip() or name.strip() == DEFAULT_SESSION_NAME


def summarize_locally(content: str) -> str:
    """First two sentences plus the first "key/important/..." sentence, if any."""
    sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(content) if s.strip()]
    if len(sentences) <= 2:
        return content
    first_two = ". ".join(sentences[:2])
    key_points = _KEY_POINT_RE.findall(content)
    if key_points:
        return f"{first_two}. Key takeaway: {key_points[0]}"
    return f"{first_two}."


def _to_history(messages: list[Message]) -> list[HistoryEntry]:
    return [
        HistoryEntry(role="user" if m.role == "user" else "assistant", content=m.content)
        for m in messages
        if not m.is_typing
    ]


class IdeaConversation:
    """One brainstorming session. The message log is the source of truth."""

    def __init__(
        self,
        client: FunctionsClient,
        orchestrator: Optional[ValidationOrchestrator] = None,
        *,
        session_id: Optional[str] = None,
        name: Optional[str] = None,
        persona: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        self.client = client
        self.orchestrator = orchestrator or ValidationOrchestrator.for_client(client, rng=rng)
        self.rng = rng or random.Random()

        self.session_id = session_id or str(uuid.uuid4())
        self.session_name = (name or "").strip() or DEFAULT_SESSION_NAME
        self.persona = persona

        self.messages: list[Message] = []
        self.current_idea = ""
        self.has_valid_idea = False
        self.off_topic_count = 0
        self.persistence_level = 0
        self.response_mode: ResponseMode = DEFAULT_RESPONSE_MODE
        self.stopped = False

        self._turn_seq = 0
        self._active_turn: Optional[int] = None

    # ── Derived state ───────────────────────────────────────────────────

    @property
    def stage(self) -> ConversationStage:
        if self.stopped:
            return ConversationStage.STOPPED
        if is_default_session_name(self.session_name):
            return ConversationStage.GATING
        if self.has_valid_idea:
            return ConversationStage.REFINING
        return ConversationStage.AWAITING_IDEA

    @property
    def wrinkle_points(self) -> float:
        return compute_wrinkle_points(self.messages)

    @property
    def in_flight(self) -> bool:
        return self._active_turn is not None

    # ── Session controls ────────────────────────────────────────────────

    def rename(self, name: str) -> None:
        """Naming a gated session opens it for ideas."""
        self.session_name = (name or "").strip() or DEFAULT_SESSION_NAME

    def set_response_mode(self, mode: ResponseMode) -> None:
        self.response_mode = mode

    def reset(self) -> None:
        """Clear the log and idea. Results of an in-flight turn are discarded."""
        self.messages = []
        self.current_idea = ""
        self.has_valid_idea = False
        self.off_topic_count = 0
        self.persistence_level = 0
        self.stopped = False
        self._active_turn = None
        print(f"🔄 [CONVERSATION] Session {self.session_id} reset")

    # ── Log helpers ─────────────────────────────────────────────────────

    def _append(self, message: Message) -> Message:
        self.messages = [*self.messages, message]
        return message

    def _remove(self, *message_ids: str) -> None:
        drop = set(message_ids)
        self.messages = [m for m in self.messages if m.id not in drop]

    def _is_current(self, turn_id: int) -> bool:
        return self._active_turn == turn_id

    # ── Turn entry point ────────────────────────────────────────────────

    async def submit(self, text: str) -> TurnOutcome:
        text = (text or "").strip()
        if not text or self.in_flight:
            return TurnOutcome(status="ignored")

        stage = self.stage
        if stage is ConversationStage.GATING:
            self._append_name_gate()
            return TurnOutcome(status="name_required")
        if stage is ConversationStage.STOPPED:
            return TurnOutcome(status="stopped")

        self._turn_seq += 1
        turn_id = self._turn_seq
        self._active_turn = turn_id
        try:
            return await self._run_turn(turn_id, text)
        finally:
            if self._is_current(turn_id):
                self._active_turn = None

    def _append_name_gate(self) -> None:
        if any(m.role == "bot" and m.content == NAME_GATE_TEXT for m in self.messages):
            return
        self._append(Message(role="bot", content=NAME_GATE_TEXT, suggestions=list(NAME_GATE_SUGGESTIONS)))

    async def _run_turn(self, turn_id: int, text: str) -> TurnOutcome:
        history = _to_history(self.messages)
        user_message = self._append(Message(role="user", content=text))

        trickery = detect_trickery(text)
        if trickery.is_tricky:
            print(f"🎭 [CONVERSATION] Trickery detected: {trickery.kind}")
            return await self._handle_trickery(turn_id, text, trickery)

        self.persistence_level = 0

        if not self.has_valid_idea:
            result = await self.orchestrator.validate(text, has_existing_valid_idea=False)
            if not self._is_current(turn_id):
                return TurnOutcome(status="ignored")
            if not result.valid:
                if result.gate_message is not None:
                    self._append(result.gate_message)
                return TurnOutcome(status="rejected")
            self.has_valid_idea = True
            self.current_idea = result.preview or text
            self.off_topic_count = 0
            print(f"💡 [CONVERSATION] Idea accepted: {self.current_idea!r}")
        else:
            on_topic = await self._is_on_topic(text)
            if not self._is_current(turn_id):
                return TurnOutcome(status="ignored")
            if not on_topic:
                return self._handle_off_topic()
            self.off_topic_count = 0

        return await self._answer(turn_id, text, history, user_message)

    # ── Trickery ────────────────────────────────────────────────────────

    async def _handle_trickery(self, turn_id: int, text: str, trickery: TrickeryCheck) -> TurnOutcome:
        self.persistence_level += 1
        level = self.persistence_level
        try:
            enhanced = await self.client.enhance_salty_response(
                SaltyEnhanceRequest(
                    base_response=trickery.response,
                    user_message=text,
                    persistence_level=level,
                    wrinkle_points=self.wrinkle_points,
                )
            )
            content = enhanced.enhanced_response or trickery.response
            suggestions = enhanced.suggestions or list(TRICKERY_SUGGESTIONS)
        except RemoteFunctionError as exc:
            logger.warning("[CONVERSATION] Salty enhancer failed, escalating locally: %s", exc)
            content, suggestions = self._escalate(trickery.response, level)

        if not self._is_current(turn_id):
            return TurnOutcome(status="ignored")

        self._append(
            Message(
                role="bot",
                content=content,
                suggestions=suggestions,
                points_earned=TRICKERY_POINTS,
                points_explanation=TRICKERY_EXPLANATION,
            )
        )
        return TurnOutcome(status="trickery")

    @staticmethod
    def _escalate(base: str, level: int) -> tuple[str, list[str]]:
        if level >= 3:
            return base + ATTEMPT_TEXT.format(level=level), list(ESCALATED_TRICKERY_SUGGESTIONS)
        if level >= 2:
            return base + SECOND_STRIKE_TEXT, list(TRICKERY_SUGGESTIONS)
        return base, list(TRICKERY_SUGGESTIONS)

    # ── Off-topic ───────────────────────────────────────────────────────

    async def _is_on_topic(self, text: str) -> bool:
        """Remote relevance check. Anything short of a clear "off topic" counts as on-topic."""
        prompt = build_prompt(PromptKind.TOPIC_RELEVANCE, idea=self.current_idea, message=text)
        try:
            reply = await self.client.idea_chat(IdeaChatRequest(message=prompt, conversation_history=[]))
        except RemoteFunctionError as exc:
            logger.warning("[CONVERSATION] Relevance check failed, treating as on-topic: %s", exc)
            return True

        parsed = extract_json_object(reply.response)
        if parsed is None:
            return True
        on_topic = parsed.get("onTopic", parsed.get("on_topic"))
        if not isinstance(on_topic, bool):
            return True
        return on_topic

    def _handle_off_topic(self) -> TurnOutcome:
        self.off_topic_count += 1
        print(f"🧭 [CONVERSATION] Off-topic turn {self.off_topic_count}/{OFF_TOPIC_LIMIT}")

        if self.off_topic_count >= OFF_TOPIC_LIMIT:
            self.stopped = True
            self._append(Message(role="bot", content=OFF_TOPIC_STOP_TEXT, points_earned=0.0))
            return TurnOutcome(status="stopped")

        self._append(
            Message(
                role="bot",
                content=OFF_TOPIC_REDIRECT_TEXT.format(
                    idea=self.current_idea,
                    count=self.off_topic_count,
                    limit=OFF_TOPIC_LIMIT,
                ),
                suggestions=list(FALLBACK_CHAT_SUGGESTIONS),
                points_earned=0.0,
                points_explanation="Off-topic turns earn no wrinkles.",
            )
        )
        return TurnOutcome(status="off_topic")

    # ── Refinement answer ───────────────────────────────────────────────

    async def _answer(
        self,
        turn_id: int,
        text: str,
        history: list[HistoryEntry],
        user_message: Message,
    ) -> TurnOutcome:
        typing = self._append(Message(role="bot", content="", is_typing=True))
        grounded = build_prompt(PromptKind.REFINEMENT_CONTEXT, idea=self.current_idea, message=text)

        try:
            async with async_timer("conversation", "idea_chat"):
                reply = await self.client.idea_chat(
                    IdeaChatRequest(
                        message=grounded,
                        conversation_history=history,
                        response_mode=self.response_mode,
                        refinement_mode=True,
                        idea=self.current_idea,
                    )
                )
        except RemoteFunctionError as exc:
            logger.error("[CONVERSATION] Chat call failed: %s", exc)
            if not self._is_current(turn_id):
                return TurnOutcome(status="ignored")
            self._remove(typing.id, user_message.id)
            return TurnOutcome(status="error", error=CONNECTION_ERROR, retry_text=text)

        if not self._is_current(turn_id):
            return TurnOutcome(status="ignored")
        self._remove(typing.id)

        content = reply.response.strip() or EMPTY_RESPONSE_FALLBACK
        point_change, points_explanation = await self._evaluate_points(text, content, history)

        if reply.pmf_analysis:
            bot = Message(
                role="bot",
                content=PMF_ANALYSIS_TEXT,
                pmf_analysis=reply.pmf_analysis,
                points_earned=point_change,
                points_explanation=points_explanation,
            )
        else:
            if self.response_mode == "summary" and len(content) > SUMMARY_MODE_MIN_CHARS:
                content = await self._summarize(content)
            suggestions = await self._suggestions_for(content, text, reply.suggestions)
            texts = [s.text for s in suggestions]
            bot = Message(
                role="bot",
                content=content,
                suggestions=suggestions,
                suggestion_explanation=explain_suggestion_batch(texts, content) if texts else None,
                points_earned=point_change,
                points_explanation=points_explanation,
            )

        if not self._is_current(turn_id):
            return TurnOutcome(status="ignored")
        self._append(bot)
        return TurnOutcome(status="answered")

    async def _evaluate_points(
        self, text: str, content: str, history: list[HistoryEntry]
    ) -> tuple[float, str]:
        try:
            evaluation = await self.client.evaluate_wrinkle_points(
                WrinkleEvaluationRequest(
                    user_message=text,
                    bot_response=content,
                    conversation_history=history[-EVALUATION_HISTORY_TURNS:],
                    current_wrinkle_points=self.wrinkle_points,
                    current_idea=self.current_idea or None,
                )
            )
        except RemoteFunctionError as exc:
            logger.warning("[CONVERSATION] Wrinkle evaluation failed, estimating locally: %s", exc)
            return fallback_point_change(content, self.rng)

        if evaluation.point_change is None:
            return 0.0, evaluation.explanation
        return float(evaluation.point_change), evaluation.explanation

    async def _summarize(self, content: str) -> str:
        prompt = build_prompt(PromptKind.RESPONSE_SUMMARY, response=content)
        try:
            reply = await self.client.idea_chat(
                IdeaChatRequest(message=prompt, conversation_history=[], response_mode="summary")
            )
        except RemoteFunctionError as exc:
            logger.warning("[CONVERSATION] Summary call failed, trimming locally: %s", exc)
            return summarize_locally(content)
        return reply.response.strip() or summarize_locally(content)

    def _previous_answers(self) -> dict[str, str]:
        answers: dict[str, str] = {}
        for idx, message in enumerate(self.messages):
            if message.role == "user" and idx > 0 and self.messages[idx - 1].role == "bot":
                answers[f"answer_{idx}"] = message.content
        return answers

    async def _suggestions_for(self, content: str, text: str, chat_suggestions: list) -> list:
        try:
            generated = await self.client.generate_suggestions(
                SuggestionRequest(
                    question=content,
                    idea_description=self.current_idea or text,
                    previous_answers=self._previous_answers(),
                    response_mode=self.response_mode,
                    include_explanations=True,
                )
            )
        except RemoteFunctionError as exc:
            logger.warning("[CONVERSATION] Suggestion generator failed: %s", exc)
            return fallback_suggestions(content, self.response_mode)

        raw = generated.suggestions or chat_suggestions
        return normalize_suggestions(raw, self.rng)

    # ── Conversation summary ────────────────────────────────────────────

    async def conversation_summary(self) -> str:
        prompt = build_prompt(PromptKind.CONVERSATION_SUMMARY, idea=self.current_idea or "not chosen yet")
        try:
            reply = await self.client.idea_chat(
                IdeaChatRequest(
                    message=prompt,
                    conversation_history=_to_history(self.messages),
                    response_mode="summary",
                )
            )
            if reply.response.strip():
                return reply.response.strip()
        except RemoteFunctionError as exc:
            logger.warning("[CONVERSATION] Conversation summary failed: %s", exc)

        turns = sum(1 for m in self.messages if m.role == "user")
        idea = self.current_idea or "no validated idea yet"
        return f"{turns} turns so far on {idea}. Wrinkle points: {self.wrinkle_points:g}."

    # ── Snapshots ───────────────────────────────────────────────────────

    def to_snapshot(self) -> ConversationSnapshot:
        return ConversationSnapshot(
            session_id=self.session_id,
            name=self.session_name,
            persona=self.persona,
            messages=[m for m in self.messages if not m.is_typing],
            current_idea=self.current_idea,
            has_valid_idea=self.has_valid_idea,
            off_topic_count=self.off_topic_count,
            persistence_level=self.persistence_level,
            response_mode=self.response_mode,
            stopped=self.stopped,
            wrinkle_points=self.wrinkle_points,
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: ConversationSnapshot,
        client: FunctionsClient,
        orchestrator: Optional[ValidationOrchestrator] = None,
        rng: Optional[random.Random] = None,
    ) -> "IdeaConversation":
        conversation = cls(
            client,
            orchestrator,
            session_id=snapshot.session_id,
            name=snapshot.name,
            persona=snapshot.persona,
            rng=rng,
        )
        conversation.messages = [m for m in snapshot.messages if not m.is_typing]
        conversation.current_idea = snapshot.current_idea
        conversation.has_valid_idea = snapshot.has_valid_idea
        conversation.off_topic_count = snapshot.off_topic_count
        conversation.persistence_level = snapshot.persistence_level
        conversation.response_mode = snapshot.response_mode
        conversation.stopped = snapshot.stopped
        return conversation
