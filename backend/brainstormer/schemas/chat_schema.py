from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

Role = Literal["user", "bot"]
ResponseMode = Literal["verbose", "summary"]
ValidationSource = Literal["existing", "combined", "heuristic_fallback"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_message_id() -> str:
    return uuid.uuid4().hex


class SuggestionItem(BaseModel):
    """A follow-up prompt offered under a bot turn, optionally explained."""

    text: str
    explanation: Optional[str] = None


class Message(BaseModel):
    """A single conversation turn. The ordered log of these is authoritative."""

    id: str = Field(default_factory=_new_message_id)
    role: Role
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)
    points_earned: Optional[float] = None
    points_explanation: Optional[str] = None
    suggestions: list[Union[SuggestionItem, str]] = Field(default_factory=list)
    suggestion_explanation: Optional[str] = None
    pmf_analysis: Optional[dict[str, Any]] = None
    is_typing: bool = False


class ValidationVerdict(BaseModel):
    """Structured verdict parsed out of the remote validator's reply."""

    valid: bool
    reason: str = ""
    improvement_hints: list[str] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """Outcome of one orchestrator call. Always produced, never raised."""

    valid: bool
    preview: Optional[str] = None
    gate_message: Optional[Message] = None
    source: ValidationSource = "combined"


class TrickeryCheck(BaseModel):
    is_tricky: bool
    kind: Optional[str] = None
    response: str = ""


# ── API request bodies ──────────────────────────────────────────────────

class SessionCreateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    persona: Optional[str] = Field(default=None, max_length=255)


class SessionRenameRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Session name must not be blank")
        return stripped


class ResponseModeRequest(BaseModel):
    mode: ResponseMode


class TurnRequest(BaseModel):
    message: str = Field(
        ...,
        max_length=5000,
        description="The user's turn. Empty text is ignored.",
    )


class ValidateIdeaRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)
    has_existing_valid_idea: bool = False


# ── API responses ───────────────────────────────────────────────────────

class WrinkleSummary(BaseModel):
    points: float
    tier: int
    label: str
    tooltip: str


class SessionView(BaseModel):
    session_id: str
    name: str
    persona: Optional[str] = None
    stage: str
    current_idea: str = ""
    has_valid_idea: bool = False
    response_mode: ResponseMode = "verbose"
    off_topic_count: int = 0
    persistence_level: int = 0
    wrinkles: WrinkleSummary
    messages: list[Message] = Field(default_factory=list)


TurnStatus = Literal[
    "ignored",
    "name_required",
    "trickery",
    "rejected",
    "off_topic",
    "stopped",
    "answered",
    "error",
]


class TurnResponse(BaseModel):
    status: TurnStatus
    error: Optional[str] = None
    retry_text: Optional[str] = Field(
        default=None,
        description="The unsent user turn, returned on connection errors for retry.",
    )
    session: SessionView


class SummaryResponse(BaseModel):
    session_id: str
    summary: str


class StarterSuggestionsResponse(BaseModel):
    suggestions: list[str]
