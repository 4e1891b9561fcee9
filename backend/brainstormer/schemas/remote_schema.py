"""Wire models for the hosted edge functions.

Field names on the wire are camelCase; Python code uses snake_case and
serialises with ``model_dump(by_alias=True, exclude_none=True)``.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class HistoryEntry(_WireModel):
    role: str  # "user" | "assistant"
    content: str


class IdeaChatRequest(_WireModel):
    message: str
    conversation_history: list[HistoryEntry] = Field(default_factory=list, alias="conversationHistory")
    response_mode: Optional[str] = Field(default=None, alias="responseMode")
    refinement_mode: Optional[bool] = Field(default=None, alias="refinementMode")
    idea: Optional[str] = None


class IdeaChatResponse(_WireModel):
    response: str = ""
    suggestions: list[Union[str, dict[str, Any]]] = Field(default_factory=list)
    pmf_analysis: Optional[dict[str, Any]] = Field(default=None, alias="pmfAnalysis")
    detailed_response: Optional[str] = Field(default=None, alias="detailedResponse")
    summary_response: Optional[str] = Field(default=None, alias="summaryResponse")


class WrinkleEvaluationRequest(_WireModel):
    user_message: str = Field(..., alias="userMessage")
    bot_response: str = Field(..., alias="botResponse")
    conversation_history: list[HistoryEntry] = Field(default_factory=list, alias="conversationHistory")
    current_wrinkle_points: float = Field(0.0, alias="currentWrinklePoints")
    current_idea: Optional[str] = Field(default=None, alias="currentIdea")


class WrinkleEvaluationResponse(_WireModel):
    point_change: Optional[float] = Field(default=None, alias="pointChange")
    explanation: str = ""


class SuggestionRequest(_WireModel):
    question: str
    idea_description: str = Field(..., alias="ideaDescription")
    previous_answers: dict[str, str] = Field(default_factory=dict, alias="previousAnswers")
    response_mode: str = Field("verbose", alias="responseMode")
    include_explanations: bool = Field(True, alias="includeExplanations")


class SuggestionResponse(_WireModel):
    suggestions: list[Union[str, dict[str, Any]]] = Field(default_factory=list)


class SaltyEnhanceRequest(_WireModel):
    base_response: str = Field(..., alias="baseResponse")
    user_message: str = Field(..., alias="userMessage")
    persistence_level: int = Field(..., alias="persistenceLevel")
    wrinkle_points: float = Field(0.0, alias="wrinklePoints")


class SaltyEnhanceResponse(_WireModel):
    enhanced_response: Optional[str] = Field(default=None, alias="enhancedResponse")
    suggestions: Optional[list[str]] = None
