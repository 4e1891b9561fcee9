# Schemas package
from .chat_schema import (
    Message,
    SessionView,
    SuggestionItem,
    TrickeryCheck,
    TurnResponse,
    ValidationResult,
    ValidationVerdict,
)
from .remote_schema import (
    IdeaChatRequest,
    IdeaChatResponse,
    SaltyEnhanceRequest,
    SaltyEnhanceResponse,
    SuggestionRequest,
    SuggestionResponse,
    WrinkleEvaluationRequest,
    WrinkleEvaluationResponse,
)

__all__ = [
    "Message",
    "SessionView",
    "SuggestionItem",
    "TrickeryCheck",
    "TurnResponse",
    "ValidationResult",
    "ValidationVerdict",
    "IdeaChatRequest",
    "IdeaChatResponse",
    "SaltyEnhanceRequest",
    "SaltyEnhanceResponse",
    "SuggestionRequest",
    "SuggestionResponse",
    "WrinkleEvaluationRequest",
    "WrinkleEvaluationResponse",
]
