"""
Stateless idea validation and starter suggestion endpoints.
"""

import time

from fastapi import APIRouter, Depends, Query, status

from ..schemas.chat_schema import StarterSuggestionsResponse, ValidateIdeaRequest, ValidationResult
from ..services.session_dependency import get_validation_orchestrator
from ..services.suggestions import starter_suggestions
from ..services.validation_orchestrator import ValidationOrchestrator


router = APIRouter(
    tags=["Validation"],
    responses={
        500: {"description": "Internal server error during validation"}
    }
)


@router.post(
    "/validate-idea",
    response_model=ValidationResult,
    status_code=status.HTTP_200_OK,
    summary="Validate an Idea Submission",
    response_description="Accept/reject decision, idea preview or gate message",
)
async def validate_idea(
    request: ValidateIdeaRequest,
    orchestrator: ValidationOrchestrator = Depends(get_validation_orchestrator),
) -> ValidationResult:
    """
    Run the heuristic check and the remote validator and combine them with
    the configured policy. Never fails: remote problems fall back to the
    heuristic.
    """
    start_time = time.perf_counter()
    print(f"[TIMING] validate_idea_endpoint: START")

    result = await orchestrator.validate(request.text, request.has_existing_valid_idea)

    total_duration = (time.perf_counter() - start_time) * 1000
    print(f"[TIMING] validate_idea_endpoint: END: duration={total_duration:.0f}ms")
    return result


@router.get(
    "/suggestions/starter",
    response_model=StarterSuggestionsResponse,
    summary="Starter Idea Suggestions",
)
async def get_starter_suggestions(
    count: int = Query(4, ge=1, le=10, description="How many suggestions to return"),
) -> StarterSuggestionsResponse:
    return StarterSuggestionsResponse(suggestions=starter_suggestions(count))
