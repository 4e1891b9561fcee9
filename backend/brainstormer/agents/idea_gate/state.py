import operator
from typing import Annotated, Optional, TypedDict

from ...schemas.chat_schema import ValidationResult, ValidationVerdict


class IdeaGateState(TypedDict):
    submission: str

    # Intermediate Results (populated by parallel nodes)
    heuristic_ok: Optional[bool]
    verdict: Optional[ValidationVerdict]
    remote_failed: bool

    # Final Output (populated by decide node)
    result: Optional[ValidationResult]

    # Metadata
    processing_errors: Annotated[list[str], operator.add]
