"""Bot messages produced when a submission fails the idea gate."""

from __future__ import annotations

import random
from typing import Optional

from ..constants import (
    DEFAULT_IMPROVEMENT_HINTS,
    GATE_POINTS,
    GENERIC_REJECTION_REASON,
    GLITCH_GATE_TEXT,
    GLITCH_POINTS,
    GLITCH_SUGGESTIONS,
    SCOLDING_LINES,
)
from ..schemas.chat_schema import Message, ValidationVerdict

MIN_HINTS = 2
MAX_HINTS = 4


def _hints_from(verdict: Optional[ValidationVerdict]) -> list[str]:
    hints = list(verdict.improvement_hints) if verdict else []
    if not hints:
        return list(DEFAULT_IMPROVEMENT_HINTS)
    if len(hints) < MIN_HINTS:
        # pad short remote lists from the defaults
        hints += [h for h in DEFAULT_IMPROVEMENT_HINTS if h not in hints][: MIN_HINTS - len(hints)]
    return hints[:MAX_HINTS]


def build_rejection_message(
    verdict: Optional[ValidationVerdict],
    rng: Optional[random.Random] = None,
) -> Message:
    """The "NOT APPROVED" gate: scolding line, reason, 2-4 improvement prompts."""
    rng = rng or random
    scold = rng.choice(SCOLDING_LINES)
    reason = verdict.reason if verdict and verdict.reason else GENERIC_REJECTION_REASON
    hints = _hints_from(verdict)
    bullet_list = "\n- ".join(hints)

    return Message(
        role="bot",
        content=(
            "🧪 Idea Validation: NOT APPROVED\n\n"
            f"{scold}\n\n"
            f"Reason: {reason}\n\n"
            f"Answer one of these to refine:\n- {bullet_list}"
        ),
        suggestions=[f"Answer: {h}" for h in hints],
        points_earned=GATE_POINTS,
        points_explanation="No wrinkles granted until a real idea forms.",
    )


def build_glitch_message() -> Message:
    """Gate used when the remote validator could not give a verdict."""
    return Message(
        role="bot",
        content=GLITCH_GATE_TEXT,
        suggestions=list(GLITCH_SUGGESTIONS),
        points_earned=GLITCH_POINTS,
        points_explanation="Need clearer idea before wrinkling.",
    )
