"""Wrinkle point aggregation.

The score is never stored as independent state: it is recomputed from the
turn log every time the log changes.
"""

from __future__ import annotations

import random
from typing import Iterable, Optional

from ..constants import (
    NO_IDEA_TOOLTIP,
    REFINEMENT_WORDS,
    WRINKLE_TIER_LABELS,
    WRINKLE_TIER_THRESHOLDS,
    WRINKLE_TIER_TOOLTIPS,
)
from ..schemas.chat_schema import Message, WrinkleSummary


def compute_wrinkle_points(messages: Iterable[Message]) -> float:
    """Sum of ``points_earned`` over bot turns, clamped to >= 0."""
    total = sum(
        m.points_earned
        for m in messages
        if m.role == "bot" and not m.is_typing and isinstance(m.points_earned, (int, float))
    )
    return max(0.0, float(total))


def wrinkle_tier(points: float) -> int:
    """0 (embryonic) .. 5 (legendary)."""
    for tier, threshold in enumerate(WRINKLE_TIER_THRESHOLDS):
        if points < threshold:
            return tier
    return len(WRINKLE_TIER_THRESHOLDS)


def wrinkle_tooltip(points: float, has_valid_idea: bool) -> str:
    if not has_valid_idea:
        return NO_IDEA_TOOLTIP
    tier = wrinkle_tier(points)
    base = WRINKLE_TIER_TOOLTIPS[tier]
    if tier == len(WRINKLE_TIER_THRESHOLDS):
        return f"{base} You've achieved legendary status! 🏆"
    to_next = WRINKLE_TIER_THRESHOLDS[tier] - points
    return f"{base} ({to_next:g} points to next level)"


def summarize_wrinkles(messages: Iterable[Message], has_valid_idea: bool) -> WrinkleSummary:
    points = compute_wrinkle_points(messages)
    tier = wrinkle_tier(points)
    return WrinkleSummary(
        points=points,
        tier=tier,
        label=WRINKLE_TIER_LABELS[tier],
        tooltip=wrinkle_tooltip(points, has_valid_idea),
    )


def fallback_point_change(response_text: str, rng: Optional[random.Random] = None) -> tuple[float, str]:
    """Local estimate used when the remote evaluator is unavailable."""
    rng = rng or random
    lowered = (response_text or "").lower()
    if any(word in lowered for word in REFINEMENT_WORDS):
        return round(rng.uniform(3.0, 5.0), 2), "Good refinement detected!"
    return round(rng.uniform(0.75, 2.25), 2), "Making progress!"
