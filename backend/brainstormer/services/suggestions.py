"""Follow-up suggestions: normalisation, brain-themed explanations, fallbacks."""

from __future__ import annotations

import random
from typing import Any, Iterable, Optional, Union

from ..constants import STARTER_SUGGESTION_POOL
from ..schemas.chat_schema import SuggestionItem

_CATEGORY_EXPLANATIONS: dict[str, list[str]] = {
    "market": [
        "This carves deeper market-sensing wrinkles in your brain",
        "Develops your brain's customer awareness folds",
        "Adds texture to your market-understanding neural pathways",
    ],
    "monetize": [
        "Creates profitable thinking wrinkles in your brain's business center",
        "Develops the revenue-generating folds in your entrepreneurial cortex",
    ],
    "risk": [
        "Sharpens your brain's risk-detection wrinkles",
        "Develops defensive thinking folds in your analytical cortex",
    ],
    "customer": [
        "Deepens your brain's customer empathy wrinkles",
        "Creates customer-centric neural pathways",
    ],
    "mvp": [
        "Forms prototype-thinking wrinkles in your brain's building section",
        "Develops lean startup folds in your entrepreneurial cortex",
    ],
    "problem": [
        "Carves problem-solving wrinkles deeper into your analytical brain",
        "Develops pain-point detection folds in your empathy center",
    ],
    "solution": [
        "Creates innovative solution wrinkles in your creative brain",
        "Develops builder-thinking folds in your problem-solving cortex",
    ],
    "general": [
        "This brain exercise adds sophisticated wrinkles to your thinking",
        "Develops new neural folds in your idea-refinement center",
        "Creates deeper grooves of understanding in your entrepreneurial brain",
    ],
}

# Checked in order; first match wins.
_CATEGORY_TRIGGERS: list[tuple[str, tuple[str, ...]]] = [
    ("market", ("market", "audience", "segment")),
    ("monetize", ("monetiz", "revenue", "price")),
    ("risk", ("risk", "challenge", "obstacle")),
    ("customer", ("customer", "user", "client")),
    ("mvp", ("mvp", "prototype", "test")),
    ("problem", ("problem", "pain", "struggle")),
    ("solution", ("solution", "solve", "fix")),
]

_BATCH_EXPLANATIONS: dict[str, str] = {
    "early": "These neural sparks help form the first wrinkles in your brain - each question carves new pathways of understanding.",
    "market": "These questions develop the market-sensing wrinkles in your brain - sharpening your audience awareness.",
    "problem": "These problem-probing questions create deeper furrows in your brain's analytical section.",
    "solution": "These solution-focused prompts develop the creative wrinkles in your brain's innovation center.",
    "analysis": "These analytical prompts create sophisticated wrinkles in your brain's research center.",
    "strategy": "These strategic questions develop the planning wrinkles in your brain's executive region.",
    "general": "These brain-teasers add more wrinkles to your thinking - each question develops new neural territories.",
}

_NO_IDEA_SUGGESTIONS = [
    SuggestionItem(
        text="I want to build an app that helps people with [specific problem]",
        explanation="Start with a real problem you want to solve",
    ),
    SuggestionItem(
        text="My business idea is a platform for [target audience] to [main benefit]",
        explanation="Define your target audience and core value proposition",
    ),
    SuggestionItem(
        text="I noticed [pain point] in daily life and want to create [solution]",
        explanation="Personal observations often lead to the best business ideas",
    ),
]

_DETAIL_SUGGESTIONS = [
    SuggestionItem(
        text="Who exactly is my target customer and what keeps them up at night?",
        explanation="Deep customer understanding is the foundation of successful businesses",
    ),
    SuggestionItem(
        text="What is the biggest pain point my idea solves that nobody else addresses?",
        explanation="Finding your unique angle separates you from generic solutions",
    ),
    SuggestionItem(
        text="How would someone use my product in their daily routine?",
        explanation="User flow understanding helps identify real-world adoption challenges",
    ),
    SuggestionItem(
        text="What would make someone choose my solution over doing nothing?",
        explanation="Often your biggest competitor is the status quo, not other products",
    ),
]


def explain_suggestion(text: str, rng: Optional[random.Random] = None) -> str:
    """Pick a brain-themed explanation matching the suggestion's topic."""
    rng = rng or random
    lowered = text.lower()
    category = "general"
    for name, triggers in _CATEGORY_TRIGGERS:
        if any(t in lowered for t in triggers):
            category = name
            break
    return rng.choice(_CATEGORY_EXPLANATIONS[category])


def explain_suggestion_batch(suggestions: Iterable[str], message_content: str) -> str:
    """One-line explanation shown above a set of suggestions."""
    joined = " ".join(suggestions).lower()
    content = message_content.lower()

    if any(w in content for w in ("idea", "concept", "thinking")):
        return _BATCH_EXPLANATIONS["early"]
    for category, words in (
        ("market", ("market", "customer", "audience")),
        ("problem", ("problem", "pain", "challenge")),
        ("solution", ("solution", "feature", "build")),
        ("analysis", ("analyze", "research", "data")),
        ("strategy", ("strategy", "plan", "approach")),
    ):
        if any(w in joined for w in words):
            return _BATCH_EXPLANATIONS[category]
    return _BATCH_EXPLANATIONS["general"]


def normalize_suggestions(
    raw: Iterable[Union[str, dict[str, Any], SuggestionItem]],
    rng: Optional[random.Random] = None,
) -> list[SuggestionItem]:
    """Coerce remote suggestions (strings or {text, explanation}) into items.

    Entries without usable text are dropped; missing explanations are filled.
    """
    items: list[SuggestionItem] = []
    for entry in raw:
        if isinstance(entry, SuggestionItem):
            text, explanation = entry.text, entry.explanation
        elif isinstance(entry, dict):
            text, explanation = entry.get("text"), entry.get("explanation")
        else:
            text, explanation = entry, None
        if not isinstance(text, str) or not text.strip():
            continue
        items.append(
            SuggestionItem(
                text=text.strip(),
                explanation=explanation if isinstance(explanation, str) and explanation else explain_suggestion(text, rng),
            )
        )
    return items


def fallback_suggestions(content: str, mode: str) -> list[SuggestionItem]:
    """Offline suggestions keyed on whether the content already names a product."""
    lowered = content.lower()
    if not any(w in lowered for w in ("app", "platform", "service", "business")):
        return [item.model_copy() for item in _NO_IDEA_SUGGESTIONS]
    detail = [item.model_copy() for item in _DETAIL_SUGGESTIONS]
    return detail[:2] if mode == "summary" else detail


def starter_suggestions(count: int = 4, rng: Optional[random.Random] = None) -> list[str]:
    """Random sample of example ideas for an empty session."""
    rng = rng or random
    count = max(0, min(count, len(STARTER_SUGGESTION_POOL)))
    return rng.sample(STARTER_SUGGESTION_POOL, count)
