"""Prompt templates sent through the idea-chat function.

Every template is a named, versioned constant. `build_prompt()` is the only
way call sites render them, so wording changes stay testable without a
network call.
"""

from __future__ import annotations

from enum import Enum


class PromptKind(str, Enum):
    STRICT_VALIDATION = "strict_validation"
    LENIENT_VALIDATION = "lenient_validation"
    REFINEMENT_CONTEXT = "refinement_context"
    TOPIC_RELEVANCE = "topic_relevance"
    RESPONSE_SUMMARY = "response_summary"
    CONVERSATION_SUMMARY = "conversation_summary"


STRICT_VALIDATION_V1 = (
    "You are a STRICT startup idea validator. Determine if the user submission is a CONCRETE "
    "startup idea (must specify: target user or segment, a real painful problem or workflow "
    "friction, and a hint of the proposed solution or wedge). If it is vague (e.g. 'an AI app "
    "to help everyone be productive'), purely aspirational, joke content, or missing key "
    "specifics, mark it invalid.\n"
    'Respond ONLY with minified JSON: {{"valid": true|false, "reason": "short reason why or '
    'what is missing", "improvementHints": ["array of 2-4 very tactical improvement prompts '
    'the user can answer"]}}.\n'
    'User submission: """{submission}"""'
)

LENIENT_VALIDATION_V1 = (
    "You are a helpful startup idea validator. Determine if the user submission contains a "
    "startup idea with reasonable specificity. Be LENIENT - accept ideas that show genuine "
    "effort even if not perfectly detailed. Look for: some indication of target users, a "
    "problem they face, and a solution approach. If it's clearly a joke, gibberish, or "
    "completely unrelated to business ideas, mark invalid.\n"
    'Respond ONLY with minified JSON: {{"valid": true|false, "reason": "brief explanation", '
    '"improvementHints": ["2-4 short prompts the user can answer"]}}.\n'
    'User submission: """{submission}"""'
)

REFINEMENT_CONTEXT_V1 = (
    'Context: We are discussing the idea "{idea}". Please keep your response focused on '
    "this specific idea. {message}"
)

TOPIC_RELEVANCE_V1 = (
    "You are a conversation referee for a startup idea refinement chat. The agreed idea is: "
    '"{idea}". Decide whether the user\'s latest message is about refining, validating, '
    "building, marketing, pricing or otherwise developing this idea or its business. "
    "Questions about customers, competitors, risks, funding or go-to-market count as on-topic.\n"
    'Respond ONLY with minified JSON: {{"onTopic": true|false, "reason": "short reason"}}.\n'
    'User message: """{message}"""'
)

RESPONSE_SUMMARY_V1 = (
    "Please provide a very concise 2-3 sentence summary of this response, focusing only on "
    'the most critical points and actionable insights: "{response}"'
)

CONVERSATION_SUMMARY_V1 = (
    "Please provide a brief summary of our conversation so far, highlighting key insights "
    'about the startup idea "{idea}".'
)

PROMPT_TEMPLATES: dict[PromptKind, str] = {
    PromptKind.STRICT_VALIDATION: STRICT_VALIDATION_V1,
    PromptKind.LENIENT_VALIDATION: LENIENT_VALIDATION_V1,
    PromptKind.REFINEMENT_CONTEXT: REFINEMENT_CONTEXT_V1,
    PromptKind.TOPIC_RELEVANCE: TOPIC_RELEVANCE_V1,
    PromptKind.RESPONSE_SUMMARY: RESPONSE_SUMMARY_V1,
    PromptKind.CONVERSATION_SUMMARY: CONVERSATION_SUMMARY_V1,
}


def build_prompt(kind: PromptKind, **context: str) -> str:
    """Render the template for ``kind``. Raises KeyError on missing context."""
    template = PROMPT_TEMPLATES[PromptKind(kind)]
    return template.format(**context)
