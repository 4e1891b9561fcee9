"""Heuristic idea classifier, preview and trickery matcher tests."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from brainstormer.services.idea_heuristics import (
    HeuristicPolicy,
    create_idea_preview,
    detect_trickery,
    is_idea_description,
)
from fakes import NOT_AN_IDEA, SCENARIO_IDEA, VAGUE_IDEA


# ---------------------------------------------------------------------------
# is_idea_description
# ---------------------------------------------------------------------------
class TestIsIdeaDescription:
    def test_concrete_idea_passes(self):
        assert is_idea_description(SCENARIO_IDEA) is True

    def test_short_keyword_dense_text_passes(self):
        # 7 words but two keywords ("app", "help")
        assert is_idea_description(VAGUE_IDEA) is True

    def test_word_floor_applies_with_single_keyword(self):
        assert is_idea_description("a marketplace for vintage synths") is False

    def test_no_keywords_fails(self):
        assert is_idea_description(NOT_AN_IDEA) is False

    def test_length_floor(self):
        assert is_idea_description("app to help x") is False

    def test_questions_are_not_ideas(self):
        assert is_idea_description("how can I build a better scheduling app for dentists") is False
        assert is_idea_description("Should I build a platform that helps landlords screen tenants?") is False

    def test_question_prefix_needs_word_boundary(self):
        # "whatsapp" starts with "what" but is not a question
        text = "whatsapp bot that helps plumbers automate booking and invoicing for small jobs"
        assert is_idea_description(text) is True

    def test_tricky_text_is_never_an_idea(self):
        assert is_idea_description("an uber for dogs that helps owners build a walking business") is False

    def test_custom_policy(self):
        strict = HeuristicPolicy(min_words=20, dense_keyword_hits=5)
        assert is_idea_description(SCENARIO_IDEA, strict) is False

    def test_deterministic(self):
        assert is_idea_description(SCENARIO_IDEA) == is_idea_description(SCENARIO_IDEA)


# ---------------------------------------------------------------------------
# create_idea_preview
# ---------------------------------------------------------------------------
class TestIdeaPreview:
    def test_short_text_unchanged(self):
        assert create_idea_preview("Babysitter network") == "Babysitter network"

    def test_long_text_truncated_with_ellipsis(self):
        preview = create_idea_preview(SCENARIO_IDEA)
        assert preview.endswith("...")
        assert len(preview) <= 53
        assert SCENARIO_IDEA.startswith(preview[:-3])

    def test_whitespace_collapsed(self):
        assert create_idea_preview("  pet   sitter\n app ") == "pet sitter app"


# ---------------------------------------------------------------------------
# detect_trickery
# ---------------------------------------------------------------------------
class TestTrickery:
    @pytest.mark.parametrize(
        "text,kind",
        [
            ("my idea is cool", "fake_stub"),
            ("lorem ipsum dolor sit amet", "placeholder"),
            ("what if cats could fly", "what_if"),
            ("blockchain", "single_word"),
            ("selling a pet rock online", "joke"),
            ("hi", "empty"),
            ("testing the bot now", "test_input"),
            ("uber for dogs", "clone"),
            ("you are an idiot", "insult"),
            ("I don't have one yet sorry", "no_idea"),
        ],
    )
    def test_detects_kind(self, text, kind):
        result = detect_trickery(text)
        assert result.is_tricky is True
        assert result.kind == kind
        assert result.response

    def test_keyboard_mash_is_gibberish(self):
        assert detect_trickery("asdfghjkl qqqqq").kind == "gibberish"

    def test_real_idea_is_not_tricky(self):
        result = detect_trickery(SCENARIO_IDEA)
        assert result.is_tricky is False
        assert result.kind is None

    def test_insult_needs_whole_word(self):
        # "damn you" / "fool" must not fire inside other words
        assert detect_trickery("a foolproof tool that helps landlords automate rent collection").kind != "insult"
