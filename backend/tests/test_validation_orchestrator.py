"""Idea gate tests: verdict parsing, combination policy, orchestrator scenarios."""

import os
import random
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from brainstormer.constants import DEFAULT_IMPROVEMENT_HINTS, GATE_POINTS, GLITCH_POINTS
from brainstormer.schemas.chat_schema import ValidationVerdict
from brainstormer.services.gate_messages import build_rejection_message
from brainstormer.services.idea_validator import RemoteIdeaValidator, parse_verdict
from brainstormer.services.validation_orchestrator import ValidationOrchestrator
from brainstormer.services.validation_policy import ValidationPolicy, policy_from_env
from fakes import (
    NOT_AN_IDEA,
    SCENARIO_IDEA,
    VAGUE_IDEA,
    FakeFunctionsClient,
    offline,
    run,
    verdict_json,
)


def _orchestrator(fake, mode="conjunction"):
    return ValidationOrchestrator(
        RemoteIdeaValidator(fake),
        policy=ValidationPolicy(mode=mode),
        rng=random.Random(7),
    )


# ---------------------------------------------------------------------------
# parse_verdict
# ---------------------------------------------------------------------------
class TestParseVerdict:
    def test_full_verdict(self):
        verdict = parse_verdict(verdict_json(False, "too vague", ["Who?", "What pain?"]))
        assert verdict == ValidationVerdict(valid=False, reason="too vague", improvement_hints=["Who?", "What pain?"])

    def test_is_valid_alias(self):
        assert parse_verdict('{"isValid": true, "reasoning": "fine"}').reason == "fine"

    def test_non_boolean_valid_is_no_verdict(self):
        assert parse_verdict('{"valid": "yes", "reason": "ok"}') is None

    def test_garbage_is_no_verdict(self):
        assert parse_verdict("I think this is a great idea!") is None

    def test_hints_are_cleaned_and_capped(self):
        raw = verdict_json(False, "vague", ["a", " ", "b", 3, "c", "d", "e"])
        assert parse_verdict(raw).improvement_hints == ["a", "b", "c", "d"]


# ---------------------------------------------------------------------------
# Policy + gate messages
# ---------------------------------------------------------------------------
class TestPolicy:
    @pytest.mark.parametrize(
        "mode,heuristic_ok,remote_valid,expected",
        [
            ("conjunction", True, True, True),
            ("conjunction", True, False, False),
            ("conjunction", False, True, False),
            ("lenient", False, True, True),
            ("lenient", True, False, False),
        ],
    )
    def test_accepts(self, mode, heuristic_ok, remote_valid, expected):
        verdict = ValidationVerdict(valid=remote_valid)
        assert ValidationPolicy(mode=mode).accepts(heuristic_ok, verdict) is expected

    def test_policy_from_env(self, monkeypatch):
        monkeypatch.setenv("VALIDATION_POLICY", "LENIENT")
        assert policy_from_env().mode == "lenient"
        monkeypatch.setenv("VALIDATION_POLICY", "whatever")
        assert policy_from_env().mode == "conjunction"

    def test_rejection_message_pads_hints(self):
        message = build_rejection_message(ValidationVerdict(valid=False, reason="r", improvement_hints=["Only one?"]))
        assert message.suggestions[0] == "Answer: Only one?"
        assert len(message.suggestions) == 2
        assert message.points_earned == GATE_POINTS

    def test_rejection_message_without_hints_uses_defaults(self):
        message = build_rejection_message(ValidationVerdict(valid=False))
        assert len(message.suggestions) == len(DEFAULT_IMPROVEMENT_HINTS)
        assert "Reason: " in message.content


# ---------------------------------------------------------------------------
# ValidationOrchestrator
# ---------------------------------------------------------------------------
class TestOrchestrator:
    def test_existing_idea_short_circuits_without_remote_call(self):
        fake = FakeFunctionsClient()
        orchestrator = _orchestrator(fake)

        first = run(orchestrator.validate("anything at all", has_existing_valid_idea=True))
        second = run(orchestrator.validate("anything at all", has_existing_valid_idea=True))

        assert first.valid and second.valid
        assert first.source == "existing"
        assert first.preview is None
        assert fake.calls == []

    def test_scenario_concrete_idea_accepted(self):
        fake = FakeFunctionsClient()
        result = run(_orchestrator(fake).validate(SCENARIO_IDEA))

        assert result.valid is True
        assert result.preview
        assert result.gate_message is None
        assert result.source == "combined"
        assert fake.count("validate") == 1

    def test_scenario_vague_idea_rejected_with_hints(self):
        fake = FakeFunctionsClient()
        fake.validation_reply = verdict_json(False, "too vague")

        result = run(_orchestrator(fake).validate(VAGUE_IDEA))

        assert result.valid is False
        assert "NOT APPROVED" in result.gate_message.content
        assert "too vague" in result.gate_message.content
        assert len(result.gate_message.suggestions) >= 2

    def test_heuristic_fail_remote_valid_rejected_under_conjunction(self):
        fake = FakeFunctionsClient()
        result = run(_orchestrator(fake).validate(NOT_AN_IDEA))
        assert result.valid is False
        assert "NOT APPROVED" in result.gate_message.content

    def test_heuristic_fail_remote_valid_accepted_when_lenient(self):
        fake = FakeFunctionsClient()
        result = run(_orchestrator(fake, mode="lenient").validate(NOT_AN_IDEA))
        assert result.valid is True

    def test_scenario_remote_failure_falls_back_to_glitch_gate(self):
        fake = FakeFunctionsClient()
        fake.validation_reply = offline()

        result = run(_orchestrator(fake).validate(NOT_AN_IDEA))

        assert result.valid is False
        assert result.source == "heuristic_fallback"
        assert "Glitch" in result.gate_message.content
        assert result.gate_message.points_earned == GLITCH_POINTS

    def test_remote_failure_with_idea_like_text_accepts(self):
        fake = FakeFunctionsClient()
        fake.validation_reply = offline()

        result = run(_orchestrator(fake).validate(SCENARIO_IDEA))

        assert result.valid is True
        assert result.source == "heuristic_fallback"

    def test_unparseable_reply_treated_as_no_verdict(self):
        fake = FakeFunctionsClient()
        fake.validation_reply = "Honestly this sounds great, go for it!"

        result = run(_orchestrator(fake).validate(NOT_AN_IDEA))

        assert result.valid is False
        assert "Glitch" in result.gate_message.content

    def test_lenient_orchestrator_uses_lenient_prompt(self):
        fake = FakeFunctionsClient()
        orchestrator = ValidationOrchestrator.for_client(fake, policy=ValidationPolicy(mode="lenient"))

        run(orchestrator.validate(SCENARIO_IDEA))

        _, request = fake.calls[0]
        assert "Be LENIENT" in request.message
