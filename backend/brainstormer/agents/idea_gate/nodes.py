"""Idea gate nodes.

heuristic_check and remote_verdict run in parallel; decide combines them.
Every node returns a partial state update and never raises.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Awaitable, Callable, Optional

from ...schemas.chat_schema import ValidationResult
from ...services.functions_client import RemoteFunctionError
from ...services.gate_messages import build_glitch_message, build_rejection_message
from ...services.idea_heuristics import HeuristicPolicy, create_idea_preview, is_idea_description
from ...services.idea_validator import RemoteIdeaValidator
from ...services.validation_policy import ValidationPolicy
from ...timing import async_timer
from .state import IdeaGateState

logger = logging.getLogger(__name__)

Node = Callable[[IdeaGateState], Awaitable[dict[str, Any]]]


def make_heuristic_node(heuristic_policy: HeuristicPolicy) -> Node:
    async def heuristic_check(state: IdeaGateState) -> dict[str, Any]:
        ok = is_idea_description(state["submission"], heuristic_policy)
        print(f"🔎 [IDEA_GATE] heuristic_ok={ok}")
        return {"heuristic_ok": ok}

    return heuristic_check


def make_remote_node(validator: RemoteIdeaValidator) -> Node:
    async def remote_verdict(state: IdeaGateState) -> dict[str, Any]:
        try:
            async with async_timer("idea_gate", "remote_verdict"):
                verdict = await validator.judge(state["submission"])
        except RemoteFunctionError as exc:
            logger.error("[IDEA_GATE] Remote validator failed: %s", exc)
            return {
                "verdict": None,
                "remote_failed": True,
                "processing_errors": [f"remote_verdict: {exc}"],
            }
        except Exception as exc:
            logger.exception("[IDEA_GATE] Unexpected validator error")
            return {
                "verdict": None,
                "remote_failed": True,
                "processing_errors": [f"remote_verdict: unexpected {type(exc).__name__}"],
            }
        return {"verdict": verdict, "remote_failed": False}

    return remote_verdict


def decide_result(
    submission: str,
    heuristic_ok: bool,
    verdict,
    remote_failed: bool,
    policy: ValidationPolicy,
    rng: Optional[random.Random] = None,
) -> ValidationResult:
    """Combine both signals into the final gate result.

    Without a verdict the heuristic decides alone and a rejection uses the
    glitch message; with a verdict the policy decides.
    """
    if remote_failed or verdict is None:
        if heuristic_ok:
            return ValidationResult(
                valid=True,
                preview=create_idea_preview(submission),
                source="heuristic_fallback",
            )
        return ValidationResult(
            valid=False,
            gate_message=build_glitch_message(),
            source="heuristic_fallback",
        )

    if policy.accepts(heuristic_ok, verdict):
        return ValidationResult(valid=True, preview=create_idea_preview(submission))
    return ValidationResult(valid=False, gate_message=build_rejection_message(verdict, rng))


def make_decide_node(policy: ValidationPolicy, rng: Optional[random.Random]) -> Node:
    async def decide(state: IdeaGateState) -> dict[str, Any]:
        result = decide_result(
            state["submission"],
            bool(state.get("heuristic_ok")),
            state.get("verdict"),
            state.get("remote_failed", False),
            policy,
            rng,
        )
        print(f"⚖️  [IDEA_GATE] valid={result.valid} source={result.source}")
        return {"result": result}

    return decide
