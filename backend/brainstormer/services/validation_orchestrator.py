"""Idea validation orchestrator.

Flow:
  1. Session already holds a valid idea -> accept, no remote call, no preview
  2. Run the idea gate graph (heuristic + remote verdict in parallel)
  3. Graph crashed outright -> heuristic-only decision

validate() never raises; every failure degrades to a gate message.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from ..agents.idea_gate import create_idea_gate_graph, decide_result, initial_state
from ..schemas.chat_schema import ValidationResult
from ..timing import async_timer
from .functions_client import FunctionsClient
from .idea_heuristics import DEFAULT_POLICY, HeuristicPolicy, is_idea_description
from .idea_validator import RemoteIdeaValidator
from .prompts import PromptKind
from .validation_policy import ValidationPolicy

logger = logging.getLogger(__name__)


class ValidationOrchestrator:
    def __init__(
        self,
        validator: RemoteIdeaValidator,
        policy: Optional[ValidationPolicy] = None,
        heuristic_policy: Optional[HeuristicPolicy] = None,
        rng: Optional[random.Random] = None,
    ):
        self.policy = policy or ValidationPolicy()
        self.heuristic_policy = heuristic_policy or DEFAULT_POLICY
        self._rng = rng
        self._graph = create_idea_gate_graph(validator, self.policy, self.heuristic_policy, rng)

    @classmethod
    def for_client(
        cls,
        client: FunctionsClient,
        policy: Optional[ValidationPolicy] = None,
        rng: Optional[random.Random] = None,
    ) -> "ValidationOrchestrator":
        """Build with the prompt that matches the policy mode."""
        policy = policy or ValidationPolicy()
        kind = PromptKind.LENIENT_VALIDATION if policy.mode == "lenient" else PromptKind.STRICT_VALIDATION
        return cls(RemoteIdeaValidator(client, prompt_kind=kind), policy=policy, rng=rng)

    async def validate(self, text: str, has_existing_valid_idea: bool = False) -> ValidationResult:
        if has_existing_valid_idea:
            # the session keeps its accepted idea; no new preview
            return ValidationResult(valid=True, preview=None, source="existing")

        try:
            async with async_timer("validation_orchestrator", "idea_gate"):
                final_state = await self._graph.ainvoke(initial_state(text))
        except Exception:
            logger.exception("[VALIDATION] Idea gate graph failed, using heuristic only")
            return decide_result(
                text,
                is_idea_description(text, self.heuristic_policy),
                None,
                True,
                self.policy,
                self._rng,
            )

        for err in final_state.get("processing_errors", []):
            print(f"⚠️  [VALIDATION] {err}")

        result = final_state.get("result")
        if result is None:
            logger.error("[VALIDATION] Idea gate produced no result")
            return decide_result(
                text, bool(final_state.get("heuristic_ok")), None, True, self.policy, self._rng
            )
        return result
