"""Remote idea validator.

Asks the hosted text-generation function to judge whether a submission is a
concrete startup idea and parses a verdict out of its free-form reply.

STRICT RULES:
  - Invocation failure  -> RemoteFunctionError propagates to the caller
  - Unparseable reply   -> None ("no verdict obtained"), never a guess
  - No local state is touched
"""

from __future__ import annotations

import logging
from typing import Optional

from ..schemas.chat_schema import ValidationVerdict
from ..schemas.remote_schema import IdeaChatRequest
from .functions_client import FunctionsClient, extract_json_object
from .prompts import PromptKind, build_prompt

logger = logging.getLogger(__name__)

MAX_IMPROVEMENT_HINTS = 4


def parse_verdict(raw_reply: Optional[str]) -> Optional[ValidationVerdict]:
    """Best-effort structured parse of a validator reply.

    Returns a complete verdict or None. ``valid`` must be a real boolean;
    ``isValid`` from older prompts is accepted as an alias.
    """
    parsed = extract_json_object(raw_reply)
    if parsed is None:
        return None

    valid = parsed.get("valid", parsed.get("isValid"))
    if not isinstance(valid, bool):
        return None

    reason = parsed.get("reason", parsed.get("reasoning", ""))
    if not isinstance(reason, str):
        reason = ""

    hints_raw = parsed.get("improvementHints", [])
    hints: list[str] = []
    if isinstance(hints_raw, list):
        hints = [h.strip() for h in hints_raw if isinstance(h, str) and h.strip()]

    return ValidationVerdict(
        valid=valid,
        reason=reason.strip(),
        improvement_hints=hints[:MAX_IMPROVEMENT_HINTS],
    )


class RemoteIdeaValidator:
    """Wraps the idea-chat function with the validation prompt."""

    def __init__(self, client: FunctionsClient, prompt_kind: PromptKind = PromptKind.STRICT_VALIDATION):
        self._client = client
        self._prompt_kind = prompt_kind

    async def judge(self, submission: str) -> Optional[ValidationVerdict]:
        """Return the remote verdict, or None if the reply held no usable JSON.

        Raises RemoteFunctionError if the function cannot be invoked.
        """
        prompt = build_prompt(self._prompt_kind, submission=submission)
        reply = await self._client.idea_chat(IdeaChatRequest(message=prompt, conversation_history=[]))

        verdict = parse_verdict(reply.response)
        if verdict is None:
            logger.warning("[VALIDATOR] No verdict in reply (first 200 chars): %s", reply.response[:200])
        else:
            print(f"✅ [VALIDATOR] valid={verdict.valid} reason={verdict.reason[:80]!r}")
        return verdict
