"""How the heuristic signal and the remote verdict combine into one decision."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel

from ..schemas.chat_schema import ValidationVerdict

PolicyMode = Literal["conjunction", "lenient"]


class ValidationPolicy(BaseModel):
    """Combination rule for a submission that produced a remote verdict.

    conjunction : accepted only when the heuristic AND the verdict agree.
    lenient     : accepted unless the verdict explicitly says invalid.

    Submissions without a verdict (remote failure or unparseable reply) are
    decided by the heuristic alone under either mode.
    """

    mode: PolicyMode = "conjunction"

    def accepts(self, heuristic_ok: bool, verdict: ValidationVerdict) -> bool:
        if self.mode == "lenient":
            return verdict.valid
        return heuristic_ok and verdict.valid


def policy_from_env() -> ValidationPolicy:
    """Read VALIDATION_POLICY (conjunction | lenient); unknown values keep the default."""
    mode = os.getenv("VALIDATION_POLICY", "conjunction").strip().lower()
    if mode not in ("conjunction", "lenient"):
        print(f"⚠️  [POLICY] Unknown VALIDATION_POLICY '{mode}', defaulting to 'conjunction'")
        mode = "conjunction"
    return ValidationPolicy(mode=mode)
