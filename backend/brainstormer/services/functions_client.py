"""Centralized client for the hosted edge functions.

All remote calls (idea chat, wrinkle evaluation, suggestions, salty
enhancement) MUST go through `FunctionsClient`. This ensures:
  - Base URL, key, timeout and retry count are read from env.
  - Timeouts, transport errors and 429/5xx are retried, 4xx are not.
  - Every failure surfaces as `RemoteFunctionError` so callers can fall back.
  - Consistent logging across all call sites.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import time
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ValidationError

from ..schemas.remote_schema import (
    IdeaChatRequest,
    IdeaChatResponse,
    SaltyEnhanceRequest,
    SaltyEnhanceResponse,
    SuggestionRequest,
    SuggestionResponse,
    WrinkleEvaluationRequest,
    WrinkleEvaluationResponse,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Function names on the hosted backend
# ---------------------------------------------------------------------------
IDEA_CHAT = "idea-chat"
EVALUATE_WRINKLE_POINTS = "evaluate-wrinkle-points"
GENERATE_SUGGESTIONS = "generate-suggestions"
ENHANCE_SALTY_RESPONSE = "enhance-salty-response"


class RetryConfig:
    """Retry settings - minimal to avoid cumulative delays."""
    INITIAL_BACKOFF = 0.5  # seconds
    MAX_BACKOFF = 1.5      # seconds

    RETRYABLE_CODES = {429, 500, 502, 503, 504}


class RemoteFunctionError(Exception):
    """A remote function could not be invoked or answered unusably."""

    def __init__(self, function: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{function}: {message}")
        self.function = function
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------
def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def get_functions_base_url() -> str:
    """Read FUNCTIONS_BASE_URL from the environment. Raises EnvironmentError if missing."""
    url = os.getenv("FUNCTIONS_BASE_URL", "").strip()
    if not url:
        raise EnvironmentError("FUNCTIONS_BASE_URL environment variable not set")
    return url.rstrip("/")


def get_functions_key() -> str:
    return os.getenv("FUNCTIONS_API_KEY", "").strip()


def _get_timeout() -> float:
    return _env_float("FUNCTIONS_REQUEST_TIMEOUT", 40.0)


def _get_max_retries() -> int:
    return max(0, _env_int("FUNCTIONS_MAX_RETRIES", 1))


def is_retryable_error(status_code: int) -> bool:
    return status_code in RetryConfig.RETRYABLE_CODES


# ---------------------------------------------------------------------------
# Best-effort structured parse of free-text replies
# ---------------------------------------------------------------------------
def _strip_fences(text: str) -> str:
    text = text.strip().lstrip("\ufeff")
    if text.startswith("```"):
        parts = text.split("```")
        text = parts[1] if len(parts) >= 3 else text[3:]
        text = text.strip()
        if text.lower().startswith("json"):
            text = text[4:]
    return text.strip()


def _first_balanced_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` span, honouring JSON string escapes."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        ch = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start: idx + 1]
    return None


def extract_json_object(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Extract the first JSON object from a noisy model reply.

    Handles markdown fences, prose around the object and trailing commas.
    Returns None when no complete object can be parsed; never a partial dict.
    """
    if not raw:
        return None

    span = _first_balanced_object(_strip_fences(raw))
    if span is None:
        return None

    span = re.sub(r",\s*([}\]])", r"\1", span)
    try:
        parsed = json.loads(span)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------
class FunctionsClient:
    """Async invoker for the hosted functions.

    ``transport`` lets tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff: float = RetryConfig.INITIAL_BACKOFF,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/") if base_url else None
        self._api_key = api_key if api_key is not None else get_functions_key()
        self._timeout = timeout if timeout is not None else _get_timeout()
        self._max_retries = max_retries if max_retries is not None else _get_max_retries()
        self._backoff = backoff
        self._transport = transport

    def _url_for(self, function: str) -> str:
        base = self._base_url
        if base is None:
            try:
                base = get_functions_base_url()
            except EnvironmentError as exc:
                raise RemoteFunctionError(function, str(exc)) from exc
        return f"{base}/{function}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["apikey"] = self._api_key
        return headers

    async def _sleep_before_retry(self, attempt: int) -> None:
        if self._backoff <= 0:
            return
        await asyncio.sleep(min(self._backoff * (2 ** attempt), RetryConfig.MAX_BACKOFF))

    async def invoke(self, function: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST ``body`` to ``function`` and return the decoded JSON object.

        Raises RemoteFunctionError once retries are exhausted or the error is
        not retryable.
        """
        url = self._url_for(function)
        headers = self._headers()
        attempts = self._max_retries + 1

        for attempt in range(attempts):
            t0 = time.time()
            last_attempt = attempt == attempts - 1
            try:
                print(f"🧠 [FUNCTIONS] Calling {function} (attempt {attempt + 1}/{attempts})")
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    response = await client.post(url, headers=headers, json=body)
            except httpx.TimeoutException as exc:
                duration = time.time() - t0
                logger.warning("[FUNCTIONS] %s timed out after %.1fs", function, duration)
                if not last_attempt:
                    await self._sleep_before_retry(attempt)
                    continue
                raise RemoteFunctionError(function, "request timed out") from exc
            except httpx.HTTPError as exc:
                logger.warning("[FUNCTIONS] %s transport error: %s", function, exc)
                if not last_attempt:
                    await self._sleep_before_retry(attempt)
                    continue
                raise RemoteFunctionError(function, f"transport error: {exc}") from exc

            duration = time.time() - t0
            print(f"📦 [FUNCTIONS] {function} HTTP {response.status_code} ({duration:.1f}s)")

            if response.status_code != 200:
                logger.error(
                    "[FUNCTIONS] %s error %d: %s",
                    function, response.status_code, response.text[:300],
                )
                if is_retryable_error(response.status_code) and not last_attempt:
                    print("🔄 [FUNCTIONS] Retrying...")
                    await self._sleep_before_retry(attempt)
                    continue
                raise RemoteFunctionError(
                    function,
                    f"HTTP {response.status_code}",
                    status_code=response.status_code,
                )

            try:
                data = response.json()
            except ValueError as exc:
                raise RemoteFunctionError(function, "response was not JSON") from exc
            if not isinstance(data, dict):
                raise RemoteFunctionError(function, "response was not a JSON object")
            if data.get("error") and len(data) == 1:
                raise RemoteFunctionError(function, str(data["error"])[:200])
            return data

        raise RemoteFunctionError(function, "retries exhausted")

    @staticmethod
    def _parse(function: str, model: type[BaseModel], data: Dict[str, Any]) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise RemoteFunctionError(
                function, f"unexpected response shape ({exc.error_count()} errors)"
            ) from exc

    # ── Typed endpoints ─────────────────────────────────────────────────

    async def idea_chat(self, request: IdeaChatRequest) -> IdeaChatResponse:
        data = await self.invoke(IDEA_CHAT, request.model_dump(by_alias=True, exclude_none=True))
        return self._parse(IDEA_CHAT, IdeaChatResponse, data)

    async def evaluate_wrinkle_points(self, request: WrinkleEvaluationRequest) -> WrinkleEvaluationResponse:
        data = await self.invoke(EVALUATE_WRINKLE_POINTS, request.model_dump(by_alias=True, exclude_none=True))
        return self._parse(EVALUATE_WRINKLE_POINTS, WrinkleEvaluationResponse, data)

    async def generate_suggestions(self, request: SuggestionRequest) -> SuggestionResponse:
        data = await self.invoke(GENERATE_SUGGESTIONS, request.model_dump(by_alias=True, exclude_none=True))
        return self._parse(GENERATE_SUGGESTIONS, SuggestionResponse, data)

    async def enhance_salty_response(self, request: SaltyEnhanceRequest) -> SaltyEnhanceResponse:
        data = await self.invoke(ENHANCE_SALTY_RESPONSE, request.model_dump(by_alias=True, exclude_none=True))
        return self._parse(ENHANCE_SALTY_RESPONSE, SaltyEnhanceResponse, data)
