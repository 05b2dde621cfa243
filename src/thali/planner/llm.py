"""Chat completion driver for suggestion, week-plan and recipe prompts."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from thali.config import Settings, get_settings
from thali.errors import LLMTimeout, LLMUnavailable
from thali.metrics import LLM_REQUESTS, SUGGESTION_FALLBACKS
from thali.models.context import SuggestionContext
from thali.models.meal import MealPayload
from thali.models.suggest import SuggestRequest
from thali.planner.fallbacks import choose_fallback
from thali.planner.postprocess import enforce_constraints
from thali.planner.prompts import ComposedPrompt

logger = logging.getLogger(__name__)

_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


class _MalformedResponse(Exception):
    """Completion arrived but its content is empty or not a JSON object."""


def _extract_json_blob(text: str) -> str:
    """Return a JSON object substring from raw LLM text."""

    match = _JSON_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        return text[start : end + 1].strip()

    return text.strip()


def _parse_content(content: str) -> dict[str, Any]:
    if not content.strip():
        raise _MalformedResponse("LLM returned an empty response")
    blob = _extract_json_blob(content)
    try:
        parsed = json.loads(blob)
    except json.JSONDecodeError as exc:
        snippet = blob.replace("\n", " ")[:200]
        raise _MalformedResponse(f"LLM returned invalid JSON: {exc}: payload={snippet}") from exc
    if not isinstance(parsed, dict):
        raise _MalformedResponse("LLM returned JSON that is not an object")
    return parsed


def validate_meals(raw: Any) -> list[MealPayload]:
    """Validate each element independently, dropping the ones that fail."""

    if not isinstance(raw, list):
        return []
    meals: list[MealPayload] = []
    for index, entry in enumerate(raw):
        try:
            meals.append(MealPayload.model_validate(entry))
        except ValidationError as exc:
            logger.info("Dropping invalid suggestion #%d: %s", index, exc.errors()[:1])
    return meals


class LLMDriver:
    """Call an OpenAI-compatible chat completions endpoint in JSON mode.

    Each call opens its own ``httpx.AsyncClient`` bounded by ``LLM_TIMEOUT_MS``; the
    driver keeps no state between calls. ``transport`` lets tests substitute an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    @property
    def endpoint(self) -> str:
        endpoint = self._settings.llm_base_url.rstrip("/")
        if not endpoint.endswith("/chat/completions"):
            endpoint = f"{endpoint}/chat/completions"
        return endpoint

    def _build_payload(self, prompt: ComposedPrompt) -> dict[str, Any]:
        return {
            "model": self._settings.llm_model,
            "messages": prompt.messages(),
            "temperature": self._settings.llm_temperature,
            "response_format": {"type": "json_object"},
        }

    async def _post(self, payload: dict[str, Any], operation: str) -> str:
        headers = {"Authorization": f"Bearer {self._settings.llm_api_key}"}
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.llm_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            LLM_REQUESTS.labels(operation=operation, outcome="timeout").inc()
            raise LLMTimeout() from exc
        except httpx.HTTPStatusError as exc:
            LLM_REQUESTS.labels(operation=operation, outcome="http_error").inc()
            raise LLMUnavailable(
                f"LLM endpoint returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            LLM_REQUESTS.labels(operation=operation, outcome="network_error").inc()
            raise LLMUnavailable(f"LLM endpoint unreachable: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise _MalformedResponse("LLM endpoint returned a non-JSON body") from exc
        choices = body.get("choices") if isinstance(body, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise _MalformedResponse("LLM returned no usable choices")
        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise _MalformedResponse("LLM choice carries no message object")
        content = message.get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise _MalformedResponse("LLM message content is not text")
        return content

    async def complete(self, prompt: ComposedPrompt, *, operation: str = "suggest") -> dict[str, Any]:
        """Return the parsed JSON object produced for ``prompt``.

        Malformed or empty content is retried up to ``LLM_MAX_RETRIES`` times; transport
        failures, timeouts and non-2xx responses are not.
        """

        if not self._settings.llm_api_key:
            LLM_REQUESTS.labels(operation=operation, outcome="unconfigured").inc()
            raise LLMUnavailable("LLM API key is not configured")

        payload = self._build_payload(prompt)
        attempts = 1 + self._settings.llm_max_retries
        last_error: Optional[_MalformedResponse] = None
        for attempt in range(1, attempts + 1):
            try:
                parsed = _parse_content(await self._post(payload, operation))
            except _MalformedResponse as exc:
                last_error = exc
                LLM_REQUESTS.labels(operation=operation, outcome="malformed").inc()
                logger.warning(
                    "LLM %s attempt %d/%d unusable: %s", operation, attempt, attempts, exc
                )
                continue
            LLM_REQUESTS.labels(operation=operation, outcome="success").inc()
            return parsed

        raise LLMUnavailable(str(last_error) if last_error else "LLM returned no usable content")

    async def invoke(
        self,
        prompt: ComposedPrompt,
        request: SuggestRequest,
        context: SuggestionContext,
    ) -> list[MealPayload]:
        """Return constraint-checked meals, degrading to the curated fallback set.

        Never raises for LLM problems; the single-meal flow always answers.
        """

        try:
            body = await self.complete(prompt, operation="suggest")
        except LLMUnavailable as exc:
            logger.warning("Suggestion LLM unavailable; serving fallback meals: %s", exc)
            SUGGESTION_FALLBACKS.labels(reason=exc.code.lower()).inc()
            return choose_fallback(request, context)

        meals = enforce_constraints(validate_meals(body.get("suggestions")), request, context)
        if not meals:
            logger.warning("LLM produced no acceptable suggestions; serving fallback meals")
            SUGGESTION_FALLBACKS.labels(reason="no_valid_suggestions").inc()
            return choose_fallback(request, context)
        return meals


__all__ = ["LLMDriver", "validate_meals"]
