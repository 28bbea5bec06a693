"""Thin client for the OpenAI Responses API used by the weekly digest."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from core.config import DigestSettings

logger = logging.getLogger(__name__)

# Error bodies mentioning any of these are treated as model availability or
# access problems and retried once on the fallback model.
FALLBACK_MARKERS = ("model", "not found", "permission")


class OpenAIClientError(RuntimeError):
    """Raised when a request cannot be sent or its envelope cannot be read."""


class UpstreamCallError(OpenAIClientError):
    """Raised when the Responses API answers with a non-2xx status."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"OpenAI call failed with HTTP {status_code}")
        self.status_code = status_code
        self.detail = detail

    @property
    def is_model_error(self) -> bool:
        lowered = self.detail.lower()
        return any(marker in lowered for marker in FALLBACK_MARKERS)


@dataclass(slots=True)
class ResponsesResult:
    """Text produced by a successful call plus the model that produced it."""

    model: str
    text: str
    used_fallback: bool = False


def extract_output_text(data: Any) -> str:
    """Pull the generated text out of a Responses API envelope.

    Prefers the ``output_text`` convenience field, then the first content
    entry of the last output item. Falls back to ``"{}"``.
    """

    if not isinstance(data, dict):
        return "{}"

    output_text = data.get("output_text")
    if isinstance(output_text, str):
        return output_text

    output = data.get("output")
    if isinstance(output, list) and output:
        last = output[-1]
        content = last.get("content") if isinstance(last, dict) else None
        if isinstance(content, list) and content:
            first = content[0]
            text = first.get("text") if isinstance(first, dict) else None
            if isinstance(text, str):
                return text
    return "{}"


class OpenAIResponsesClient:
    """POSTs prompts to ``/responses`` with a single model fallback."""

    def __init__(
        self,
        settings: DigestSettings,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.settings = settings
        self._session = session
        self._owns_session = session is None

    @property
    def endpoint(self) -> str:
        return f"{self.settings.base_url}/responses"

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def close(self) -> None:
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    def build_payload(self, prompt: str, model: str) -> Dict[str, Any]:
        """Request body for ``model`` according to the configured style."""

        if self.settings.request_style == "response_format":
            return {
                "model": model,
                "input": prompt,
                "response_format": {"type": "json_object"},
            }

        return {
            "model": model,
            "input": [
                {
                    "role": "developer",
                    "content": [{"type": "input_text", "text": prompt}],
                }
            ],
            "tools": [{"type": "web_search_preview"}],
            "text": {"format": {"type": "json_object"}},
        }

    def _post(self, prompt: str, model: str) -> Dict[str, Any]:
        if not self.settings.openai_api_key:
            raise OpenAIClientError("OPENAI_API_KEY missing")

        headers = {
            "Authorization": f"Bearer {self.settings.openai_api_key}",
            "Content-Type": "application/json",
        }
        logger.info(
            "Submitting OpenAI responses request",
            extra={
                "operation": "openai_request",
                "model": model,
                "request_style": self.settings.request_style,
            },
        )
        start_time = time.perf_counter()
        response = self._get_session().post(
            self.endpoint,
            headers=headers,
            json=self.build_payload(prompt, model),
            timeout=self.settings.timeout,
        )
        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        if not response.ok:
            logger.warning(
                "OpenAI responses request failed",
                extra={
                    "operation": "openai_request",
                    "model": model,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
            raise UpstreamCallError(response.status_code, response.text)

        logger.info(
            "OpenAI responses request succeeded",
            extra={
                "operation": "openai_request",
                "model": model,
                "duration_ms": duration_ms,
            },
        )
        return response.json()

    def create_json_response(self, prompt: str) -> ResponsesResult:
        """Run ``prompt`` on the primary model, retrying once on the fallback.

        Only model/permission flavoured upstream errors trigger the retry; the
        fallback's own failure is raised as is.
        """

        primary = self.settings.primary_model
        try:
            data = self._post(prompt, primary)
            return ResponsesResult(model=primary, text=extract_output_text(data))
        except UpstreamCallError as exc:
            if not exc.is_model_error:
                raise
            logger.warning(
                "Primary model unavailable, retrying with fallback",
                extra={
                    "operation": "openai_fallback",
                    "primary_model": primary,
                    "fallback_model": self.settings.fallback_model,
                    "status_code": exc.status_code,
                },
            )

        fallback = self.settings.fallback_model
        data = self._post(prompt, fallback)
        return ResponsesResult(model=fallback, text=extract_output_text(data), used_fallback=True)


__all__ = [
    "FALLBACK_MARKERS",
    "OpenAIClientError",
    "OpenAIResponsesClient",
    "ResponsesResult",
    "UpstreamCallError",
    "extract_output_text",
]
