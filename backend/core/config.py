"""Runtime configuration for the weekly digest service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_FALLBACK_MODEL",
    "DEFAULT_PRIMARY_MODEL",
    "REQUEST_STYLES",
    "DigestSettings",
]

DEFAULT_BASE_URL = "https://api.openai.com/v1"
# Deep Research models: o4-mini-deep-research-2025-06-26 or o3-deep-research-2025-06-26
DEFAULT_PRIMARY_MODEL = "o4-mini-deep-research-2025-06-26"
DEFAULT_FALLBACK_MODEL = "gpt-4o-mini"

REQUEST_STYLES = ("developer_input", "response_format")

_TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def _as_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ValueError(f"OPENAI_TIMEOUT must be a number of seconds, got {value!r}") from exc
    return timeout if timeout > 0 else None


@dataclass(frozen=True)
class DigestSettings:
    """Immutable configuration handed to the app factory and the pipeline.

    ``required_token`` empty means the endpoint is open to anyone. The API key
    is allowed to be empty here; the OpenAI client refuses to send a request
    without one.
    """

    openai_api_key: str = field(default="", repr=False)
    required_token: str = field(default="", repr=False)
    allow_query_token: bool = False
    primary_model: str = DEFAULT_PRIMARY_MODEL
    fallback_model: str = DEFAULT_FALLBACK_MODEL
    request_style: str = "developer_input"
    base_url: str = DEFAULT_BASE_URL
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.request_style not in REQUEST_STYLES:
            raise ValueError(
                f"Unknown request style {self.request_style!r}; expected one of {', '.join(REQUEST_STYLES)}"
            )

    @property
    def token_required(self) -> bool:
        return bool(self.required_token)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DigestSettings":
        """Build settings from ``os.environ`` (or an explicit mapping)."""

        env = os.environ if environ is None else environ
        return cls(
            openai_api_key=env.get("OPENAI_API_KEY", "") or "",
            required_token=env.get("DEEP_TOKEN", "") or "",
            allow_query_token=_as_bool(env.get("DEEP_ALLOW_QUERY_TOKEN")),
            primary_model=env.get("OPENAI_PRIMARY_MODEL") or DEFAULT_PRIMARY_MODEL,
            fallback_model=env.get("OPENAI_FALLBACK_MODEL") or DEFAULT_FALLBACK_MODEL,
            request_style=(env.get("OPENAI_REQUEST_STYLE") or "developer_input").strip().lower(),
            base_url=(env.get("OPENAI_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            timeout=_as_timeout(env.get("OPENAI_TIMEOUT")),
        )
