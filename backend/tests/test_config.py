from __future__ import annotations

import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT / "backend") not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT / "backend"))

from core.config import (  # noqa: E402
    DEFAULT_BASE_URL,
    DEFAULT_FALLBACK_MODEL,
    DEFAULT_PRIMARY_MODEL,
    DigestSettings,
)


def test_defaults_from_empty_environment() -> None:
    settings = DigestSettings.from_env({})

    assert settings.openai_api_key == ""
    assert settings.required_token == ""
    assert settings.token_required is False
    assert settings.allow_query_token is False
    assert settings.primary_model == DEFAULT_PRIMARY_MODEL
    assert settings.fallback_model == DEFAULT_FALLBACK_MODEL
    assert settings.request_style == "developer_input"
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.timeout is None


def test_reads_all_variables() -> None:
    settings = DigestSettings.from_env(
        {
            "OPENAI_API_KEY": "sk-live",
            "DEEP_TOKEN": "abc",
            "DEEP_ALLOW_QUERY_TOKEN": "Yes",
            "OPENAI_PRIMARY_MODEL": "o3-deep-research-2025-06-26",
            "OPENAI_FALLBACK_MODEL": "gpt-4.1-mini",
            "OPENAI_REQUEST_STYLE": "RESPONSE_FORMAT",
            "OPENAI_BASE_URL": "https://gateway.example/v1/",
            "OPENAI_TIMEOUT": "90",
        }
    )

    assert settings.openai_api_key == "sk-live"
    assert settings.token_required is True
    assert settings.allow_query_token is True
    assert settings.primary_model == "o3-deep-research-2025-06-26"
    assert settings.fallback_model == "gpt-4.1-mini"
    assert settings.request_style == "response_format"
    assert settings.base_url == "https://gateway.example/v1"
    assert settings.timeout == 90.0


def test_reads_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("DEEP_TOKEN", "from-env")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    settings = DigestSettings.from_env()

    assert settings.required_token == "from-env"
    assert settings.openai_api_key == ""


def test_secrets_hidden_from_repr() -> None:
    text = repr(DigestSettings(openai_api_key="sk-secret", required_token="tok-secret"))

    assert "sk-secret" not in text
    assert "tok-secret" not in text


def test_unknown_request_style_rejected() -> None:
    with pytest.raises(ValueError):
        DigestSettings.from_env({"OPENAI_REQUEST_STYLE": "carrier-pigeon"})


def test_bad_timeout_rejected() -> None:
    with pytest.raises(ValueError):
        DigestSettings.from_env({"OPENAI_TIMEOUT": "soon"})


@pytest.mark.parametrize("value", ["", "0", "-5"])
def test_non_positive_timeout_means_no_timeout(value) -> None:
    assert DigestSettings.from_env({"OPENAI_TIMEOUT": value}).timeout is None
