from __future__ import annotations

import io
import json
import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[2]
sys.path[:0] = [str(PROJECT_ROOT), str(PROJECT_ROOT / "backend"), str(PROJECT_ROOT / "backend" / "tests")]

import cli  # noqa: E402
from core.openai_client import OpenAIResponsesClient  # noqa: E402
from fakes import FakeResponse, FakeSession  # noqa: E402


def _run(monkeypatch, session, *args):
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(OpenAIResponsesClient, "_get_session", lambda self: session)
    out = io.StringIO()
    code = cli.main(list(args), out=out)
    return code, json.loads(out.getvalue())


def test_prints_digest(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    text = json.dumps({"articles": [{"url": "https://pv.example/news", "title": "News"}]})
    session = FakeSession(FakeResponse(200, {"output_text": text}))

    code, payload = _run(monkeypatch, session, "--pretty")

    assert code == 0
    assert payload == {"articles": [{"url": "https://pv.example/news", "title": "News"}]}


def test_upstream_failure_exit_code(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    session = FakeSession(FakeResponse(400, text="bad request"))

    code, payload = _run(monkeypatch, session)

    assert code == 2
    assert payload == {"error": "OpenAI call failed", "detail": "bad request"}


def test_missing_key_exit_code(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    code, payload = _run(monkeypatch, FakeSession())

    assert code == 1
    assert payload["error"] == "Server error"
    assert "OPENAI_API_KEY" in payload["detail"]
