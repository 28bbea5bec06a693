"""Stand-ins for ``requests`` objects used across the test suite."""

from __future__ import annotations

import json
from typing import Any, List, Optional


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeSession:
    """Returns queued responses in order and records every POST."""

    def __init__(self, *responses: FakeResponse) -> None:
        self._responses: List[FakeResponse] = list(responses)
        self.calls: List[dict] = []
        self.closed = False

    def post(self, url, headers=None, json=None, timeout=None):  # noqa: A002 - mirrors requests
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if not self._responses:
            raise AssertionError("unexpected extra request")
        return self._responses.pop(0)

    def close(self) -> None:
        self.closed = True


def responses_envelope(text: str) -> dict:
    """Responses API body carrying ``text`` in the nested output structure."""
    return {
        "output": [
            {"type": "web_search_call", "status": "completed"},
            {"type": "message", "content": [{"type": "output_text", "text": text}]},
        ]
    }
