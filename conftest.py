"""Shared fixtures for the PhraseCoach test suite."""
import json
import logging

import httpx
import pytest
from fastapi.testclient import TestClient

import llm


def gemini_envelope(text: str) -> dict:
    """A generateContent response whose first candidate carries `text` in two parts."""
    half = len(text) // 2
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text[:half]}, {"text": text[half:]}]},
                "finishReason": "STOP",
            }
        ],
        "modelVersion": "gemini-1.5-flash",
    }


class FakeGemini:
    """Programmable stand-in for the Gemini API, served through httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = gemini_envelope("{}")
        self.error = None

    def reply_text(self, text: str):
        self.status_code = 200
        self.body = gemini_envelope(text)

    def reply(self, status_code: int, body):
        self.status_code = status_code
        self.body = body

    def raise_error(self, exc_cls):
        self.error = exc_cls

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error("simulated failure", request=request)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, text=self.body)

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture()
def upstream(monkeypatch):
    fake = FakeGemini()
    monkeypatch.setattr(llm, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(llm, "_transport", httpx.MockTransport(fake.handler))
    return fake


@pytest.fixture()
def client(upstream):
    from backend import app
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def captured_logs(caplog):
    """Attach caplog to our non-propagating loggers; call with a logger name to read its records."""
    attached = []

    def _records(name: str):
        return [r for r in caplog.records if r.name == name]

    def _attach(name: str):
        logger = logging.getLogger(name)
        logger.addHandler(caplog.handler)
        attached.append(logger)

    for name in ("phrasecoach.backend", "phrasecoach.llm", "phrasecoach.shaping"):
        _attach(name)
    yield _records
    for logger in attached:
        logger.removeHandler(caplog.handler)
