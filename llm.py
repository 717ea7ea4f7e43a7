"""Gemini interaction: the upstream call, text extraction and JSON recovery."""
import os
import json
import re as _re
import time
import asyncio
from typing import Any, Optional

from log import get_logger

logger = get_logger("phrasecoach.llm")

import httpx
from fastapi import Request

from errors import (
    ClientDisconnected, ConfigurationError,
    UpstreamError, UpstreamTimeout, UpstreamUnavailable,
)

# --- Config ---
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
GEMINI_API_BASE = os.environ.get("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_TIMEOUT = float(os.environ.get("GEMINI_TIMEOUT", "30"))
DISCONNECT_POLL_INTERVAL = 0.5

# Tests swap in an httpx.MockTransport here.
_transport: Optional[httpx.AsyncBaseTransport] = None

_FENCE_OPEN = _re.compile(r"^```(?:json)?[ \t]*\r?\n?", _re.IGNORECASE)
_FENCE_CLOSE = _re.compile(r"\r?\n?```\s*$")
_JSON_BLOCK = _re.compile(r"\{.*\}|\[.*\]", _re.DOTALL)


def is_configured() -> bool:
    return bool(GEMINI_API_KEY)


def _error_details(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except (ValueError, RecursionError):
        return resp.text


async def generate_content(system_instruction: str, user_text: str, *,
                           temperature: float = 0.7, top_k: int = 40, top_p: float = 0.95,
                           max_output_tokens: int = 1024) -> Any:
    """Call Gemini generateContent and return the decoded response envelope.

    The envelope is returned as-is; callers go through extract_response_text.
    """
    if not GEMINI_API_KEY:
        raise ConfigurationError()

    url = f"{GEMINI_API_BASE}/models/{GEMINI_MODEL}:generateContent"
    body = {
        "systemInstruction": {"parts": [{"text": system_instruction}]},
        "contents": [{"role": "user", "parts": [{"text": user_text}]}],
        "generationConfig": {
            "temperature": temperature,
            "topK": top_k,
            "topP": top_p,
            "maxOutputTokens": max_output_tokens,
        },
    }

    t0 = time.monotonic()
    try:
        async with httpx.AsyncClient(timeout=GEMINI_TIMEOUT, transport=_transport) as client:
            resp = await client.post(url, json=body, headers={"x-goog-api-key": GEMINI_API_KEY})
    except httpx.TimeoutException as e:
        logger.error("Gemini call timed out", exc_info=e,
                     extra={"component": "gemini", "duration_ms": int((time.monotonic() - t0) * 1000)})
        raise UpstreamTimeout() from e
    except httpx.HTTPError as e:
        logger.error("Gemini transport error", exc_info=e, extra={"component": "gemini"})
        raise UpstreamUnavailable() from e

    duration_ms = int((time.monotonic() - t0) * 1000)
    if not resp.is_success:
        details = _error_details(resp)
        logger.error("Gemini API error", extra={
            "component": "gemini", "status_code": resp.status_code,
            "duration_ms": duration_ms, "detail": str(details)[:500],
        })
        raise UpstreamError(details=details)

    logger.info("Gemini call finished", extra={
        "component": "gemini", "status_code": resp.status_code, "duration_ms": duration_ms,
    })
    try:
        return resp.json()
    except (ValueError, RecursionError) as e:
        logger.error("Gemini returned a non-JSON body", extra={"component": "gemini", "detail": resp.text[:500]})
        raise UpstreamUnavailable() from e


async def run_until_disconnect(request: Request, coro) -> Any:
    """Await `coro`, cancelling it if the client hangs up first."""
    task = asyncio.ensure_future(coro)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_INTERVAL)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                logger.info("Client disconnected, upstream call cancelled",
                            extra={"component": "gemini", "endpoint": request.url.path})
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


def extract_response_text(envelope: Any) -> str:
    """Join the text parts of the first candidate. Never raises."""
    if not isinstance(envelope, dict):
        return ""
    candidates = envelope.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0]
    if not isinstance(first, dict):
        return ""
    content = first.get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""

    texts = []
    for part in parts:
        text = part.get("text") if isinstance(part, dict) else None
        texts.append(text if isinstance(text, str) else "")
    return "".join(texts).strip()


def strip_code_fence(text: str) -> str:
    text = text.strip()
    if not text.startswith("```"):
        return text
    text = _FENCE_OPEN.sub("", text, count=1)
    return _FENCE_CLOSE.sub("", text, count=1).strip()


def parse_json_payload(text: Optional[str]) -> Any:
    """Best-effort JSON recovery from a model completion.

    Tries, in order: the whole text (fence stripped), then the first
    greedy {...} or [...] block. Returns None when nothing parses.
    """
    if not text or not text.strip():
        return None

    cleaned = strip_code_fence(text)
    try:
        return json.loads(cleaned)
    except (ValueError, RecursionError):
        pass

    match = _JSON_BLOCK.search(cleaned)
    if match:
        try:
            return json.loads(match.group())
        except (ValueError, RecursionError):
            pass

    logger.warning("Could not parse model output as JSON",
                   extra={"component": "parser", "detail": cleaned[:200]})
    return None
