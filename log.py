"""Structured logging for PhraseCoach.

Emits one JSON object per line on stderr.
PHRASECOACH_LOG_LEVEL controls verbosity (DEBUG/INFO/WARNING/ERROR).
PHRASECOACH_LOG_FORMAT=text switches to human-readable lines.
"""
import logging
import json
import os
import sys
from typing import Any

_EXTRA_FIELDS = ("component", "detail", "duration_ms", "count", "endpoint", "status_code")


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["error"] = str(record.exc_info[1])
            entry["error_type"] = type(record.exc_info[1]).__name__
        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val
        return json.dumps(entry, ensure_ascii=False, default=str)


def get_logger(name: str = "phrasecoach") -> logging.Logger:
    """Get or create a structured logger.

    Usage:
        from log import get_logger
        logger = get_logger("phrasecoach.llm")
        logger.info("Upstream call finished", extra={"component": "gemini", "duration_ms": 812})
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        level = os.environ.get("PHRASECOACH_LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, level, logging.INFO))

        handler = logging.StreamHandler(sys.stderr)
        if os.environ.get("PHRASECOACH_LOG_FORMAT", "json") == "text":
            handler.setFormatter(logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            ))
        else:
            handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    return logger
