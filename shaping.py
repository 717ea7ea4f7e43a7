"""Turn loosely-typed model output into the strict response contracts."""
import math
import re as _re
from typing import Any, Iterable, List, Optional

from log import get_logger

logger = get_logger("phrasecoach.shaping")

from errors import ShapingFailure
from models import (
    MAX_PHRASES, DEFAULT_PHRASE_COUNT, PHRASE_LEVELS, DEFAULT_LEVEL,
    NO_RESPONSE_FEEDBACK, MISSING_TRANSLATION,
    EvaluationResult, PhraseBatch,
)

_LIST_MARKER = _re.compile(r"^[-*\d.\s]+")
_INT_BOUND = 10 ** 6


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def coerce_number(value: Any) -> Optional[float]:
    """Return a finite float for numeric-looking values, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        # huge ints are finite but overflow float(); pin them well past every clamp bound
        number = float(max(-_INT_BOUND, min(value, _INT_BOUND)))
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def clamp_score(value: Any) -> Optional[int]:
    number = coerce_number(value)
    if number is None:
        return None
    return _round_half_up(min(10.0, max(0.0, number)))


def clamp_phrase_count(value: Any) -> int:
    number = coerce_number(value)
    if number is None:
        return DEFAULT_PHRASE_COUNT
    return min(MAX_PHRASES, max(1, _round_half_up(number)))


def normalize_level(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in PHRASE_LEVELS:
        return value.strip().lower()
    return DEFAULT_LEVEL


def _text_field(payload: dict, key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def shape_evaluation(parsed: Any, raw_text: str = "") -> EvaluationResult:
    """Build an EvaluationResult; every field has a fallback so this never fails."""
    payload = parsed if isinstance(parsed, dict) else {}

    feedback = _text_field(payload, "feedback") or (raw_text or "").strip() or NO_RESPONSE_FEEDBACK
    correct = _text_field(payload, "correctTranslation") or MISSING_TRANSLATION

    return EvaluationResult(
        score=clamp_score(payload.get("score")),
        feedback=feedback,
        correctTranslation=correct,
    )


def collect_unique_phrases(items: Iterable[Any], limit: int = MAX_PHRASES) -> List[str]:
    """Trimmed, non-empty strings, case-insensitively unique, in first-seen order."""
    seen = set()
    phrases = []
    for item in items:
        if not isinstance(item, str):
            continue
        phrase = item.strip()
        if not phrase:
            continue
        key = phrase.casefold()
        if key in seen:
            continue
        seen.add(key)
        phrases.append(phrase)
        if len(phrases) >= limit:
            break
    return phrases


def split_phrase_lines(raw_text: str) -> List[str]:
    """Split a plain-text list into lines, dropping bullets and numbering."""
    lines = []
    for line in raw_text.splitlines():
        line = _LIST_MARKER.sub("", line).strip()
        if line:
            lines.append(line)
    return lines


def _candidate_items(parsed: Any) -> list:
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict) and isinstance(parsed.get("phrases"), list):
        return parsed["phrases"]
    return []


def shape_phrases(parsed: Any, raw_text: str = "", count: int = MAX_PHRASES) -> PhraseBatch:
    """Build a PhraseBatch of at most `count` phrases.

    Falls back to line-splitting `raw_text` only when the structured value
    yields no phrases at all. Raises ShapingFailure when both paths are empty.
    """
    phrases = collect_unique_phrases(_candidate_items(parsed))

    if not phrases and raw_text and raw_text.strip():
        phrases = collect_unique_phrases(split_phrase_lines(raw_text))
        if phrases:
            logger.info("Phrases recovered from plain-text lines",
                        extra={"component": "shaping", "count": len(phrases)})

    if not phrases:
        raise ShapingFailure("Não foi possível obter frases válidas da resposta do modelo.")

    return PhraseBatch(phrases=phrases[:count])
