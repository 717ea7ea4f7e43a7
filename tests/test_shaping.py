"""Tests for evaluation and phrase shaping."""
import pytest

from errors import ShapingFailure
from llm import parse_json_payload
from models import MAX_PHRASES, NO_RESPONSE_FEEDBACK, MISSING_TRANSLATION
from shaping import (
    clamp_score, clamp_phrase_count, normalize_level,
    shape_evaluation, shape_phrases, split_phrase_lines,
)


@pytest.mark.parametrize("raw, expected", [
    (13.7, 10),
    (-2, 0),
    ("7", 7),
    (" 8.2 ", 8),
    (6.5, 7),
    (0, 0),
    (10, 10),
    (9.49, 9),
])
def test_score_is_clamped_and_rounded(raw, expected):
    assert clamp_score(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", True, [7], {"value": 7}, float("nan"), "inf"])
def test_non_numeric_score_is_absent(raw):
    assert clamp_score(raw) is None


def test_evaluation_with_all_fields():
    result = shape_evaluation(
        {"score": "8", "feedback": "  Boa tradução.  ", "correctTranslation": "Como você está?"},
        "raw",
    )
    assert result.score == 8
    assert result.feedback == "Boa tradução."
    assert result.correctTranslation == "Como você está?"


def test_evaluation_feedback_falls_back_to_raw_text():
    result = shape_evaluation({"score": 3, "feedback": "   "}, "  Nota 3: faltou o sujeito.  ")
    assert result.score == 3
    assert result.feedback == "Nota 3: faltou o sujeito."
    assert result.correctTranslation == MISSING_TRANSLATION


def test_evaluation_without_anything():
    result = shape_evaluation(None, "")
    assert result.score is None
    assert result.feedback == NO_RESPONSE_FEEDBACK
    assert result.correctTranslation == MISSING_TRANSLATION


def test_evaluation_ignores_non_object_payload():
    result = shape_evaluation(["score", 9], "texto livre")
    assert result.score is None
    assert result.feedback == "texto livre"


def test_phrases_dedup_is_case_insensitive_and_ordered():
    batch = shape_phrases(["Hi there", "hi there", "Bye"])
    assert batch.phrases == ["Hi there", "Bye"]


def test_phrases_from_object_wrapper():
    batch = shape_phrases({"phrases": ["  I am hungry. ", "Close the door."]})
    assert batch.phrases == ["I am hungry.", "Close the door."]


def test_phrases_skip_non_strings_and_blanks():
    batch = shape_phrases(["One", 2, None, "   ", {"text": "x"}, "Three"])
    assert batch.phrases == ["One", "Three"]


def test_phrases_truncated_to_requested_count():
    items = [f"Sentence number {i}." for i in range(12)]
    batch = shape_phrases(items, "", 5)
    assert batch.phrases == items[:5]


def test_phrases_hard_cap():
    items = [f"Phrase {i}" for i in range(MAX_PHRASES + 50)]
    batch = shape_phrases(items, "", MAX_PHRASES)
    assert len(batch.phrases) == MAX_PHRASES
    assert batch.phrases[-1] == f"Phrase {MAX_PHRASES - 1}"


def test_phrases_fallback_to_lines():
    raw = "1. Hello there\n2. How are you?\n- hello there\n* Bye\n\n"
    batch = shape_phrases(None, raw)
    assert batch.phrases == ["Hello there", "How are you?", "Bye"]


def test_fallback_only_when_primary_path_is_empty():
    batch = shape_phrases(["Only one."], "Two\nThree")
    assert batch.phrases == ["Only one."]


def test_fallback_used_for_unusable_array():
    batch = shape_phrases([1, 2, None], "- Good morning\n- Good night")
    assert batch.phrases == ["Good morning", "Good night"]


@pytest.mark.parametrize("parsed, raw", [
    (None, ""),
    ([], "   \n - \n 1."),
    ({"phrases": "not a list"}, None),
])
def test_no_usable_phrases_raises(parsed, raw):
    with pytest.raises(ShapingFailure) as excinfo:
        shape_phrases(parsed, raw)
    assert excinfo.value.status_code == 500
    assert excinfo.value.message


def test_split_phrase_lines_strips_markers():
    assert split_phrase_lines("10. Ten\n  * Star\n-- Dash\n3) Paren") == ["Ten", "Star", "Dash", ") Paren"]


@pytest.mark.parametrize("raw, expected", [
    (None, 100),
    (0, 1),
    (-4, 1),
    (500, 200),
    (5.4, 5),
    ("12", 12),
    ("abc", 100),
    (float("inf"), 100),
])
def test_phrase_count_clamping(raw, expected):
    assert clamp_phrase_count(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("hard", "hard"),
    (" MEDIUM ", "medium"),
    ("expert", "easy"),
    (None, "easy"),
    (3, "easy"),
])
def test_level_normalization(raw, expected):
    assert normalize_level(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    (10 ** 400, 10),
    (-(10 ** 400), 0),
    ("1" + "0" * 400, None),
])
def test_oversized_scores_never_raise(raw, expected):
    assert clamp_score(raw) == expected


def test_oversized_count_is_clamped():
    assert clamp_phrase_count(10 ** 400) == 200
    assert clamp_phrase_count(-(10 ** 400)) == 1


def test_evaluation_from_oversized_model_score():
    parsed = parse_json_payload('{"score": 1' + "0" * 400 + ', "feedback": "ok"}')
    result = shape_evaluation(parsed, "x")
    assert result.score == 10
    assert result.feedback == "ok"


def test_phrases_from_deeply_nested_reply_use_line_fallback():
    raw = "[" * 100000 + "]" * 100000 + "\nGood evening."
    batch = shape_phrases(parse_json_payload(raw), raw)
    assert batch.phrases[-1] == "Good evening."
