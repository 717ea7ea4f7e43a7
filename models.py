"""Pydantic schemas and constants for PhraseCoach."""
from typing import Optional, List
from pydantic import BaseModel

# --- Constants ---
MAX_PHRASES = 200
DEFAULT_PHRASE_COUNT = 100

PHRASE_LEVELS = ("easy", "medium", "hard")
DEFAULT_LEVEL = "easy"

LEVEL_DESCRIPTIONS = {
    "easy": "very short everyday sentences (3 to 6 words) using basic vocabulary and the simple present",
    "medium": "everyday sentences (6 to 10 words) mixing past, future and common phrasal verbs",
    "hard": "longer sentences (10 to 16 words) with idioms, conditionals and less common vocabulary",
}

NO_RESPONSE_FEEDBACK = "Nenhuma resposta recebida do modelo."
MISSING_TRANSLATION = "Tradução não fornecida."

# --- Request Models ---
# Fields are optional so that missing values reach the handlers and are
# reported as 400 with our own message instead of a 422.

class EvaluateRequest(BaseModel):
    prompt: Optional[str] = None           # learner's translation
    originalPhrase: Optional[str] = None   # English phrase being translated


class PhrasesRequest(BaseModel):
    count: Optional[float] = None
    level: Optional[str] = None


# --- Shaped Results ---

class EvaluationResult(BaseModel):
    score: Optional[int] = None
    feedback: str
    correctTranslation: str


class PhraseBatch(BaseModel):
    phrases: List[str]
