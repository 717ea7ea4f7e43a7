"""Practice phrase generation endpoint."""
from typing import Optional

from log import get_logger

logger = get_logger("phrasecoach.phrase_routes")

from fastapi import APIRouter, Request

from models import PhrasesRequest, LEVEL_DESCRIPTIONS
from llm import generate_content, run_until_disconnect, extract_response_text, parse_json_payload
from shaping import clamp_phrase_count, normalize_level, shape_phrases

router = APIRouter()

PHRASES_SYSTEM = "You write English practice sentences for Brazilian learners. Return valid JSON only."


def _max_tokens_for(count: int) -> int:
    # roughly 20 tokens per short sentence plus JSON overhead
    return min(8192, max(1024, count * 24 + 256))


@router.post("/api/phrases", tags=["Practice"], summary="Generate practice phrases")
async def generate_phrases(request: Request, req: Optional[PhrasesRequest] = None):
    req = req or PhrasesRequest()
    count = clamp_phrase_count(req.count)
    level = normalize_level(req.level)

    prompt = f"""Write {count} different English sentences for translation practice.
Difficulty: {level} ({LEVEL_DESCRIPTIONS[level]}).
Every sentence must be unique, natural and self-contained. No numbering, no explanations.
Return ONLY a JSON array of strings, for example: ["I like coffee.", "Where is the bus stop?"]"""

    envelope = await run_until_disconnect(request, generate_content(
        PHRASES_SYSTEM, prompt,
        temperature=0.9, top_k=64, top_p=0.95, max_output_tokens=_max_tokens_for(count),
    ))

    text = extract_response_text(envelope)
    batch = shape_phrases(parse_json_payload(text), text, count)
    logger.info("Phrases generated", extra={"endpoint": "/api/phrases", "count": len(batch.phrases)})
    return {"phrases": batch.phrases, "raw": envelope}
