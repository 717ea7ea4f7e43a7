"""Translation grading endpoint."""
from log import get_logger

logger = get_logger("phrasecoach.evaluate_routes")

from fastapi import APIRouter, Request

from errors import ValidationError
from models import EvaluateRequest
from llm import generate_content, run_until_disconnect, extract_response_text, parse_json_payload
from shaping import shape_evaluation

router = APIRouter()

EVALUATION_SYSTEM = """Você é um professor de inglês para falantes de português.
O aluno recebe uma frase em inglês e escreve a tradução em português.
Dê uma nota de 0 a 10 para a tradução do aluno, considerando significado, gramática e naturalidade.
Responda SOMENTE com JSON válido, sem texto extra:
{"score": <inteiro de 0 a 10>, "feedback": "<explicação curta em português>", "correctTranslation": "<tradução sugerida em português>"}"""


def _required_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'O campo "{field}" é obrigatório e deve ser uma string.')
    return value.strip()


@router.post("/api/evaluate", tags=["Practice"], summary="Grade a learner's translation")
async def evaluate_translation(request: Request, req: EvaluateRequest):
    attempt = _required_text(req.prompt, "prompt")
    original = _required_text(req.originalPhrase, "originalPhrase")

    user_text = (
        f'Frase original em inglês: "{original}"\n'
        f'Tradução do aluno: "{attempt}"'
    )

    envelope = await run_until_disconnect(request, generate_content(
        EVALUATION_SYSTEM, user_text,
        temperature=0.2, top_k=40, top_p=0.95, max_output_tokens=512,
    ))

    text = extract_response_text(envelope)
    result = shape_evaluation(parse_json_payload(text), text)
    logger.info("Evaluation graded", extra={"endpoint": "/api/evaluate", "detail": result.score})
    return {**result.model_dump(), "raw": envelope}
