"""API router assembly for PhraseCoach."""
from fastapi import APIRouter

from errors import NotFoundError
from llm import GEMINI_MODEL, is_configured
from evaluate_routes import router as evaluate_router
from phrase_routes import router as phrase_router

router = APIRouter()
router.include_router(evaluate_router)
router.include_router(phrase_router)


@router.get("/api/health", tags=["Meta"], summary="Liveness and upstream configuration")
async def health():
    return {
        "status": "ok",
        "upstream": {"configured": is_configured(), "model": GEMINI_MODEL},
    }


@router.api_route("/api/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def unknown_api_route(path: str):
    # keeps unmatched /api paths away from the SPA fallback
    raise NotFoundError(f"Rota /api/{path} não encontrada.")
