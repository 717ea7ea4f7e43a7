"""PhraseCoach: translation practice backend backed by Gemini."""
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from log import get_logger

logger = get_logger("phrasecoach.backend")

from errors import ApiError
from llm import GEMINI_MODEL, is_configured
from routes import router

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
PUBLIC_DIR = Path(os.environ.get("PHRASECOACH_PUBLIC_DIR", Path(__file__).parent / "public"))


@asynccontextmanager
async def lifespan(_: FastAPI):
    if not is_configured():
        logger.warning("GEMINI_API_KEY is not set; upstream requests will fail",
                       extra={"component": "config"})
    else:
        logger.info("Gemini configured", extra={"component": "config", "detail": GEMINI_MODEL})
    yield


app = FastAPI(title="PhraseCoach", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(exc.message, extra={"endpoint": request.url.path, "status_code": exc.status_code})
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "Corpo da requisição inválido"
    if problems:
        message += " (" + "; ".join(problems) + ")"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", extra={"endpoint": request.url.path})
    return JSONResponse(status_code=500, content={"error": "Erro interno do servidor."})


app.include_router(router)


class SPAStaticFiles(StaticFiles):
    """Static files with an index.html fallback for client-side routes."""

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404:
                raise
            return await super().get_response("index.html", scope)


if PUBLIC_DIR.is_dir():
    app.mount("/", SPAStaticFiles(directory=str(PUBLIC_DIR), html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
