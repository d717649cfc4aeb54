from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel
from typing import Any, Optional
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import uvicorn
import logging

import config
config.setup_logging()

from quiz_engine import quiz_engine, _sanitize_text
from pages import render_quiz_page, render_sitemap

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Jeopardy quiz backend")
    logger.info("Pool of %d API keys available", len(quiz_engine.pool))
    if len(quiz_engine.pool) == 0:
        logger.error("No valid API key found in the environment, generation will use fallback quizzes")
    yield
    logger.info("Shutting down Jeopardy quiz backend")


app = FastAPI(title="Jeopardy Quiz Backend", lifespan=lifespan)


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    if any(err.get("type") == "json_invalid" for err in errors):
        logger.warning("Malformed JSON on %s: %s", request.url.path, message)
        return _error(400, "Malformed JSON", message)
    return _error(400, "Invalid request", message)


class GenerateQuizRequest(BaseModel):
    # Validated in the handler: only a missing/empty/non-list value is a 400.
    categories: Any = None
    lang: Optional[Any] = None


@app.post("/generate-quiz")
async def generate_quiz(request: GenerateQuizRequest):
    categories = request.categories
    if not isinstance(categories, list) or len(categories) == 0:
        return _error(400, "Invalid categories", "You must provide an array of categories")
    names = [_sanitize_text(name) for name in categories]
    lang = config.normalize_language(request.lang)
    logger.info("Generating quiz (%s) for categories: %s", lang, ", ".join(names)[:200])
    return await quiz_engine.generate_quiz(names, lang)


@app.get("/random-quiz")
async def random_quiz(request: Request, lang: Optional[str] = None):
    requested = lang or request.headers.get("accept-language", "").split(",")[0]
    return quiz_engine.random_quiz(requested)


@app.get("/quiz/{quiz_id}")
async def quiz_page(quiz_id: str, request: Request):
    store = quiz_engine.store
    if store is None:
        logger.warning("/quiz/%s requested but storage is not configured", quiz_id)
        return PlainTextResponse("Service unavailable: database not configured", status_code=503)
    try:
        quiz = store.get_quiz(quiz_id)
    except Exception as e:
        logger.warning("Lookup of quiz %s failed: %s", quiz_id, e)
        quiz = None
    if not quiz:
        return PlainTextResponse("Quiz not found", status_code=404)
    try:
        categories = store.get_quiz_categories(quiz_id)
    except Exception:
        logger.exception("Error loading categories for public quiz %s", quiz_id)
        return PlainTextResponse("Internal error", status_code=500)
    return HTMLResponse(render_quiz_page(quiz, categories, str(request.url)))


@app.get("/sitemap.xml")
async def sitemap():
    quizzes = []
    store = quiz_engine.store
    if store is None:
        logger.warning("/sitemap.xml requested but storage is not configured; only static pages included")
    else:
        try:
            quizzes = store.list_recent_quizzes(config.SITEMAP_MAX_QUIZZES)
        except Exception as e:
            logger.error("Error listing quizzes for sitemap: %s", e)
    return Response(content=render_sitemap(quizzes), media_type="application/xml")


@app.get("/ping")
async def ping():
    timestamp = datetime.now(timezone.utc).isoformat()
    logger.info("Ping received at %s", timestamp)
    return {"status": "online", "timestamp": timestamp, "message": "Server is up"}


# Configure CORS
origins = [o.strip() for o in config.ALLOWED_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/")
async def root():
    return {"message": "Jeopardy Quiz API is running"}


if __name__ == "__main__":
    uvicorn.run("main:app", host=config.HOST, port=config.PORT, reload=True)
