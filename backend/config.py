"""Centralized configuration: all env vars in one place."""
import os
import logging
from dotenv import load_dotenv

load_dotenv()

# --- OpenRouter / LLM ---
OPENROUTER_URL = os.getenv("OPENROUTER_URL", "https://openrouter.ai/api/v1/chat/completions")
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "mistralai/mistral-small-3.2-24b-instruct:free")
OPENROUTER_TIMEOUT = int(os.getenv("OPENROUTER_TIMEOUT", "30"))
OPENROUTER_REFERER = os.getenv("OPENROUTER_REFERER", "https://jeopardy-b937.onrender.com")
OPENROUTER_APP_TITLE = os.getenv("OPENROUTER_APP_TITLE", "Jeopardy Quiz App")

# Empty slots are dropped; the pool size is fixed from here on.
OPENROUTER_API_KEYS = [
    key.strip() for key in (
        os.getenv("OPENROUTER_API_KEY", ""),
        os.getenv("OPENROUTER_API_KEY_2", ""),
        os.getenv("OPENROUTER_API_KEY_3", ""),
    ) if key and key.strip()
]

# --- Supabase ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

# --- Server ---
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "https://jeopard.netlify.app,http://localhost:5173,http://localhost:3000,http://localhost:5174",
)
SITE_URL = os.getenv("SITE_URL", "https://jeopardyonline.it").rstrip("/")
SITEMAP_MAX_QUIZZES = 1000

# --- Client (game side) ---
QUIZ_SERVER_URL = os.getenv("QUIZ_SERVER_URL", "http://localhost:3001").rstrip("/")
QUIZ_CLIENT_TIMEOUT = int(os.getenv("QUIZ_CLIENT_TIMEOUT", "60"))
GAME_STATE_FILE = os.getenv("GAME_STATE_FILE", ".jeopardy_state.json")
GAME_STATE_KEY = os.getenv("GAME_STATE_KEY", "jeopardyGameState")

# --- Game ---
POINT_TIERS = (100, 200, 300, 400, 500)
NUM_CATEGORIES = 5
NUM_RANDOM_CATEGORIES = 4  # plus the mystery category
MYSTERY_CATEGORY_ID = "mystery"
MYSTERY_CATEGORY_TITLE = "???"
QUESTION_TYPES = ("exact", "open", "tolerant")
SUPPORTED_LANGUAGES = ("it", "en")
DEFAULT_LANGUAGE = "it"
FALLBACK_RANDOM_CATEGORIES = ["General", "History", "Science", "Music", "Cinema"]

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "")  # empty = stdout only


def normalize_language(lang) -> str:
    """Map any language tag onto one of SUPPORTED_LANGUAGES by prefix."""
    if isinstance(lang, str) and lang.strip().lower().startswith("en"):
        return "en"
    return DEFAULT_LANGUAGE


def setup_logging():
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if LOG_FILE:
        handlers.append(logging.FileHandler(LOG_FILE))
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
