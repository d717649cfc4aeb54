"""Supabase-backed storage for generated quizzes and the random-quiz category pool."""
import logging
from typing import List, Optional

from supabase import create_client

import config

logger = logging.getLogger(__name__)


class QuizStore:
    """Thin wrapper over the quizzes / categories / questions tables."""

    def __init__(self, client):
        self.client = client

    def fetch_categories_with_questions(self) -> List[dict]:
        result = self.client.table("categories").select(
            "id, title, questions (text, answer, points)"
        ).execute()
        return result.data or []

    def save_quiz(self, title: str, categories: List[dict]) -> str:
        """Insert a quiz with its categories and questions; return the new quiz id."""
        quiz_rows = self.client.table("quizzes").insert({
            "title": title,
            "created_by": None,
        }).execute().data
        quiz_id = quiz_rows[0]["id"]

        for position, category in enumerate(categories, start=1):
            category_rows = self.client.table("categories").insert({
                "quiz_id": quiz_id,
                "title": category.get("title"),
                "position": position,
            }).execute().data
            category_id = category_rows[0]["id"]

            questions = [
                {
                    "category_id": category_id,
                    "points": q.get("points"),
                    "text": q.get("text"),
                    "answer": q.get("answer"),
                }
                for q in category.get("questions", [])
            ]
            if questions:
                self.client.table("questions").insert(questions).execute()

        logger.info("Quiz %s saved with %d categories", quiz_id, len(categories))
        return str(quiz_id)

    def get_quiz(self, quiz_id: str) -> Optional[dict]:
        rows = self.client.table("quizzes").select("id, title, created_at").eq("id", quiz_id).limit(1).execute().data
        return rows[0] if rows else None

    def get_quiz_categories(self, quiz_id: str) -> List[dict]:
        result = self.client.table("categories").select("id, title, position").eq(
            "quiz_id", quiz_id
        ).order("position").execute()
        return result.data or []

    def list_recent_quizzes(self, limit: int = config.SITEMAP_MAX_QUIZZES) -> List[dict]:
        result = self.client.table("quizzes").select("id, created_at").order(
            "created_at", desc=True
        ).limit(limit).execute()
        return result.data or []


def create_quiz_store() -> Optional[QuizStore]:
    """Return a store when Supabase is configured and reachable, else None."""
    if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_ROLE_KEY:
        logger.warning("SUPABASE_URL and/or SUPABASE_SERVICE_ROLE_KEY not set, storage features disabled")
        return None
    try:
        client = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)
    except Exception as e:
        logger.error("Failed to create Supabase client: %s", e)
        return None
    logger.info("Supabase client created")
    return QuizStore(client)
