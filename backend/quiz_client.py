"""HTTP client the game uses to talk to the quiz relay."""
import logging
import re
from typing import List, Optional, Tuple

import requests

import config
from defaults import fallback_category
from models import Category, Question, sorted_by_points

logger = logging.getLogger(__name__)

QUESTION_PREFIX_RE = re.compile(r'^(domanda|question)\s*[:.-]\s*', re.IGNORECASE)
ANSWER_PREFIX_RE = re.compile(r'^(risposta|answer)\s*[:.-]\s*', re.IGNORECASE)

MISSING_QUESTION_TEMPLATES = {
    "it": ("Domanda aggiuntiva da {points} punti per {title}", "Risposta per la domanda da {points} punti"),
    "en": ("Extra {points}-point question for {title}", "Answer for the {points}-point question"),
}


class QuizClientError(Exception):
    """Raised when the relay cannot provide a usable quiz."""
    pass


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _coerce_points(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return config.POINT_TIERS[0]


def _normalize_question(raw: dict, title: str) -> Question:
    points = _coerce_points(raw.get("points"))
    text = str(raw.get("text") or f"Domanda da {points} punti per {title}")
    answer = str(raw.get("answer") or "Risposta mancante")
    qtype = raw.get("type")
    return Question(
        text=_capitalize(QUESTION_PREFIX_RE.sub("", text.strip())),
        answer=_capitalize(ANSWER_PREFIX_RE.sub("", answer.strip())),
        points=points,
        type=qtype if qtype in config.QUESTION_TYPES else "exact",
    )


def _normalize_category(raw: dict, lang: str) -> Category:
    """Keep the first question of each point tier, pad absent tiers, order by points.

    Questions whose points are not a tier are dropped.
    """
    title = raw.get("title")
    questions = raw.get("questions")
    if not title or not isinstance(questions, list):
        raise QuizClientError("Invalid category format")

    by_tier = {}
    for q in questions:
        if not isinstance(q, dict):
            continue
        points = _coerce_points(q.get("points"))
        if points in config.POINT_TIERS and points not in by_tier:
            by_tier[points] = q

    text_tpl, answer_tpl = MISSING_QUESTION_TEMPLATES[config.normalize_language(lang)]
    for points in config.POINT_TIERS:
        if points not in by_tier:
            by_tier[points] = {
                "points": points,
                "text": text_tpl.format(points=points, title=title),
                "answer": answer_tpl.format(points=points),
                "type": "exact",
            }

    normalized = sorted_by_points([_normalize_question(q, title) for q in by_tier.values()])
    return Category(title=str(title), questions=normalized)


def map_generated_categories(data: dict, topics: List[str], lang: str) -> List[Category]:
    if not isinstance(data, dict) or not isinstance(data.get("categories"), list):
        raise QuizClientError("Unrecognized response format")
    categories = [_normalize_category(c if isinstance(c, dict) else {}, lang) for c in data["categories"]]
    for topic in topics[len(categories):]:
        categories.append(fallback_category(topic, lang))
    return categories[:config.NUM_CATEGORIES]


def fallback_categories(topics: List[str], lang: str) -> List[Category]:
    return [fallback_category(topic, lang) for topic in topics]


class QuizClient:
    def __init__(self, base_url: str = config.QUIZ_SERVER_URL,
                 timeout: int = config.QUIZ_CLIENT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_random_categories(self, lang: str = config.DEFAULT_LANGUAGE) -> List[Category]:
        """Fetch a random board from the relay. Raises QuizClientError on any failure."""
        try:
            response = requests.get(f"{self.base_url}/random-quiz",
                                    params={"lang": config.normalize_language(lang)},
                                    timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            return [
                Category(
                    title=str(c["title"]),
                    questions=sorted_by_points([
                        Question(text=str(q["text"]), answer=str(q["answer"]), points=int(q["points"]))
                        for q in c["questions"]
                    ]),
                )
                for c in data["categories"]
            ]
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            logger.error("Error fetching random quiz: %s", e)
            raise QuizClientError("Failed to fetch random quiz") from e

    def generate_categories(self, topics: List[str],
                            lang: str = config.DEFAULT_LANGUAGE) -> Tuple[List[Category], Optional[str]]:
        """Ask the relay for an AI board. Never raises: falls back to sample categories."""
        lang = config.normalize_language(lang)
        try:
            logger.info("Requesting generated quiz for %d topics", len(topics))
            response = requests.post(f"{self.base_url}/generate-quiz",
                                     json={"categories": topics, "lang": lang},
                                     timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            categories = map_generated_categories(data, topics, lang)
            return categories, data.get("quizId") or None
        except (requests.RequestException, ValueError, QuizClientError) as e:
            logger.error("Quiz generation request failed, using fallback categories: %s", e)
            return fallback_categories(topics, lang), None
