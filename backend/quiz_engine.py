import re
import requests
import json
import logging
import random
from typing import List, Optional

import config
from defaults import fallback_questions
from key_pool import ApiKeyPool
from quiz_store import create_quiz_store

logger = logging.getLogger(__name__)

SYSTEM_MESSAGES = {
    "en": ("You are an expert quiz writer. Produce clear Jeopardy-style questions and concise answers "
           "in English. Respond ONLY with valid JSON according to the requested schema."),
    "it": ("Sei un esperto nella creazione di quiz interattivi. Crea domande chiare in stile Jeopardy "
           "e risposte concise in italiano. Rispondi SOLO con JSON valido secondo lo schema richiesto."),
}

USER_PROMPT_TEMPLATES = {
    "en": """The user provided these {count} categories for a Jeopardy-style quiz: {categories}. Generate a Jeopardy quiz using these {count} categories. Each category must contain 5 questions with point values 100-500. 100-point questions should be easy, 500-point questions should be very hard.

Important rules:
1. Answers MUST NOT be contained in the questions.
2. Questions MUST be phrased as REAL QUESTIONS (with a question mark).
3. Answers must be concise (preferably 1-5 words) and precise.
4. Each question must have exactly one unambiguous correct answer.
5. Ensure factual accuracy.
6. Avoid trivial or obvious questions.
7. Return ONLY a valid JSON object with this exact structure:
{{
  "categories": [
    {{
      "title": "Category Name 1",
      "questions": [
{questions}
      ]
    }}
  ]
}}""",
    "it": """L'utente ha fornito queste {count} categorie per un quiz in stile Jeopardy!: {categories}. Genera un quiz Jeopardy usando queste {count} categorie. Ogni categoria deve contenere 5 domande con punteggi 100-500. Le domande da 100 devono essere facili, quelle da 500 molto difficili.

Regole importanti:
1. Le risposte NON devono essere contenute nelle domande.
2. Le domande DEVONO essere formulate come VERE DOMANDE (con punto interrogativo).
3. Le risposte devono essere concise (preferibilmente 1-5 parole) e precise.
4. Ogni domanda deve avere una sola risposta corretta e non ambigua.
5. Assicurati della correttezza fattuale.
6. Evita domande banali o ovvie.
7. Restituisci SOLO un oggetto JSON valido con questa struttura esatta:
{{
  "categories": [
    {{
      "title": "Nome Categoria 1",
      "questions": [
{questions}
      ]
    }}
  ]
}}""",
}

SCHEMA_PLACEHOLDERS = {
    "en": ("Question text", "Answer text"),
    "it": ("Testo della domanda", "Testo della risposta"),
}

QUIZ_TITLES = {
    "en": "Quiz generated with categories: {categories}",
    "it": "Quiz generato con categorie: {categories}",
}


def build_messages(categories: List[str], lang: str) -> List[dict]:
    text, answer = SCHEMA_PLACEHOLDERS[lang]
    schema_questions = ",\n".join(
        f'        {{"points": {points}, "text": "{text}", "answer": "{answer}"}}'
        for points in config.POINT_TIERS
    )
    user_prompt = USER_PROMPT_TEMPLATES[lang].format(
        count=len(categories),
        categories=", ".join(categories),
        questions=schema_questions,
    )
    return [
        {"role": "system", "content": SYSTEM_MESSAGES[lang]},
        {"role": "user", "content": user_prompt},
    ]


def _sanitize_text(text) -> str:
    """Strip HTML tags and control characters from LLM-generated text."""
    text = re.sub(r'<[^>]+>', '', str(text))
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)
    return text.strip()


MAX_CATEGORY_TITLE_LENGTH = 200
MAX_QUESTION_TEXT_LENGTH = 2000
MAX_ANSWER_LENGTH = 500


def _sanitize_quiz(quiz_data: dict) -> dict:
    """Sanitize all user-visible text fields in quiz output."""
    for category in quiz_data.get("categories", []):
        if "title" in category:
            category["title"] = _sanitize_text(category["title"])[:MAX_CATEGORY_TITLE_LENGTH]
        for q in category.get("questions", []):
            if "text" in q:
                q["text"] = _sanitize_text(q["text"])[:MAX_QUESTION_TEXT_LENGTH]
            if "answer" in q:
                q["answer"] = _sanitize_text(q["answer"])[:MAX_ANSWER_LENGTH]
    return quiz_data


def _validate_quiz(quiz_data, attempt: int) -> bool:
    if not isinstance(quiz_data, dict):
        logger.warning("Attempt %d: LLM returned non-dict type: %s", attempt, type(quiz_data).__name__)
        return False
    if not isinstance(quiz_data.get("categories"), list) or not quiz_data["categories"]:
        logger.warning("Attempt %d: Missing or empty 'categories' field", attempt)
        return False
    for category in quiz_data["categories"]:
        if not isinstance(category, dict) or not isinstance(category.get("questions"), list):
            logger.warning("Attempt %d: Category without a questions list: %s", attempt, category)
            return False
        if not all(isinstance(q, dict) for q in category["questions"]):
            logger.warning("Attempt %d: Category %s has non-object questions", attempt, category.get("title"))
            return False
    return True


BOXED_RE = re.compile(r'\\boxed\s*\{')
CODE_FENCE_RE = re.compile(r'```(?:json)?', re.IGNORECASE)


def strip_wrappers(text: str) -> str:
    """Remove \\boxed{ openers and markdown code fences around model output."""
    text = BOXED_RE.sub('', text)
    return CODE_FENCE_RE.sub('', text)


def find_balanced_object(text: str) -> Optional[str]:
    """Return the first complete {...} object in text, tracking nesting depth.

    Braces inside JSON string literals are ignored.
    """
    start = text.find('{')
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_json(text: str):
    """Recover the JSON object embedded in free-form model output, or None."""
    cleaned = strip_wrappers(text)
    candidate = find_balanced_object(cleaned)
    if candidate is not None:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError as e:
            logger.warning("Balanced-brace candidate is not valid JSON: %s", e)
    try:
        return json.loads(cleaned.strip())
    except json.JSONDecodeError:
        logger.warning("No JSON object found in response: %r", text[:300])
        return None


def fallback_quiz(categories: List[str], lang: str) -> dict:
    return {
        "categories": [
            {"title": name, "questions": fallback_questions(name, lang)}
            for name in categories
        ]
    }


def _is_valid_stored_category(category: dict) -> bool:
    if not isinstance(category, dict):
        return False
    questions = category.get("questions")
    if not isinstance(questions, list) or len(questions) != len(config.POINT_TIERS):
        return False
    if not all(isinstance(q, dict) and type(q.get("points")) is int for q in questions):
        return False
    return sorted(q["points"] for q in questions) == list(config.POINT_TIERS)


def build_random_quiz(stored_categories: List[dict], rng=None) -> Optional[dict]:
    """Pick four stored categories plus a mystery category; None if the pool is too small.

    The mystery question for each tier is drawn from every valid category,
    including the four already on the board.
    """
    rng = rng or random
    valid = [c for c in stored_categories if _is_valid_stored_category(c)]
    if len(valid) < config.NUM_CATEGORIES:
        logger.warning("Only %d valid stored categories, need %d", len(valid), config.NUM_CATEGORIES)
        return None

    shuffled = list(valid)
    rng.shuffle(shuffled)
    selected = [
        {**c, "questions": sorted(c["questions"], key=lambda q: q["points"])}
        for c in shuffled[:config.NUM_RANDOM_CATEGORIES]
    ]

    all_questions = [{**q, "categoryTitle": c["title"]} for c in valid for q in c["questions"]]
    mystery_questions = [
        rng.choice([q for q in all_questions if q["points"] == points])
        for points in config.POINT_TIERS
    ]
    mystery = {
        "id": config.MYSTERY_CATEGORY_ID,
        "title": config.MYSTERY_CATEGORY_TITLE,
        "questions": mystery_questions,
    }
    return {"categories": selected + [mystery]}


class QuizEngine:
    def __init__(self, pool: ApiKeyPool, store=None):
        self.pool = pool
        self.store = store

    def _request_completion(self, api_key, messages: List[dict]) -> str:
        headers = {
            "Authorization": f"Bearer {api_key.value}",
            "HTTP-Referer": config.OPENROUTER_REFERER,
            "X-Title": config.OPENROUTER_APP_TITLE,
            "Content-Type": "application/json",
        }
        payload = {"model": config.OPENROUTER_MODEL, "messages": messages}
        response = requests.post(config.OPENROUTER_URL, json=payload, headers=headers,
                                 timeout=config.OPENROUTER_TIMEOUT)
        response.raise_for_status()
        return response.json()["choices"][0]["message"]["content"] or ""

    def _save(self, quiz_data: dict, categories: List[str], lang: str) -> Optional[str]:
        if self.store is None:
            return None
        try:
            title = QUIZ_TITLES[lang].format(categories=", ".join(categories))
            return self.store.save_quiz(title, quiz_data["categories"])
        except Exception as e:
            logger.error("Error saving generated quiz: %s", e)
            return None

    async def generate_quiz(self, categories: List[str], lang: str = config.DEFAULT_LANGUAGE) -> dict:
        """Generate a board for the given category names; never fails, falls back to sample content."""
        lang = config.normalize_language(lang)
        max_attempts = len(self.pool)
        if max_attempts == 0:
            logger.error("No API keys available, returning fallback quiz")
            return fallback_quiz(categories, lang)

        messages = build_messages(categories, lang)
        for attempt in range(1, max_attempts + 1):
            api_key = self.pool.next()
            if api_key is None:
                break
            try:
                logger.info("OpenRouter attempt %d/%d with API key %d (%s)",
                            attempt, max_attempts, api_key.index + 1, api_key.masked())
                text = self._request_completion(api_key, messages)
                if not text:
                    logger.warning("Attempt %d: Empty completion from OpenRouter", attempt)
                    continue
                quiz_data = extract_json(text)
                if not _validate_quiz(quiz_data, attempt):
                    continue
                quiz_data = _sanitize_quiz(quiz_data)
                quiz_id = self._save(quiz_data, categories, lang)
                if quiz_id:
                    quiz_data["quizId"] = quiz_id
                logger.info("Quiz generated with API key %d: %d categories",
                            api_key.index + 1, len(quiz_data["categories"]))
                return quiz_data
            except requests.Timeout:
                logger.warning("Attempt %d: OpenRouter timed out after %ds", attempt, config.OPENROUTER_TIMEOUT)
            except requests.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                if status == 401:
                    logger.error("Attempt %d: API key %d rejected by OpenRouter", attempt, api_key.index + 1)
                    self.pool.mark_unhealthy(api_key.index)
                else:
                    logger.error("Attempt %d: HTTP error calling OpenRouter: %s", attempt, e)
            except requests.RequestException as e:
                logger.error("Attempt %d: Transport error calling OpenRouter: %s", attempt, e)
            except (KeyError, IndexError, TypeError, ValueError) as e:
                logger.error("Attempt %d: Unexpected OpenRouter response structure: %s", attempt, e)

        logger.error("All %d attempts failed, returning fallback quiz", max_attempts)
        return fallback_quiz(categories, lang)

    def random_quiz(self, lang: str = config.DEFAULT_LANGUAGE, rng=None) -> dict:
        lang = config.normalize_language(lang)
        if self.store is None:
            logger.warning("Random quiz requested but no store is configured, returning fallback (%s)", lang)
            return fallback_quiz(config.FALLBACK_RANDOM_CATEGORIES, lang)
        try:
            quiz = build_random_quiz(self.store.fetch_categories_with_questions(), rng)
        except Exception as e:
            logger.error("Error fetching random quiz: %s", e)
            quiz = None
        if quiz is None:
            return fallback_quiz(config.FALLBACK_RANDOM_CATEGORIES, lang)
        return quiz


quiz_engine = QuizEngine(ApiKeyPool(config.OPENROUTER_API_KEYS), create_quiz_store())
