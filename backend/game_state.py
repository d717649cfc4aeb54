"""Game state machine: a pure reducer over GameState plus a persisting store.

Events are plain dicts with a ``type`` key, e.g.
``{"type": "SELECT_QUESTION", "category_id": ..., "question_id": ...}``.
``reduce`` never raises and never mutates its input: invalid ids, unknown
types or malformed payloads give back the state unchanged.
"""
import asyncio
import logging
import random
from contextlib import contextmanager
from typing import List, Optional

from pydantic import ValidationError

import config
from defaults import default_teams, draw_default_categories, placeholder_categories
from models import EDITABLE_QUESTION_FIELDS, Category, GameState, Team
from quiz_client import QuizClient, QuizClientError

logger = logging.getLogger(__name__)


def initial_state(categories: Optional[List[Category]] = None) -> GameState:
    return GameState(
        categories=categories if categories is not None else draw_default_categories(),
        teams=default_teams(),
    )


def _cleared_selection() -> dict:
    return {"selected_category_id": None, "selected_question_id": None}


def _zeroed(teams: List[Team]) -> List[Team]:
    return [team.model_copy(update={"score": 0}) for team in teams]


def _new_board(state: GameState, categories: List[Category], **extra) -> GameState:
    """Install a board with fresh bookkeeping: no selection, zero scores, first team's turn."""
    update = {
        "categories": categories,
        "teams": _zeroed(state.teams),
        "current_score": 0,
        "current_team_index": 0,
        "is_edit_mode": False,
        **_cleared_selection(),
    }
    update.update(extra)
    return state.model_copy(update=update)


def _replace_question(state: GameState, category_id: str, question_id: str, changes: dict) -> List[Category]:
    return [
        category if category.id != category_id else category.model_copy(update={
            "questions": [
                q.model_copy(update=changes) if q.id == question_id else q
                for q in category.questions
            ],
        })
        for category in state.categories
    ]


def _categories_payload(event: dict) -> Optional[List[Category]]:
    categories = event.get("categories")
    if not isinstance(categories, list):
        return None
    try:
        return [c if isinstance(c, Category) else Category.model_validate(c) for c in categories]
    except ValidationError as e:
        logger.warning("Ignoring malformed categories in %s: %s", event.get("type"), e)
        return None


def reduce(state: GameState, event: dict) -> GameState:
    if not isinstance(event, dict):
        logger.warning("Ignoring malformed game event: %r", event)
        return state
    msg_type = event.get("type")

    if msg_type == "START_GAME":
        categories = _categories_payload(event)
        if categories is None:
            return state
        return _new_board(state, categories, view="team_setup", current_quiz_id=None)

    elif msg_type == "SHOW_AI_SETUP":
        return state.model_copy(update={"view": "ai_setup"})

    elif msg_type == "CREATE_AI_GAME":
        categories = _categories_payload(event)
        if categories is None:
            return state
        quiz_id = event.get("quiz_id")
        extra = {"view": "team_setup"}
        if quiz_id:
            extra["current_quiz_id"] = str(quiz_id)
        return _new_board(state, categories, **extra)

    elif msg_type == "SET_TEAMS":
        teams = event.get("teams")
        if not isinstance(teams, list) or not teams:
            return state
        try:
            teams = [t if isinstance(t, Team) else Team.model_validate(t) for t in teams]
        except ValidationError as e:
            logger.warning("Ignoring malformed teams: %s", e)
            return state
        return state.model_copy(update={
            "teams": _zeroed(teams),
            "current_team_index": 0,
            "view": "playing",
        })

    elif msg_type == "SELECT_QUESTION":
        category = state.find_category(event.get("category_id"))
        if category is None:
            return state
        question = category.find_question(event.get("question_id"))
        if question is None or question.is_answered:
            return state
        return state.model_copy(update={
            "selected_category_id": category.id,
            "selected_question_id": question.id,
        })

    elif msg_type == "ANSWER_QUESTION":
        question = state.selected_question
        if question is None:
            return state
        is_correct = bool(event.get("is_correct"))
        point_change = question.points if is_correct else -question.points
        teams = [
            team.model_copy(update={"score": team.score + point_change}) if i == state.current_team_index else team
            for i, team in enumerate(state.teams)
        ]
        return state.model_copy(update={
            "categories": _replace_question(state, state.selected_category_id, question.id,
                                            {"is_answered": True}),
            "teams": teams,
            "current_team_index": (state.current_team_index + 1) % len(state.teams),
            "current_score": state.current_score + point_change if is_correct else state.current_score,
            **_cleared_selection(),
        })

    elif msg_type == "CLOSE_QUESTION":
        return state.model_copy(update=_cleared_selection())

    elif msg_type == "TOGGLE_EDIT_MODE":
        return state.model_copy(update={"is_edit_mode": not state.is_edit_mode, **_cleared_selection()})

    elif msg_type == "UPDATE_CATEGORY":
        category_id = event.get("category_id")
        title = event.get("title")
        if not isinstance(title, str) or state.find_category(category_id) is None:
            return state
        return state.model_copy(update={"categories": [
            c.model_copy(update={"title": title}) if c.id == category_id else c
            for c in state.categories
        ]})

    elif msg_type == "UPDATE_QUESTION":
        category = state.find_category(event.get("category_id"))
        question_id = event.get("question_id")
        if category is None or category.find_question(question_id) is None:
            return state
        fields = event.get("fields")
        if not isinstance(fields, dict):
            return state
        changes = {k: v for k, v in fields.items() if k in EDITABLE_QUESTION_FIELDS}
        if changes.get("type") not in (None, *config.QUESTION_TYPES):
            changes.pop("type")
        for key in ("text", "answer"):
            if key in changes and not isinstance(changes[key], str):
                changes.pop(key)
        if not changes:
            return state
        return state.model_copy(update={
            "categories": _replace_question(state, category.id, question_id, changes),
        })

    elif msg_type == "RESET_GAME":
        categories = _categories_payload(event)
        if categories is None:
            return state
        return state.model_copy(update={
            "categories": categories,
            "teams": default_teams(),
            "current_score": 0,
            "current_team_index": 0,
            "is_edit_mode": False,
            **_cleared_selection(),
        })

    elif msg_type == "RESET_SCORE":
        return state.model_copy(update={"teams": _zeroed(state.teams), "current_score": 0})

    elif msg_type == "NEXT_TEAM_TURN":
        return state.model_copy(update={
            "current_team_index": (state.current_team_index + 1) % len(state.teams),
        })

    elif msg_type == "CREATE_NEW_GAME":
        categories = _categories_payload(event)
        if categories is None:
            return state
        return _new_board(state, categories, is_edit_mode=True)

    elif msg_type == "BACK_TO_LANDING":
        categories = _categories_payload(event)
        if categories is None:
            return state
        return initial_state(categories)

    elif msg_type == "BACK_TO_TEAM_SETUP":
        return state.model_copy(update={"view": "team_setup"})

    logger.warning("Ignoring unknown game event: %r", msg_type)
    return state


class GameStore:
    """Holds the single GameState and persists it after every dispatch."""

    def __init__(self, storage, quiz_client: Optional[QuizClient] = None,
                 storage_key: str = config.GAME_STATE_KEY,
                 rng: Optional[random.Random] = None,
                 lang: str = config.DEFAULT_LANGUAGE):
        self.storage = storage
        self.storage_key = storage_key
        self.quiz_client = quiz_client or QuizClient()
        self.rng = rng or random.Random()
        self.lang = config.normalize_language(lang)
        self._generation = 0  # bumped by full resets; stale async results are dropped
        self._persist_suppressed = 0
        self.state = self._load()

    # --- persistence ---

    def _load(self) -> GameState:
        try:
            saved = self.storage.get(self.storage_key)
        except OSError as e:
            logger.error("Error reading saved game state: %s", e)
            saved = None
        if saved:
            try:
                return GameState.model_validate_json(saved)
            except ValidationError as e:
                logger.error("Discarding unreadable saved game state: %s", e)
        return initial_state(self._draw_defaults())

    def _persist(self):
        if self._persist_suppressed:
            return
        try:
            self.storage.set(self.storage_key, self.state.model_dump_json())
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving game state: %s", e)

    def _purge(self):
        try:
            self.storage.remove(self.storage_key)
        except OSError as e:
            logger.error("Error clearing saved game state: %s", e)

    @contextmanager
    def suppress_persistence(self):
        self._persist_suppressed += 1
        try:
            yield
        finally:
            self._persist_suppressed -= 1

    def dispatch(self, event: dict) -> GameState:
        self.state = reduce(self.state, event)
        self._persist()
        return self.state

    def _draw_defaults(self) -> List[Category]:
        return draw_default_categories(self.rng)

    def _reset_and_purge(self, event: dict) -> GameState:
        self._generation += 1
        with self.suppress_persistence():
            self._purge()
            self.dispatch(event)
        return self.state

    # --- transitions ---

    async def start_game(self, lang: Optional[str] = None) -> GameState:
        generation = self._generation
        try:
            categories = await asyncio.to_thread(self.quiz_client.fetch_random_categories, lang or self.lang)
        except QuizClientError:
            logger.warning("Random quiz unavailable, starting with default categories")
            categories = self._draw_defaults()
        if generation != self._generation:
            logger.info("Dropping random quiz that arrived after a reset")
            return self.state
        return self.dispatch({"type": "START_GAME", "categories": categories})

    def show_ai_setup(self) -> GameState:
        return self.dispatch({"type": "SHOW_AI_SETUP"})

    def create_ai_game(self, categories: List[Category], quiz_id: Optional[str] = None,
                       generation: Optional[int] = None) -> GameState:
        if generation is not None and generation != self._generation:
            logger.info("Dropping generated quiz that arrived after a reset")
            return self.state
        return self.dispatch({"type": "CREATE_AI_GAME", "categories": categories, "quiz_id": quiz_id})

    async def generate_ai_game(self, topics: List[str], lang: Optional[str] = None) -> GameState:
        generation = self._generation
        categories, quiz_id = await asyncio.to_thread(self.quiz_client.generate_categories,
                                                      topics, lang or self.lang)
        return self.create_ai_game(categories, quiz_id, generation=generation)

    def set_teams_and_start_game(self, teams: List[Team]) -> GameState:
        return self.dispatch({"type": "SET_TEAMS", "teams": teams})

    def select_question(self, category_id: str, question_id: str) -> GameState:
        return self.dispatch({"type": "SELECT_QUESTION", "category_id": category_id, "question_id": question_id})

    def answer_question(self, is_correct: bool) -> GameState:
        return self.dispatch({"type": "ANSWER_QUESTION", "is_correct": is_correct})

    def close_question(self) -> GameState:
        return self.dispatch({"type": "CLOSE_QUESTION"})

    def toggle_edit_mode(self) -> GameState:
        return self.dispatch({"type": "TOGGLE_EDIT_MODE"})

    def update_category(self, category_id: str, title: str) -> GameState:
        return self.dispatch({"type": "UPDATE_CATEGORY", "category_id": category_id, "title": title})

    def update_question(self, category_id: str, question_id: str, **fields) -> GameState:
        return self.dispatch({"type": "UPDATE_QUESTION", "category_id": category_id,
                              "question_id": question_id, "fields": fields})

    def reset_game(self) -> GameState:
        return self._reset_and_purge({"type": "RESET_GAME", "categories": self._draw_defaults()})

    def reset_score(self) -> GameState:
        return self.dispatch({"type": "RESET_SCORE"})

    def next_team_turn(self) -> GameState:
        return self.dispatch({"type": "NEXT_TEAM_TURN"})

    def create_new_game(self) -> GameState:
        return self.dispatch({"type": "CREATE_NEW_GAME", "categories": placeholder_categories(self.lang)})

    def back_to_landing(self) -> GameState:
        return self._reset_and_purge({"type": "BACK_TO_LANDING", "categories": self._draw_defaults()})

    def back_to_team_setup(self) -> GameState:
        return self.dispatch({"type": "BACK_TO_TEAM_SETUP"})

    @property
    def generation(self) -> int:
        return self._generation
