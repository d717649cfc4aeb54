"""Board, team and game-state models shared by the game store and the quiz client."""
import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


QuestionType = Literal["exact", "open", "tolerant"]
View = Literal["landing", "ai_setup", "team_setup", "playing"]

# Fields the board editor is allowed to change on a question.
EDITABLE_QUESTION_FIELDS = ("text", "answer", "type")


def new_id() -> str:
    return str(uuid.uuid4())


class Question(BaseModel):
    id: str = Field(default_factory=new_id)
    text: str
    answer: str
    points: int
    is_answered: bool = False
    type: Optional[QuestionType] = None


class Category(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    questions: List[Question]

    def find_question(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)


class Team(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    color: str = "#ef4444"
    score: int = 0


class GameState(BaseModel):
    """The whole board as persisted in the storage slot.

    The selection is kept as a pair of ids so that the selected question is
    always resolved from (and therefore belongs to) the selected category.
    """

    categories: List[Category]
    teams: List[Team]
    current_score: int = 0
    current_team_index: int = 0
    selected_category_id: Optional[str] = None
    selected_question_id: Optional[str] = None
    is_edit_mode: bool = False
    view: View = "landing"
    current_quiz_id: Optional[str] = None

    @model_validator(mode="after")
    def check_invariants(self):
        if not self.teams:
            raise ValueError("at least one team is required")
        if not 0 <= self.current_team_index < len(self.teams):
            raise ValueError("current_team_index out of range")
        if (self.selected_category_id is None) != (self.selected_question_id is None):
            raise ValueError("selection must be both-or-neither")
        if self.selected_question_id is not None and self.selected_question is None:
            raise ValueError("selected question is not on the board")
        return self

    def find_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    @property
    def selected_category(self) -> Optional[Category]:
        if self.selected_category_id is None:
            return None
        return self.find_category(self.selected_category_id)

    @property
    def selected_question(self) -> Optional[Question]:
        category = self.selected_category
        if category is None or self.selected_question_id is None:
            return None
        return category.find_question(self.selected_question_id)

    @property
    def current_team(self) -> Team:
        return self.teams[self.current_team_index]

    @property
    def show_landing_page(self) -> bool:
        return self.view == "landing"

    @property
    def show_ai_setup(self) -> bool:
        return self.view == "ai_setup"

    @property
    def show_team_setup(self) -> bool:
        return self.view == "team_setup"


def sorted_by_points(questions: List[Question]) -> List[Question]:
    return sorted(questions, key=lambda q: q.points)
