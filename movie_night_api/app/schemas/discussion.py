"""
Pydantic models for post-viewing discussion questions.
"""

from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from .age_group import AgeGroup


class QuestionCategory(str, Enum):
    EMOTIONS = "emotions"
    MORALS = "morals"
    CREATIVITY = "creativity"
    LEARNING = "learning"
    FAMILY = "family"
    FRIENDSHIP = "friendship"
    ADVENTURE = "adventure"
    GENERAL = "general"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class QuestionDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class DiscussionQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    text: str
    category: QuestionCategory
    difficulty: QuestionDifficulty
    age_group: AgeGroup
