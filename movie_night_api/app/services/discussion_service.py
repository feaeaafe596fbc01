"""
Built-in bank of post-viewing discussion questions.

Question ids are fixed so answers saved against them stay meaningful
across restarts.
"""

from typing import List, Optional
from uuid import UUID

from ..schemas.age_group import AgeGroup
from ..schemas.discussion import DiscussionQuestion, QuestionCategory, QuestionDifficulty


def _question(
    qid: str,
    text: str,
    category: QuestionCategory,
    difficulty: QuestionDifficulty,
    age_group: AgeGroup,
) -> DiscussionQuestion:
    return DiscussionQuestion(
        id=UUID(qid), text=text, category=category, difficulty=difficulty, age_group=age_group
    )


QUESTION_BANK: List[DiscussionQuestion] = [
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a01",
        "What was your favorite part of the movie?",
        QuestionCategory.EMOTIONS,
        QuestionDifficulty.EASY,
        AgeGroup.PRESCHOOLERS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a02",
        "Which animal or character would you like to have as a friend?",
        QuestionCategory.FRIENDSHIP,
        QuestionDifficulty.EASY,
        AgeGroup.PRESCHOOLERS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a03",
        "What colors do you remember from the movie?",
        QuestionCategory.CREATIVITY,
        QuestionDifficulty.EASY,
        AgeGroup.PRESCHOOLERS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a04",
        "How do you think the character felt when they faced their challenge?",
        QuestionCategory.EMOTIONS,
        QuestionDifficulty.MEDIUM,
        AgeGroup.LITTLE_KIDS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a05",
        "Who helped the main character, and how?",
        QuestionCategory.FRIENDSHIP,
        QuestionDifficulty.EASY,
        AgeGroup.LITTLE_KIDS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a06",
        "If you could go on this adventure, what would you bring?",
        QuestionCategory.ADVENTURE,
        QuestionDifficulty.MEDIUM,
        AgeGroup.LITTLE_KIDS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a07",
        "What would you have done differently if you were the main character?",
        QuestionCategory.CREATIVITY,
        QuestionDifficulty.MEDIUM,
        AgeGroup.BIG_KIDS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a08",
        "Did the family in the movie remind you of our family? How?",
        QuestionCategory.FAMILY,
        QuestionDifficulty.MEDIUM,
        AgeGroup.BIG_KIDS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a09",
        "What is something new you learned from this movie?",
        QuestionCategory.LEARNING,
        QuestionDifficulty.MEDIUM,
        AgeGroup.BIG_KIDS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a10",
        "What lesson do you think the movie was trying to teach us?",
        QuestionCategory.MORALS,
        QuestionDifficulty.HARD,
        AgeGroup.TWEENS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a11",
        "Was there a moment where a character had to choose between two right things?",
        QuestionCategory.MORALS,
        QuestionDifficulty.HARD,
        AgeGroup.TWEENS,
    ),
    _question(
        "0b6c1f0e-6f1a-4b8e-9a51-1d2f0c8e7a12",
        "How would the story change if it happened today?",
        QuestionCategory.GENERAL,
        QuestionDifficulty.HARD,
        AgeGroup.TWEENS,
    ),
]


class DiscussionQuestionService:
    """Look up discussion questions by age group, category or id."""

    def __init__(self, questions: Optional[List[DiscussionQuestion]] = None) -> None:
        self.questions = list(QUESTION_BANK if questions is None else questions)

    def get_all_questions(self) -> List[DiscussionQuestion]:
        return list(self.questions)

    def get_questions_for(self, age_group: AgeGroup) -> List[DiscussionQuestion]:
        return [q for q in self.questions if q.age_group == age_group]

    def get_questions_by_category(self, category: QuestionCategory) -> List[DiscussionQuestion]:
        return [q for q in self.questions if q.category == category]

    def get_question(self, question_id: UUID) -> Optional[DiscussionQuestion]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None
