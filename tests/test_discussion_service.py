"""
Tests for the discussion question bank.
"""

from uuid import uuid4

from movie_night_api.app.schemas.age_group import AgeGroup
from movie_night_api.app.schemas.discussion import QuestionCategory
from movie_night_api.app.services.discussion_service import QUESTION_BANK, DiscussionQuestionService


def test_questions_for_each_age_group():
    service = DiscussionQuestionService()
    for group in AgeGroup:
        questions = service.get_questions_for(group)
        assert questions
        assert all(q.age_group == group for q in questions)


def test_questions_by_category():
    service = DiscussionQuestionService()
    morals = service.get_questions_by_category(QuestionCategory.MORALS)
    assert [q.text for q in morals] == [
        "What lesson do you think the movie was trying to teach us?",
        "Was there a moment where a character had to choose between two right things?",
    ]


def test_question_lookup_by_id():
    service = DiscussionQuestionService()
    first = QUESTION_BANK[0]
    assert service.get_question(first.id) == first
    assert service.get_question(uuid4()) is None


def test_question_ids_are_unique():
    assert len({q.id for q in QUESTION_BANK}) == len(QUESTION_BANK)
