"""
Discussion question endpoints for API v1.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....dependencies import get_discussion_service
from ....schemas.age_group import AgeGroup
from ....schemas.discussion import DiscussionQuestion, QuestionCategory
from ....services.discussion_service import DiscussionQuestionService


router = APIRouter()


@router.get("/questions", response_model=List[DiscussionQuestion])
async def list_questions(
    age_group: Optional[AgeGroup] = Query(None),
    category: Optional[QuestionCategory] = Query(None),
    service: DiscussionQuestionService = Depends(get_discussion_service),
) -> List[DiscussionQuestion]:
    if age_group is None:
        if category is None:
            return service.get_all_questions()
        return service.get_questions_by_category(category)
    questions = service.get_questions_for(age_group)
    if category is not None:
        questions = [q for q in questions if q.category == category]
    return questions


@router.get("/questions/{question_id}", response_model=DiscussionQuestion)
async def get_question(
    question_id: UUID, service: DiscussionQuestionService = Depends(get_discussion_service)
) -> DiscussionQuestion:
    question = service.get_question(question_id)
    if question is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Question {question_id} not found")
    return question
