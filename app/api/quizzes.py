"""
Quiz generation and attempt API endpoints
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from app.api.deps import get_current_user_id, get_owned_stack, get_visible_stack, get_quiz_in_stack
from app.database import get_db
from app.models import Quiz, QuizAttempt, QuizStatus
from app.schemas.quiz import QuizCreate, QuizResponse, AttemptCreate, AttemptResponse
from app.services.grading_service import grading_service
from app.services.quiz_service import quiz_service


router = APIRouter(prefix="/api/v1/stacks/{stack_id}/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.post("", response_model=QuizResponse, status_code=201)
async def create_quiz(
    stack_id: UUID,
    request: QuizCreate,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Create a quiz and generate its questions in the background

    - Requester must own the stack
    - Every resource id must belong to the stack
    - Returns immediately with status "generating"; poll the quiz for
      "ready" or "failed"
    """

    stack = get_owned_stack(db, stack_id, user_id)

    resources = quiz_service.resolve_source_resources(db, stack.id, request.resource_ids)
    if resources is None:
        raise HTTPException(status_code=400, detail="Some resources not found")

    try:
        quiz = quiz_service.create_quiz(db, stack, request, resources, owner_id=user_id)
    except Exception as e:
        logger.error(f"Failed to create quiz: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create quiz")

    response = quiz_service.to_response(db, quiz)

    # Runs after the response is sent
    background_tasks.add_task(
        quiz_service.run_generation,
        quiz.id,
        quiz_service.resource_context(resources),
        request.number_of_questions,
        request.use_hots,
    )

    return response


@router.get("", response_model=List[QuizResponse])
async def list_quizzes(
    stack_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List a stack's quizzes, newest first, with resolved resource titles"""

    stack = get_visible_stack(db, stack_id, user_id)

    quizzes = db.query(Quiz).filter(
        Quiz.stack_id == stack.id
    ).order_by(Quiz.created_at.desc()).all()

    return quiz_service.to_responses(db, quizzes)


@router.get("/{quiz_id}", response_model=QuizResponse)
async def get_quiz(
    stack_id: UUID,
    quiz_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Fetch one quiz; used for polling generation status"""

    stack = get_visible_stack(db, stack_id, user_id)
    quiz = get_quiz_in_stack(db, stack, quiz_id)

    return quiz_service.to_response(db, quiz)


@router.delete("/{quiz_id}")
async def delete_quiz(
    stack_id: UUID,
    quiz_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete a quiz and all of its attempts (attempts first)"""

    stack = get_owned_stack(db, stack_id, user_id)
    quiz = get_quiz_in_stack(db, stack, quiz_id)

    try:
        quiz_service.delete_quiz(db, quiz)
    except Exception as e:
        logger.error(f"Failed to delete quiz {quiz_id}: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete quiz")

    return {"message": "Quiz deleted successfully"}


@router.post("/{quiz_id}/attempts", response_model=AttemptResponse, status_code=201)
async def submit_attempt(
    stack_id: UUID,
    quiz_id: UUID,
    submission: AttemptCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Submit and grade a quiz attempt

    Grading strategy:
    - Answers are matched to questions by position
    - Score = round(100 * correct / total), halves rounded up
    """

    stack = get_visible_stack(db, stack_id, user_id)
    quiz = get_quiz_in_stack(db, stack, quiz_id)

    if quiz.status != QuizStatus.READY:
        raise HTTPException(status_code=400, detail="Quiz is not ready")

    try:
        graded, correct_count, score = grading_service.grade_attempt(
            questions=quiz.questions,
            answers=submission.answers,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    attempt = QuizAttempt(
        quiz_id=quiz.id,
        user_id=user_id,
        answers=graded,
        score=score,
        total_questions=len(quiz.questions),
        correct_answers=correct_count,
        time_spent=submission.time_spent,
    )

    try:
        db.add(attempt)
        db.commit()
        db.refresh(attempt)
    except Exception as e:
        logger.error(f"Failed to save attempt: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to save quiz attempt")

    logger.info(f"Quiz attempt saved: {attempt.id}, score: {score}% ({correct_count}/{len(quiz.questions)})")

    return attempt


@router.get("/{quiz_id}/attempts", response_model=List[AttemptResponse])
async def list_attempts(
    stack_id: UUID,
    quiz_id: UUID,
    limit: Optional[int] = Query(None, ge=1, description="Return only the newest N"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """The requester's attempts for a quiz, newest first"""

    stack = get_visible_stack(db, stack_id, user_id)
    quiz = get_quiz_in_stack(db, stack, quiz_id)

    query = db.query(QuizAttempt).filter(
        QuizAttempt.quiz_id == quiz.id,
        QuizAttempt.user_id == user_id
    ).order_by(QuizAttempt.completed_at.desc(), QuizAttempt.created_at.desc())

    if limit:
        query = query.limit(limit)

    return query.all()
