"""
Quiz generation service

Creation persists a `generating` quiz and returns immediately. The
background step runs after the response is sent, calls Gemini and writes
the outcome back with one conditional UPDATE, so a quiz leaves
`generating` exactly once and readers never see a partial question set.
"""
import logging
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models import Quiz, QuizAttempt, Resource, Stack, QuizStatus
from app.models.base import utcnow
from app.schemas.quiz import QuizCreate, QuizResponse, ResourceRef
from app.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)


class QuizService:
    """Service for quiz creation, background generation and deletion"""

    def __init__(self, generator=gemini_service, session_factory: Callable[[], Session] = SessionLocal):
        self.generator = generator
        self.session_factory = session_factory

    def resolve_source_resources(
        self,
        db: Session,
        stack_id: UUID,
        resource_ids: List[UUID]
    ) -> Optional[List[Resource]]:
        """
        Load the requested resources, all of which must belong to the stack

        Returns:
            Resources in request order, or None if any id does not resolve
        """
        unique_ids = list(dict.fromkeys(resource_ids))

        resources = db.query(Resource).filter(
            Resource.id.in_(unique_ids),
            Resource.stack_id == stack_id
        ).all()

        if len(resources) != len(unique_ids):
            return None

        by_id = {r.id: r for r in resources}
        return [by_id[rid] for rid in unique_ids]

    def create_quiz(
        self,
        db: Session,
        stack: Stack,
        request: QuizCreate,
        resources: List[Resource],
        owner_id: str
    ) -> Quiz:
        """Persist a quiz in `generating` state with empty questions"""

        quiz = Quiz(
            stack_id=stack.id,
            title=request.title,
            description=request.description,
            resource_ids=[str(r.id) for r in resources],
            number_of_questions=request.number_of_questions,
            use_hots=request.use_hots,
            status=QuizStatus.GENERATING.value,
            questions=[],
            owner_id=owner_id,
        )

        db.add(quiz)
        db.commit()
        db.refresh(quiz)

        logger.info(f"Quiz created: {quiz.id} ({len(resources)} resources, generating)")

        return quiz

    @staticmethod
    def resource_context(resources: List[Resource]) -> List[Dict[str, Any]]:
        """Detach the fields the prompt needs from ORM rows"""
        return [
            {
                "title": r.title,
                "description": r.description,
                "resource_type": r.resource_type,
                "resource_url": r.resource_url,
            }
            for r in resources
        ]

    def run_generation(
        self,
        quiz_id: UUID,
        resources: List[Dict[str, Any]],
        number_of_questions: int,
        use_hots: bool
    ) -> None:
        """
        Background generation step, scheduled once per created quiz

        Never raises: every failure ends up as `status = failed`.
        """
        logger.info(f"Starting background generation for quiz {quiz_id}")

        try:
            questions = self.generator.generate_quiz(
                resources=resources,
                number_of_questions=number_of_questions,
                use_hots=use_hots,
            )
            if not questions:
                raise ValueError("Generator returned no questions")
        except Exception as e:
            logger.error(f"Failed to generate quiz {quiz_id}: {str(e)}", exc_info=True)
            self._mark_failed(quiz_id)
            return

        try:
            completed = self._transition(quiz_id, {
                Quiz.questions: questions,
                Quiz.status: QuizStatus.READY.value,
                Quiz.generated_at: utcnow(),
            })
        except Exception as e:
            logger.error(f"Failed to store questions for quiz {quiz_id}: {str(e)}", exc_info=True)
            self._mark_failed(quiz_id)
            return

        if completed:
            logger.info(f"Successfully generated {len(questions)} questions for quiz {quiz_id}")
        else:
            logger.warning(f"Quiz {quiz_id} was deleted or already finished; result discarded")

    def _mark_failed(self, quiz_id: UUID) -> None:
        try:
            self._transition(quiz_id, {Quiz.status: QuizStatus.FAILED.value})
        except Exception as e:
            logger.error(f"Failed to mark quiz {quiz_id} as failed: {str(e)}", exc_info=True)

    def _transition(self, quiz_id: UUID, values: Dict[Any, Any]) -> bool:
        """Apply a terminal update only if the quiz is still generating"""
        db = self.session_factory()
        try:
            updated = db.query(Quiz).filter(
                Quiz.id == quiz_id,
                Quiz.status == QuizStatus.GENERATING.value
            ).update(values, synchronize_session=False)
            db.commit()
            return updated == 1
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete_quiz(self, db: Session, quiz: Quiz) -> int:
        """Delete a quiz's attempts, then the quiz. Returns attempts removed."""
        quiz_id = quiz.id
        removed = db.query(QuizAttempt).filter(
            QuizAttempt.quiz_id == quiz_id
        ).delete(synchronize_session=False)
        db.flush()

        db.delete(quiz)
        db.commit()

        logger.info(f"Quiz deleted: {quiz_id} (attempts removed: {removed})")

        return removed

    def to_response(self, db: Session, quiz: Quiz) -> QuizResponse:
        return self.to_responses(db, [quiz])[0]

    def to_responses(self, db: Session, quizzes: List[Quiz]) -> List[QuizResponse]:
        """Attach current resource titles; ids that no longer resolve are omitted"""
        wanted = {UUID(str(rid)) for quiz in quizzes for rid in (quiz.resource_ids or [])}

        titles = {}
        if wanted:
            rows = db.query(Resource.id, Resource.title).filter(Resource.id.in_(list(wanted))).all()
            titles = {row.id: row.title for row in rows}

        responses = []
        for quiz in quizzes:
            response = QuizResponse.model_validate(quiz)
            response.resources = [
                ResourceRef(id=rid, title=titles[rid])
                for rid in response.resource_ids
                if rid in titles
            ]
            responses.append(response)

        return responses


# Global instance
quiz_service = QuizService()
