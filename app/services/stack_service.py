"""
Stack service: visibility-aware listing, cascading delete and copy
"""
import logging
from typing import List, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.models import Stack, Resource, Quiz, QuizAttempt, LearningStatus

logger = logging.getLogger(__name__)


class StackService:
    """Service for stack operations that touch more than one table"""

    SORT_COLUMNS = {
        "created": Stack.created_at,
        "updated": Stack.updated_at,
    }

    def list_stacks(
        self,
        db: Session,
        user_id: str,
        include_public: bool = True,
        search: str = None,
        sort_by: str = "created",
        sort_order: str = "desc"
    ) -> List[Tuple[Stack, int]]:
        """
        List stacks visible to a user with their resource counts

        Returns:
            List of (stack, resource_count)
        """
        resource_counts = (
            db.query(Resource.stack_id, func.count(Resource.id).label("resource_count"))
            .group_by(Resource.stack_id)
            .subquery()
        )

        query = db.query(
            Stack, func.coalesce(resource_counts.c.resource_count, 0)
        ).outerjoin(resource_counts, resource_counts.c.stack_id == Stack.id)

        if include_public:
            query = query.filter(or_(Stack.owner_id == user_id, Stack.is_public.is_(True)))
        else:
            query = query.filter(Stack.owner_id == user_id)

        if search:
            # % and _ in the search text match literally
            term = search.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{term}%"
            query = query.filter(or_(
                Stack.title.ilike(pattern, escape="\\"),
                Stack.description.ilike(pattern, escape="\\")
            ))

        column = self.SORT_COLUMNS.get(sort_by, Stack.created_at)
        query = query.order_by(column.asc() if sort_order == "asc" else column.desc())

        return [(stack, int(count)) for stack, count in query.all()]

    def delete_stack(self, db: Session, stack: Stack) -> None:
        """
        Delete a stack with everything it owns

        Order: attempts -> quizzes -> resources -> stack, in one transaction.
        """
        stack_id = stack.id
        quiz_ids = [row.id for row in db.query(Quiz.id).filter(Quiz.stack_id == stack.id)]

        try:
            attempts = 0
            if quiz_ids:
                attempts = db.query(QuizAttempt).filter(
                    QuizAttempt.quiz_id.in_(quiz_ids)
                ).delete(synchronize_session=False)

            quizzes = db.query(Quiz).filter(Quiz.stack_id == stack_id).delete(synchronize_session=False)
            resources = db.query(Resource).filter(
                Resource.stack_id == stack_id
            ).delete(synchronize_session=False)

            db.delete(stack)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(
            f"Stack deleted: {stack_id} (resources={resources}, quizzes={quizzes}, attempts={attempts})"
        )

    def copy_stack(self, db: Session, stack: Stack, new_owner_id: str) -> Stack:
        """
        Copy a stack and its resources to a new owner

        The copy is private; resource progress and notes are reset.
        """
        copied = Stack(
            title=f"{stack.title} (Copy)",
            description=stack.description,
            emoji=stack.emoji,
            is_public=False,
            owner_id=new_owner_id,
        )
        db.add(copied)
        db.flush()

        source_resources = db.query(Resource).filter(Resource.stack_id == stack.id).all()
        for resource in source_resources:
            db.add(Resource(
                stack_id=copied.id,
                title=resource.title,
                description=resource.description,
                resource_type=resource.resource_type,
                resource_url=resource.resource_url,
                embed_url=resource.embed_url,
                file_path=resource.file_path,
                status=LearningStatus.REFERENCE.value,
            ))

        db.commit()
        db.refresh(copied)

        logger.info(f"Stack {stack.id} copied to {copied.id} for {new_owner_id}")

        return copied


# Global instance
stack_service = StackService()
