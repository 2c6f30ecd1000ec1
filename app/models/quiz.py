"""
Quiz model - stores generated quizzes and their generation state
"""
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, func
from sqlalchemy.types import Uuid
from app.database import Base
from app.models.base import JSONType, utcnow
from app.models.enums import QuizStatus
import uuid


class Quiz(Base):
    """
    Quizzes table - questions stay empty until generation flips status to ready
    """
    __tablename__ = "quizzes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    stack_id = Column(Uuid(as_uuid=True), ForeignKey("stacks.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    resource_ids = Column(JSONType, nullable=False, default=list)  # ["<uuid>", ...]
    number_of_questions = Column(Integer, nullable=False)
    use_hots = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default=QuizStatus.GENERATING.value, index=True)
    questions = Column(JSONType, nullable=False, default=list)  # Full question data
    generated_at = Column(DateTime(timezone=True))
    owner_id = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, stack_id={self.stack_id}, status={self.status})>"
