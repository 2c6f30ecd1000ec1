"""
QuizAttempt model - stores scored quiz submissions
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, func
from sqlalchemy.types import Uuid
from app.database import Base
from app.models.base import JSONType, utcnow
import uuid


class QuizAttempt(Base):
    """
    Quiz attempts table - one immutable row per submission
    """
    __tablename__ = "quiz_attempts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quiz_id = Column(Uuid(as_uuid=True), ForeignKey("quizzes.id"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    answers = Column(JSONType, nullable=False)  # [{question_index, selected_answer, is_correct, time_spent}]
    score = Column(Integer, nullable=False)  # Percentage 0-100
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    time_spent = Column(Integer, nullable=False)  # seconds
    completed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    def __repr__(self):
        return f"<QuizAttempt(user_id={self.user_id}, quiz_id={self.quiz_id}, score={self.score})>"
