"""
Stack model - named collections of study resources
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, func
from sqlalchemy.types import Uuid
from app.database import Base
from app.models.base import utcnow
import uuid


class Stack(Base):
    """
    Stacks table - owns resources and quizzes
    """
    __tablename__ = "stacks"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    emoji = Column(String(16))
    is_public = Column(Boolean, nullable=False, default=False)
    owner_id = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == user_id

    def is_visible_to(self, user_id: str) -> bool:
        return self.is_public or self.is_owned_by(user_id)

    def __repr__(self):
        return f"<Stack(id={self.id}, title={self.title}, owner={self.owner_id})>"
