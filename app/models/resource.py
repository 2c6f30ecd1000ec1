"""
Resource model - a single study item inside a stack
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, func
from sqlalchemy.types import Uuid
from app.database import Base
from app.models.base import utcnow
from app.models.enums import LearningStatus
import uuid


class Resource(Base):
    """
    Resources table - links, documents and images with a learning status
    """
    __tablename__ = "resources"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    stack_id = Column(Uuid(as_uuid=True), ForeignKey("stacks.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    resource_type = Column(String(20), nullable=False)  # youtube, webpage, document, image
    resource_url = Column(String(2048), nullable=False)
    embed_url = Column(String(2048))
    file_path = Column(String(1024))
    user_notes = Column(Text)
    status = Column(String(20), nullable=False, default=LearningStatus.REFERENCE.value)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    def __repr__(self):
        return f"<Resource(id={self.id}, title={self.title}, type={self.resource_type})>"
