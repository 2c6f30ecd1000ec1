"""
Pydantic schemas for resource-related requests and responses
"""
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.models.enums import ResourceType, LearningStatus


class ResourceCreate(BaseModel):
    """Schema for adding a resource; type is detected from the URL when omitted"""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    resource_url: str = Field(..., min_length=1, max_length=2048)
    resource_type: Optional[ResourceType] = None
    status: LearningStatus = LearningStatus.REFERENCE
    user_notes: Optional[str] = None


class ResourceUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    resource_url: Optional[str] = Field(None, min_length=1, max_length=2048)
    resource_type: Optional[ResourceType] = None
    status: Optional[LearningStatus] = None
    user_notes: Optional[str] = None


class ResourceResponse(BaseModel):
    id: UUID
    stack_id: UUID
    title: str
    description: Optional[str] = None
    resource_type: ResourceType
    resource_url: str
    embed_url: Optional[str] = None
    file_path: Optional[str] = None
    user_notes: Optional[str] = None
    status: LearningStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
