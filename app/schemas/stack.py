"""
Pydantic schemas for stack-related requests and responses
"""
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime


class StackCreate(BaseModel):
    """Schema for creating a stack"""
    title: str = Field(..., min_length=1, max_length=255, description="Stack title")
    description: Optional[str] = None
    emoji: Optional[str] = Field(None, max_length=16)
    is_public: bool = False


class StackUpdate(BaseModel):
    """Partial update; omitted fields are left untouched"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    emoji: Optional[str] = Field(None, max_length=16)
    is_public: Optional[bool] = None


class StackResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    emoji: Optional[str] = None
    is_public: bool
    owner_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StackListItem(StackResponse):
    """Stack summary with its resource count"""
    resource_count: int = 0


class StackProgress(BaseModel):
    """Learning progress over a stack's non-reference resources"""
    total: int
    todo: int
    inprogress: int
    done: int
    percent: int
