"""
Shared request dependencies: identity and stack/quiz access checks
"""
from fastapi import Header, HTTPException
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from app.models import Stack, Quiz, Resource


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """
    Requesting user's identifier, supplied by the identity provider

    Raises:
        HTTPException: 401 when the header is missing or blank
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


def get_stack_or_404(db: Session, stack_id: UUID) -> Stack:
    stack = db.query(Stack).filter(Stack.id == stack_id).first()
    if not stack:
        raise HTTPException(status_code=404, detail="Stack not found")
    return stack


def get_owned_stack(db: Session, stack_id: UUID, user_id: str) -> Stack:
    """Stack the user may modify"""
    stack = get_stack_or_404(db, stack_id)
    if not stack.is_owned_by(user_id):
        raise HTTPException(status_code=403, detail="Forbidden: not the stack owner")
    return stack


def get_visible_stack(db: Session, stack_id: UUID, user_id: str) -> Stack:
    """Stack the user may read: owned or public"""
    stack = get_stack_or_404(db, stack_id)
    if not stack.is_visible_to(user_id):
        raise HTTPException(status_code=403, detail="Forbidden: stack is private")
    return stack


def get_quiz_in_stack(db: Session, stack: Stack, quiz_id: UUID) -> Quiz:
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
    if not quiz or quiz.stack_id != stack.id:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz


def get_resource_in_stack(db: Session, stack: Stack, resource_id: UUID) -> Resource:
    resource = db.query(Resource).filter(
        Resource.id == resource_id,
        Resource.stack_id == stack.id
    ).first()
    if not resource:
        raise HTTPException(status_code=404, detail="Resource not found")
    return resource
