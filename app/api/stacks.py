"""
Stack management API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Literal, Optional
from uuid import UUID
import logging

from app.api.deps import get_current_user_id, get_owned_stack, get_visible_stack
from app.database import get_db
from app.models import Stack, Resource
from app.schemas.stack import StackCreate, StackUpdate, StackResponse, StackListItem, StackProgress
from app.services.resource_service import resource_service
from app.services.stack_service import stack_service

router = APIRouter(prefix="/api/v1/stacks", tags=["stacks"])
logger = logging.getLogger(__name__)


@router.post("", response_model=StackResponse, status_code=201)
async def create_stack(
    request: StackCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a stack owned by the requester"""

    stack = Stack(owner_id=user_id, **request.model_dump())

    try:
        db.add(stack)
        db.commit()
        db.refresh(stack)
    except Exception as e:
        logger.error(f"Failed to create stack: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create stack")

    logger.info(f"Stack created: {stack.id} by {user_id}")

    return stack


@router.get("", response_model=List[StackListItem])
async def list_stacks(
    include_public: bool = True,
    search: Optional[str] = None,
    sort_by: Literal["created", "updated"] = "created",
    sort_order: Literal["asc", "desc"] = "desc",
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    List stacks visible to the requester

    - Own stacks, plus public stacks unless include_public=false
    - Optional case-insensitive search on title and description
    - Each item carries its resource count
    """
    rows = stack_service.list_stacks(
        db,
        user_id,
        include_public=include_public,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    return [
        StackListItem(**StackResponse.model_validate(stack).model_dump(), resource_count=count)
        for stack, count in rows
    ]


@router.get("/{stack_id}", response_model=StackResponse)
async def get_stack(
    stack_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return get_visible_stack(db, stack_id, user_id)


@router.put("/{stack_id}", response_model=StackResponse)
async def update_stack(
    stack_id: UUID,
    request: StackUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Partially update a stack (owner only)"""

    stack = get_owned_stack(db, stack_id, user_id)

    for field, value in request.model_dump(exclude_unset=True).items():
        if field in ("title", "is_public") and value is None:
            continue
        setattr(stack, field, value)

    try:
        db.commit()
        db.refresh(stack)
    except Exception as e:
        logger.error(f"Failed to update stack {stack_id}: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update stack")

    return stack


@router.delete("/{stack_id}")
async def delete_stack(
    stack_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Delete a stack with its resources, quizzes and attempts (owner only)"""

    stack = get_owned_stack(db, stack_id, user_id)

    try:
        stack_service.delete_stack(db, stack)
    except Exception as e:
        logger.error(f"Failed to delete stack {stack_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete stack")

    return {"success": True}


@router.post("/{stack_id}/copy", response_model=StackResponse, status_code=201)
async def copy_stack(
    stack_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Copy a visible stack and its resources into a private stack for the requester"""

    stack = get_visible_stack(db, stack_id, user_id)

    try:
        return stack_service.copy_stack(db, stack, new_owner_id=user_id)
    except Exception as e:
        logger.error(f"Failed to copy stack {stack_id}: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to copy stack")


@router.get("/{stack_id}/progress", response_model=StackProgress)
async def get_stack_progress(
    stack_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Learning progress for a stack

    Counts resources by status, ignoring reference material.
    percent = done / (todo + inprogress + done), rounded half up
    """
    stack = get_visible_stack(db, stack_id, user_id)

    resources = db.query(Resource).filter(Resource.stack_id == stack.id).all()

    return StackProgress(**resource_service.learning_progress(resources))
