"""
Resource management API endpoints
"""
from fastapi import APIRouter, Depends, UploadFile, File, Form, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from app.api.deps import get_current_user_id, get_owned_stack, get_visible_stack, get_resource_in_stack
from app.database import get_db
from app.models import Resource, LearningStatus
from app.schemas.resource import ResourceCreate, ResourceUpdate, ResourceResponse
from app.services.resource_service import resource_service

router = APIRouter(prefix="/api/v1/stacks/{stack_id}/resources", tags=["resources"])
logger = logging.getLogger(__name__)


def _commit(db: Session, resource: Resource, action: str) -> Resource:
    try:
        db.add(resource)
        db.commit()
        db.refresh(resource)
    except Exception as e:
        logger.error(f"Failed to {action} resource: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to {action} resource")
    return resource


@router.get("", response_model=List[ResourceResponse])
async def list_resources(
    stack_id: UUID,
    status: Optional[LearningStatus] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List a stack's resources, newest first, optionally by learning status"""

    stack = get_visible_stack(db, stack_id, user_id)

    query = db.query(Resource).filter(Resource.stack_id == stack.id)
    if status is not None:
        query = query.filter(Resource.status == status.value)

    return query.order_by(Resource.created_at.desc()).all()


@router.post("", response_model=ResourceResponse, status_code=201)
async def create_resource(
    stack_id: UUID,
    request: ResourceCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Add a resource to a stack (owner only)

    - Resource type is detected from the URL when omitted
    - YouTube links get an embed URL
    """
    stack = get_owned_stack(db, stack_id, user_id)

    resource_type = request.resource_type or resource_service.detect_resource_type(request.resource_url)

    resource = Resource(
        stack_id=stack.id,
        title=request.title,
        description=request.description,
        resource_type=resource_type.value,
        resource_url=request.resource_url,
        embed_url=resource_service.embed_url_for(resource_type, request.resource_url),
        user_notes=request.user_notes,
        status=request.status.value,
    )

    resource = _commit(db, resource, "create")

    logger.info(f"Resource created: {resource.id} ({resource.resource_type}) in stack {stack.id}")

    return resource


@router.post("/upload", response_model=ResourceResponse, status_code=201)
async def upload_resource(
    stack_id: UUID,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Upload a document or image as a resource (owner only)

    - Accepts .pdf .doc .docx .txt .md and common image formats
    - Stores the file under the upload directory
    """
    stack = get_owned_stack(db, stack_id, user_id)

    if not file.filename:
        raise HTTPException(status_code=400, detail="File name is required")

    try:
        content = await resource_service.read_upload(file)
        file_path, resource_type = await resource_service.save_upload(stack.id, file.filename, content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    resource = Resource(
        stack_id=stack.id,
        title=title or file.filename,
        description=description,
        resource_type=resource_type.value,
        resource_url=file_path,
        file_path=file_path,
        status=LearningStatus.REFERENCE.value,
    )

    return _commit(db, resource, "upload")


@router.get("/{resource_id}", response_model=ResourceResponse)
async def get_resource(
    stack_id: UUID,
    resource_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    stack = get_visible_stack(db, stack_id, user_id)
    return get_resource_in_stack(db, stack, resource_id)


@router.put("/{resource_id}", response_model=ResourceResponse)
async def update_resource(
    stack_id: UUID,
    resource_id: UUID,
    request: ResourceUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Partially update a resource, e.g. its learning status or notes (owner only)"""

    stack = get_owned_stack(db, stack_id, user_id)
    resource = get_resource_in_stack(db, stack, resource_id)

    changes = request.model_dump(exclude_unset=True)
    for field in ("title", "resource_url", "resource_type", "status"):
        if field in changes and changes[field] is None:
            del changes[field]

    for field, value in changes.items():
        setattr(resource, field, value.value if hasattr(value, "value") else value)

    if "resource_url" in changes or "resource_type" in changes:
        resource.embed_url = resource_service.embed_url_for(resource.resource_type, resource.resource_url)

    return _commit(db, resource, "update")


@router.delete("/{resource_id}")
async def delete_resource(
    stack_id: UUID,
    resource_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Delete a resource (owner only)

    Quizzes built from it keep the id; their reads just omit its title.
    An uploaded file is removed too unless a copied stack still uses it.
    """
    stack = get_owned_stack(db, stack_id, user_id)
    resource = get_resource_in_stack(db, stack, resource_id)
    file_path = resource.file_path

    try:
        db.delete(resource)
        db.commit()
    except Exception as e:
        logger.error(f"Failed to delete resource {resource_id}: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to delete resource")

    resource_service.remove_upload(db, file_path)

    return {"success": True}
