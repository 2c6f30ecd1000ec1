"""
Resource helpers: type detection, embed URLs, uploads and learning progress
"""
import aiofiles
import logging
import os
import re
import uuid
from typing import Dict, Iterable, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.config import settings
from app.models import Resource, ResourceType, LearningStatus
from app.services.grading_service import percentage

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg")
DOCUMENT_EXTENSIONS = (".pdf", ".doc", ".docx", ".txt", ".md")

YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^\"&?/\s]{11})"
)


class ResourceService:
    """Service for resource metadata derived from URLs and files"""

    def detect_resource_type(self, url: Optional[str]) -> ResourceType:
        """
        Classify a resource by its URL

        - YouTube hosts -> youtube
        - Image extensions -> image
        - Document extensions -> document
        - Anything else -> webpage
        """
        if not url:
            return ResourceType.WEBPAGE

        lower_url = url.lower()

        if "youtube.com" in lower_url or "youtu.be" in lower_url:
            return ResourceType.YOUTUBE

        if any(ext in lower_url for ext in IMAGE_EXTENSIONS):
            return ResourceType.IMAGE

        if any(ext in lower_url for ext in DOCUMENT_EXTENSIONS):
            return ResourceType.DOCUMENT

        return ResourceType.WEBPAGE

    def youtube_embed_url(self, url: str) -> Optional[str]:
        """Convert a watch/short/embed YouTube URL into its embed URL"""
        match = YOUTUBE_ID_PATTERN.search(url or "")
        if match:
            return f"https://www.youtube.com/embed/{match.group(1)}"
        return None

    def embed_url_for(self, resource_type: str, url: str) -> Optional[str]:
        if resource_type == ResourceType.YOUTUBE:
            return self.youtube_embed_url(url)
        return None

    def upload_type(self, filename: str) -> ResourceType:
        """Resource type for an uploaded file; only documents and images are accepted"""
        _, ext = os.path.splitext(filename.lower())
        if ext in IMAGE_EXTENSIONS:
            return ResourceType.IMAGE
        if ext in DOCUMENT_EXTENSIONS:
            return ResourceType.DOCUMENT
        raise ValueError(f"Unsupported file type: {ext or filename}")

    @property
    def max_upload_bytes(self) -> int:
        return settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    async def read_upload(self, file: UploadFile) -> bytes:
        """
        Read an uploaded file, never buffering more than the size limit plus one byte

        Raises:
            ValueError: declared or actual size is over MAX_UPLOAD_SIZE_MB
        """
        limit = self.max_upload_bytes
        too_large = f"File exceeds {settings.MAX_UPLOAD_SIZE_MB} MB limit"

        if file.size is not None and file.size > limit:
            raise ValueError(too_large)

        content = await file.read(limit + 1)
        if len(content) > limit:
            raise ValueError(too_large)
        return content

    async def save_upload(self, stack_id: uuid.UUID, filename: str, content: bytes) -> Tuple[str, ResourceType]:
        """
        Store an uploaded file under UPLOAD_DIR/<stack_id>/

        Returns:
            Tuple of (relative file path, resource type)
        """
        resource_type = self.upload_type(filename)

        if len(content) > self.max_upload_bytes:
            raise ValueError(f"File exceeds {settings.MAX_UPLOAD_SIZE_MB} MB limit")
        if not content:
            raise ValueError("Uploaded file is empty")

        safe_name = os.path.basename(filename).replace(" ", "_")
        directory = os.path.join(settings.UPLOAD_DIR, str(stack_id))
        os.makedirs(directory, exist_ok=True)

        file_path = os.path.join(directory, f"{uuid.uuid4().hex}_{safe_name}")

        async with aiofiles.open(file_path, "wb") as f:
            await f.write(content)

        logger.info(f"Stored upload {filename} ({len(content)} bytes) at {file_path}")

        return file_path, resource_type

    def remove_upload(self, db: Session, file_path: Optional[str]) -> bool:
        """
        Delete a stored upload once no resource points at it

        Copied stacks share their source's files, so the file stays while
        any copy still references it.
        """
        if not file_path:
            return False

        if db.query(Resource.id).filter(Resource.file_path == file_path).first():
            return False

        try:
            if os.path.exists(file_path):
                os.remove(file_path)
                logger.info(f"Removed upload {file_path}")
                return True
        except OSError as e:
            logger.warning(f"Could not remove upload {file_path}: {str(e)}")
        return False

    def learning_progress(self, resources: Iterable[Resource]) -> Dict[str, int]:
        """
        Progress over resources meant to be learned

        Resources tagged `reference` are excluded from the total.
        """
        counts = {
            LearningStatus.TODO.value: 0,
            LearningStatus.IN_PROGRESS.value: 0,
            LearningStatus.DONE.value: 0,
        }
        for resource in resources:
            if resource.status in counts:
                counts[resource.status] += 1

        total = sum(counts.values())

        return {
            "total": total,
            "todo": counts[LearningStatus.TODO.value],
            "inprogress": counts[LearningStatus.IN_PROGRESS.value],
            "done": counts[LearningStatus.DONE.value],
            "percent": percentage(counts[LearningStatus.DONE.value], total),
        }


# Global instance
resource_service = ResourceService()
