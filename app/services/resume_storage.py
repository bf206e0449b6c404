"""
Local filesystem storage for uploaded resumes.

Files land in ``RESUME_STORAGE_DIR`` under a random prefix; the returned
reference is an opaque relative URI stored on the application row.
"""

from pathlib import Path
from typing import List, Optional
from uuid import uuid4

import structlog
from fastapi import UploadFile

from app.config import settings
from app.core.exceptions import InvalidResumeFile
from app.utils.helpers import sanitize_filename
from app.utils.validators import validate_file_extension

logger = structlog.get_logger(__name__)


class ResumeStorage:
    """Validate and persist resume uploads."""

    def __init__(
        self,
        storage_dir: Optional[str] = None,
        allowed_extensions: Optional[List[str]] = None,
        max_size: Optional[int] = None,
    ):
        self.storage_dir = Path(storage_dir or settings.RESUME_STORAGE_DIR)
        self.allowed_extensions = allowed_extensions or settings.ALLOWED_RESUME_EXTENSIONS
        self.max_size = max_size or settings.MAX_UPLOAD_SIZE

    async def save(self, upload: Optional[UploadFile]) -> str:
        """Store the upload and return its reference."""
        if upload is None or not upload.filename:
            raise InvalidResumeFile("Resume file is required")

        if not validate_file_extension(upload.filename, self.allowed_extensions):
            raise InvalidResumeFile(
                f"Invalid resume file type. Allowed: {', '.join(self.allowed_extensions)}"
            )

        content = await upload.read()
        if not content:
            raise InvalidResumeFile("Resume file is empty")
        if len(content) > self.max_size:
            raise InvalidResumeFile(f"Resume file exceeds {self.max_size} bytes")

        self.storage_dir.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid4().hex}_{sanitize_filename(upload.filename)}"
        path = self.storage_dir / stored_name
        path.write_bytes(content)

        logger.info("resume_stored", path=str(path), size=len(content))
        return path.as_posix()

    def delete(self, reference: str) -> None:
        """Remove a stored resume (used when the application is not created)."""
        path = Path(reference)
        if path.parent.resolve() != self.storage_dir.resolve():
            logger.warning("resume_delete_outside_storage", path=reference)
            return
        path.unlink(missing_ok=True)
        logger.info("resume_deleted", path=reference)


def get_resume_storage() -> ResumeStorage:
    """FastAPI dependency."""
    return ResumeStorage()
