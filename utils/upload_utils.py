import logging
import os
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    ".pdf": {"application/pdf"},
    ".jpg": {"image/jpeg"},
    ".jpeg": {"image/jpeg"},
    ".png": {"image/png"},
    ".doc": {"application/msword"},
    ".docx": {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"},
}
ALLOWED_EXTENSIONS = set(ALLOWED_CONTENT_TYPES)
UPLOAD_URL_PREFIX = "uploads"


def _human_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size // (1024 * 1024)}MB"
    return f"{size // 1024}KB"


class AttachmentStorage:
    """Stores leave attachments on local disk; the returned path is served under /uploads."""

    def __init__(self, upload_dir: str, max_size: int = 5 * 1024 * 1024):
        self.upload_dir = Path(upload_dir)
        self.max_size = max_size

    def save(self, upload: Optional[UploadFile]) -> Optional[str]:
        if upload is None or not upload.filename:
            return None

        file_extension = os.path.splitext(upload.filename)[1].lower()
        if file_extension not in ALLOWED_EXTENSIONS:
            raise ValidationError("Invalid file type. Only PDF, JPG, PNG, DOC and DOCX files are allowed.")

        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type not in ALLOWED_CONTENT_TYPES[file_extension]:
            raise ValidationError(f"File content type {content_type or 'unknown'} does not match {file_extension}")

        file_content = upload.file.read(self.max_size + 1)
        if len(file_content) > self.max_size:
            raise ValidationError(f"File size must be less than {_human_size(self.max_size)}")

        # Generate unique filename
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        unique_filename = f"{uuid.uuid4()}{file_extension}"
        with open(self.upload_dir / unique_filename, "wb") as buffer:
            buffer.write(file_content)

        logger.info(f"Stored attachment {upload.filename!r} as {unique_filename}")
        return f"{UPLOAD_URL_PREFIX}/{unique_filename}"

    def delete(self, relative_path: Optional[str]) -> None:
        if not relative_path:
            return
        try:
            (self.upload_dir / Path(relative_path).name).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning(f"Could not remove attachment {relative_path}: {exc}")
