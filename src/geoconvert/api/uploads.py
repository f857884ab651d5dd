"""
Helpers shared by the upload-handling routes.
"""

import logging
from pathlib import PurePath
from typing import Optional

from fastapi import UploadFile

from geoconvert.core.config import settings
from geoconvert.core.errors import ValidationError
from geoconvert.core.validation import validate_file_size

logger = logging.getLogger(__name__)


async def read_upload(file: Optional[UploadFile], field: str = "file") -> bytes:
    """
    Read an uploaded file fully into memory.

    Raises:
        ValidationError: If no file was uploaded or it is empty
        FileTooLargeError: If it exceeds the configured upload limit
    """
    if file is None:
        raise ValidationError("No file uploaded", field=field)

    content = await file.read()
    validate_file_size(len(content), settings.max_upload_size_bytes, file.filename or "")
    logger.debug(f"Read upload {file.filename}: {len(content)} bytes")
    return content


def attachment(filename: str) -> dict[str, str]:
    """Content-Disposition header for a downloadable response."""
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


def output_stem(filename: Optional[str], default: str = "output") -> str:
    """Upload filename without directory or extension."""
    if not filename:
        return default
    return PurePath(filename.replace("\\", "/")).stem or default
