"""
Upload validation utilities.
"""

import logging
from typing import Optional

from geoconvert.core.archive import entry_extension
from geoconvert.core.errors import FileTooLargeError, ValidationError

logger = logging.getLogger(__name__)


def validate_file_extension(filename: Optional[str], allowed_extensions: tuple[str, ...]) -> str:
    """
    Validate that an upload has an allowed extension.

    Args:
        filename: The name of the uploaded file
        allowed_extensions: Tuple of allowed file extensions (with dots)

    Returns:
        The lowercase file extension (with dot)

    Raises:
        ValidationError: If the filename is missing or its extension is not allowed
    """
    if not filename:
        raise ValidationError("Filename is required", field="filename")

    extension = entry_extension(filename)
    if not extension:
        raise ValidationError(f"File '{filename}' has no extension", field="filename")

    if extension not in allowed_extensions:
        raise ValidationError(
            f"File type '{extension}' not allowed. "
            f"Allowed types: {', '.join(allowed_extensions)}",
            field="filename",
        )

    return extension


def validate_file_size(file_size: int, max_size_bytes: int, filename: str = "") -> None:
    """
    Validate that the file size is within allowed limits.

    Args:
        file_size: Size of the file in bytes
        max_size_bytes: Maximum allowed size in bytes
        filename: Upload name, used in the error message

    Raises:
        ValidationError: If the file is empty or too large
    """
    label = f"File '{filename}'" if filename else "File"

    if file_size <= 0:
        raise ValidationError(f"{label} is empty", field="file")

    if file_size > max_size_bytes:
        max_mb = max_size_bytes / (1024 * 1024)
        actual_mb = file_size / (1024 * 1024)
        raise FileTooLargeError(
            f"{label} size ({actual_mb:.2f}MB) exceeds maximum allowed size of {max_mb:.0f}MB",
            details={"file_size": file_size, "max_size": max_size_bytes},
        )
