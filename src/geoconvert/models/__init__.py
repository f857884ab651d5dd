"""
Pydantic models for API responses.
"""

from .errors import ErrorDetail, ErrorResponse
from .validation import AreaValidationResponse

__all__ = [
    "AreaValidationResponse",
    "ErrorDetail",
    "ErrorResponse",
]
