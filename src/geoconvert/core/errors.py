"""
Custom exception hierarchy for the geoconvert service.

Every error raised by the conversion and validation core derives from
GeoConvertException so the API layer can turn it into a structured
error response without knowing the concrete type.
"""

from typing import Any, Dict, List, Optional


class GeoConvertException(Exception):
    """
    Base exception for all geoconvert-specific errors.

    Attributes:
        error_code: String identifier for the error type
        message: User-friendly error message
        details: Technical details for logging/debugging
        status_code: HTTP status code for API responses
        suggestions: Optional list of resolution suggestions
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize GeoConvertException.

        Args:
            message: User-friendly error message
            error_code: String identifier for the error type
            status_code: HTTP status code (default: 500)
            details: Technical details for logging
            suggestions: List of suggestions for resolution
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "suggestions": self.suggestions,
        }

    def __str__(self) -> str:
        """String representation of the exception."""
        return f"{self.error_code}: {self.message}"

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"error_code='{self.error_code}', "
            f"message='{self.message}', "
            f"status_code={self.status_code})"
        )


class ValidationError(GeoConvertException):
    """
    Raised when request input validation fails.

    Used for missing uploads, empty files or oversized payloads.
    Maps to HTTP 400 Bad Request.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=error_details,
            suggestions=suggestions or ["Check the input format and try again"],
        )


class FormatError(GeoConvertException):
    """
    Raised when a GeoJSON, KML or archive payload is malformed.

    Maps to HTTP 422 Unprocessable Entity.
    """

    def __init__(
        self,
        message: str,
        file_type: Optional[str] = None,
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize FormatError.

        Args:
            message: User-friendly error message
            file_type: Format being decoded (e.g. 'KML', 'GeoJSON', 'ZIP')
            source: Name of the offending input, when known
            details: Technical details about the failure
            suggestions: List of suggestions for fixing the file
        """
        error_details = details or {}
        if file_type:
            error_details["file_type"] = file_type
        if source:
            error_details["source"] = source

        default_suggestions = [
            "Verify the file is a valid KML or GeoJSON document",
            "Check for XML or JSON syntax errors",
        ]

        super().__init__(
            message=message,
            error_code="FORMAT_ERROR",
            status_code=422,
            details=error_details,
            suggestions=suggestions or default_suggestions,
        )


class GeometryError(GeoConvertException):
    """
    Raised when a geometry is structurally invalid (e.g. an open ring).

    Maps to HTTP 422 Unprocessable Entity.
    """

    def __init__(
        self,
        message: str,
        geometry_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        error_details = details or {}
        if geometry_type:
            error_details["geometry_type"] = geometry_type

        default_suggestions = [
            "Ensure every polygon ring is closed (first and last point equal)",
            "Ensure every polygon ring has at least four coordinates",
        ]

        super().__init__(
            message=message,
            error_code="GEOMETRY_ERROR",
            status_code=422,
            details=error_details,
            suggestions=suggestions or default_suggestions,
        )


class UnsupportedGeometryError(GeoConvertException):
    """
    Raised when a geometry variant has no mapping in the target format.

    The offending type is always named in the message: the service
    declines the input rather than silently dropping data.
    Maps to HTTP 422 Unprocessable Entity.
    """

    def __init__(
        self,
        geometry_type: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        error_details = details or {}
        error_details["geometry_type"] = geometry_type

        default_suggestions = [
            "Supported geometries are Point, LineString, Polygon and "
            "MultiPolygon/MultiGeometry of polygons",
        ]

        super().__init__(
            message=message or f"Geometry type {geometry_type} is not supported",
            error_code="UNSUPPORTED_GEOMETRY",
            status_code=422,
            details=error_details,
            suggestions=suggestions or default_suggestions,
        )
        self.geometry_type = geometry_type


class UnsupportedFileTypeError(GeoConvertException):
    """
    Raised when an input file extension is not KML or GeoJSON.

    Maps to HTTP 415 Unsupported Media Type.
    """

    def __init__(
        self,
        filename: str,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        error_details = details or {}
        error_details["filename"] = filename

        super().__init__(
            message=f"File '{filename}' must be a KML or GeoJSON file",
            error_code="UNSUPPORTED_FILE_TYPE",
            status_code=415,
            details=error_details,
            suggestions=suggestions or ["Use a .kml, .geojson or .json file"],
        )


class EmptyGeometryError(GeoConvertException):
    """
    Raised when no usable geometry was found where one is required.

    Maps to HTTP 400 Bad Request.
    """

    def __init__(
        self,
        message: str = "No geometry found in input",
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if source:
            error_details["source"] = source

        super().__init__(
            message=message,
            error_code="EMPTY_GEOMETRY",
            status_code=400,
            details=error_details,
            suggestions=["Make sure the file contains at least one placemark or feature"],
        )


class NoPositionDataError(GeoConvertException):
    """
    Raised when the position files yield no geometry to validate against.

    Maps to HTTP 400 Bad Request.
    """

    def __init__(
        self,
        message: str = "No positions were found in the uploaded files",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_code="NO_POSITION_DATA",
            status_code=400,
            details=details,
            suggestions=[
                "Upload at least one KML/GeoJSON file or a zip archive containing them",
            ],
        )


class FileTooLargeError(ValidationError):
    """
    Raised when an upload exceeds the configured size limit.

    Maps to HTTP 413 Request Entity Too Large.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            field="file",
            details=details,
            suggestions=["Upload a smaller file or split it into several files"],
        )
        self.error_code = "FILE_TOO_LARGE"
        self.status_code = 413
