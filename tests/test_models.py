"""
Tests for API response models.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from geoconvert.core.validator import validate_area_and_bounds
from geoconvert.models import AreaValidationResponse, ErrorDetail, ErrorResponse

from conftest import square


class TestErrorResponse:
    """Tests for ErrorResponse."""

    def test_minimal(self):
        """Test only code and message are required."""
        response = ErrorResponse(error_code="FORMAT_ERROR", message="bad")
        assert isinstance(response.timestamp, datetime)
        assert response.details is None

    def test_timestamp_serialized_as_iso(self):
        """Test the timestamp is dumped as an ISO string."""
        data = ErrorResponse(error_code="X", message="y").model_dump(mode="json")
        assert isinstance(data["timestamp"], str)
        datetime.fromisoformat(data["timestamp"])

    def test_field_errors(self):
        """Test nested field-level errors."""
        response = ErrorResponse(
            error_code="VALIDATION_ERROR",
            message="Request validation failed",
            errors=[ErrorDetail(field="body.file", message="Field required", code="missing")],
        )
        assert response.model_dump(exclude_none=True)["errors"] == [
            {"field": "body.file", "message": "Field required", "code": "missing"}
        ]


class TestAreaValidationResponse:
    """Tests for AreaValidationResponse."""

    def test_from_result(self):
        """Test conversion from the validator result."""
        result = validate_area_and_bounds(square(0, 0, 10, 10), [square(0, 0, 10, 8)])
        response = AreaValidationResponse.from_result(result)

        assert response.success is False
        assert response.message == result.message
        assert response.main_area == pytest.approx(100.0)
        assert response.positions_bounds == [0.0, 0.0, 10.0, 8.0]

    def test_bounds_must_have_four_values(self):
        """Test malformed envelopes are rejected."""
        with pytest.raises(ValidationError):
            AreaValidationResponse(
                success=True,
                message="ok",
                main_area=1,
                positions_area=1,
                area_matches=True,
                bounds_match=True,
                tolerance_used=0.05,
                bounds_tolerance_used=0.05,
                main_bounds=[0, 0, 1],
            )
