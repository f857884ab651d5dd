"""
Pydantic models for the area validation endpoint.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from geoconvert.core.validator import AreaComparisonResult


class AreaValidationResponse(BaseModel):
    """
    Result of checking position files against a main file.

    Attributes:
        success: True when both the area and the bounds match
        message: Success text, or the mismatch reasons joined with ' | '
        main_area: Area of the main geometry (squared coordinate units)
        positions_area: Area of the unioned position geometries
        area_matches: Whether the areas agree within tolerance
        bounds_match: Whether all envelope edges agree within tolerance
        tolerance_used: Absolute area tolerance applied
        bounds_tolerance_used: Absolute envelope-edge tolerance applied
        main_bounds: [min_x, min_y, max_x, max_y] of the main geometry
        positions_bounds: [min_x, min_y, max_x, max_y] of the positions
    """

    success: bool
    message: str
    main_area: float
    positions_area: float
    area_matches: bool
    bounds_match: bool
    tolerance_used: float
    bounds_tolerance_used: float
    main_bounds: Optional[List[float]] = Field(None, min_length=4, max_length=4)
    positions_bounds: Optional[List[float]] = Field(None, min_length=4, max_length=4)

    @classmethod
    def from_result(cls, result: AreaComparisonResult) -> "AreaValidationResponse":
        return cls(**result.to_dict())

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "message": "Area mismatch: main area=100.0, positions total=80.0",
                "main_area": 100.0,
                "positions_area": 80.0,
                "area_matches": False,
                "bounds_match": True,
                "tolerance_used": 5.0,
                "bounds_tolerance_used": 5.0,
                "main_bounds": [0.0, 0.0, 10.0, 10.0],
                "positions_bounds": [0.0, 0.0, 10.0, 8.0],
            }
        }
    )
