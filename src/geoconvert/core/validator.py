"""
Area and bounding-box validation.

Checks that the union of a set of position geometries covers the same
area and extent as a main geometry, within a relative tolerance.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from geoconvert.core.errors import NoPositionDataError
from geoconvert.core.geometry import Envelope, Geometry, within_tolerance
from geoconvert.core.union import union_geometries

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_PERCENT = 0.05

SUCCESS_MESSAGE = "Validation passed: area and positions match the main file."
BOUNDS_MISMATCH_MESSAGE = "Position bounds do not match the main file."


@dataclass
class AreaComparisonResult:
    """
    Outcome of comparing a main geometry with unioned position geometries.

    Attributes:
        main_area: Area of the main geometry
        positions_area: Area of the unioned positions
        area_matches: Whether the areas differ by at most the area tolerance
        bounds_match: Whether every envelope edge differs by at most the
            bounds tolerance
        tolerance_used: Absolute area tolerance (main area x tolerance percent)
        bounds_tolerance_used: Absolute tolerance applied to envelope edges
        main_bounds: Envelope of the main geometry
        positions_bounds: Envelope of the unioned positions
    """

    main_area: float
    positions_area: float
    area_matches: bool
    bounds_match: bool
    tolerance_used: float
    bounds_tolerance_used: float
    main_bounds: Optional[Envelope] = None
    positions_bounds: Optional[Envelope] = None
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.area_matches and self.bounds_match

    @property
    def message(self) -> str:
        """Human-readable outcome; mismatches are joined with ' | '."""
        if self.success:
            return SUCCESS_MESSAGE
        return " | ".join(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "main_area": self.main_area,
            "positions_area": self.positions_area,
            "area_matches": self.area_matches,
            "bounds_match": self.bounds_match,
            "tolerance_used": self.tolerance_used,
            "bounds_tolerance_used": self.bounds_tolerance_used,
            "main_bounds": self.main_bounds.to_list() if self.main_bounds else None,
            "positions_bounds": (
                self.positions_bounds.to_list() if self.positions_bounds else None
            ),
        }


def validate_area_and_bounds(
    main_geometry: Geometry,
    position_geometries: Sequence[Geometry],
    tolerance_percent: float = DEFAULT_TOLERANCE_PERCENT,
    bounds_tolerance: Optional[float] = None,
) -> AreaComparisonResult:
    """
    Compare a main geometry against the union of position geometries.

    The area tolerance is ``main_area * tolerance_percent``. Unless
    ``bounds_tolerance`` is given, the same value is also used as the
    maximum allowed difference of each envelope edge.

    Args:
        main_geometry: Reference geometry
        position_geometries: Candidate geometries, unioned before comparison
        tolerance_percent: Relative area tolerance (0.05 = 5%)
        bounds_tolerance: Absolute envelope-edge tolerance; None reuses the
            area tolerance

    Returns:
        AreaComparisonResult

    Raises:
        NoPositionDataError: If ``position_geometries`` is empty
    """
    if not position_geometries:
        raise NoPositionDataError()

    candidate = union_geometries(position_geometries)

    main_area = main_geometry.area
    positions_area = candidate.area
    area_tolerance = main_area * tolerance_percent
    edge_tolerance = area_tolerance if bounds_tolerance is None else bounds_tolerance

    area_matches = within_tolerance(main_area, positions_area, area_tolerance)

    main_bounds = main_geometry.bounds
    positions_bounds = candidate.bounds
    if main_bounds is None or positions_bounds is None:
        bounds_match = main_bounds is None and positions_bounds is None
    else:
        bounds_match = main_bounds.edges_within(positions_bounds, edge_tolerance)

    errors: List[str] = []
    if not area_matches:
        errors.append(
            f"Area mismatch: main area={main_area!r}, positions total={positions_area!r}"
        )
    if not bounds_match:
        errors.append(BOUNDS_MISMATCH_MESSAGE)

    result = AreaComparisonResult(
        main_area=main_area,
        positions_area=positions_area,
        area_matches=area_matches,
        bounds_match=bounds_match,
        tolerance_used=area_tolerance,
        bounds_tolerance_used=edge_tolerance,
        main_bounds=main_bounds,
        positions_bounds=positions_bounds,
        errors=errors,
    )

    logger.info(
        f"Area validation: main={main_area} positions={positions_area} "
        f"tolerance={area_tolerance} success={result.success}"
    )
    return result
