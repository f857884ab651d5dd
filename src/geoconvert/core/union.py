"""
Geometry union builder.

Merges a heterogeneous list of geometries into a single geometry and
dissolves overlaps between polygonal members using GEOS via shapely.
"""

import logging
from typing import Sequence

from shapely.errors import GEOSException
from shapely.ops import unary_union

from geoconvert.core.errors import EmptyGeometryError
from geoconvert.core.geometry import Collection, Geometry, from_shapely

logger = logging.getLogger(__name__)


def build_geometry(geometries: Sequence[Geometry]) -> Geometry:
    """
    Wrap a list of geometries without merging them.

    A single geometry is returned as-is; several are wrapped in a Collection.

    Raises:
        EmptyGeometryError: If the list is empty
    """
    if not geometries:
        raise EmptyGeometryError("Cannot build a geometry from an empty list")
    if len(geometries) == 1:
        return geometries[0]
    return Collection(tuple(geometries))


def union_geometries(geometries: Sequence[Geometry]) -> Geometry:
    """
    Union a list of geometries into one, dissolving overlapping areas.

    If GEOS cannot compute the union the unmerged aggregate is returned
    instead; bad topology degrades the result but never raises. Inputs are
    not repaired.

    Args:
        geometries: Geometries of any supported variant

    Returns:
        The unioned geometry (a Collection for multi-part results)

    Raises:
        EmptyGeometryError: If the list is empty
    """
    aggregate = build_geometry(geometries)
    shapes = [leaf.to_shapely() for leaf in aggregate.leaves()]

    try:
        return from_shapely(unary_union(shapes))
    except (GEOSException, ValueError) as e:
        logger.warning(
            f"Union of {len(shapes)} geometries failed ({e}); returning unmerged collection"
        )
        return aggregate
