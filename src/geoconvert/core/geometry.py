"""
Format-independent geometry model.

Geometries are immutable dataclasses forming a closed set of variants:
Point, LineString, Polygon (with holes) and Collection. Coordinates are
always stored as (x=longitude, y=latitude); codecs are responsible for
any axis-order conversion at their own boundary.

Shapely is only used through ``to_shapely``/``from_shapely`` so that the
union builder can delegate overlay operations to GEOS.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterable, Iterator, Optional, Sequence, Tuple

from shapely.geometry import GeometryCollection as ShapelyGeometryCollection
from shapely.geometry import LineString as ShapelyLineString
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.base import BaseGeometry, BaseMultipartGeometry

from geoconvert.core.errors import GeometryError, UnsupportedGeometryError

logger = logging.getLogger(__name__)

Coordinate = Tuple[float, float]
Ring = Tuple[Coordinate, ...]

MIN_RING_COORDINATES = 4
DEFAULT_FEATURE_NAME = "Unnamed Feature"

# Relative slack for comparing values that went through floating-point overlay
FLOAT_EPSILON = 1e-9


def _to_coords(values: Iterable[Sequence[float]]) -> Tuple[Coordinate, ...]:
    """Normalise an iterable of positions to a tuple of (x, y) float pairs."""
    return tuple((float(v[0]), float(v[1])) for v in values)


def within_tolerance(a: float, b: float, tolerance: float) -> bool:
    """
    True when ``a`` and ``b`` differ by at most ``tolerance``.

    Rounding noise proportional to the magnitudes compared is also accepted,
    so values that are equal up to the last few ulps always match, even with
    a zero tolerance.
    """
    return abs(a - b) <= tolerance + FLOAT_EPSILON * max(abs(a), abs(b))


def _ring_area(ring: Ring) -> float:
    """Unsigned shoelace area of a closed ring, taken relative to its first vertex."""
    if not ring:
        return 0.0
    ox, oy = ring[0]
    total = 0.0
    for (x1, y1), (x2, y2) in zip(ring, ring[1:]):
        total += (x1 - ox) * (y2 - oy) - (x2 - ox) * (y1 - oy)
    return abs(total) / 2.0


@dataclass(frozen=True)
class Envelope:
    """Axis-aligned bounding box."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def of(cls, coords: Iterable[Coordinate]) -> Optional["Envelope"]:
        """Envelope of a coordinate stream, or None when it is empty."""
        xs = []
        ys = []
        for x, y in coords:
            xs.append(x)
            ys.append(y)
        if not xs:
            return None
        return cls(min(xs), min(ys), max(xs), max(ys))

    def edges_within(self, other: "Envelope", tolerance: float) -> bool:
        """True when all four edges differ from ``other`` by at most ``tolerance``."""
        return all(
            within_tolerance(mine, theirs, tolerance)
            for mine, theirs in zip(self.to_list(), other.to_list())
        )

    def to_list(self) -> list[float]:
        return [self.min_x, self.min_y, self.max_x, self.max_y]


class Geometry:
    """Base class of every geometry variant."""

    geometry_type: ClassVar[str] = "Geometry"

    def coordinates(self) -> Iterator[Coordinate]:
        """Yield every coordinate of the geometry, rings and members included."""
        raise NotImplementedError

    def leaves(self) -> Iterator["Geometry"]:
        """Yield all non-collection geometries, flattening nested collections."""
        yield self

    @property
    def area(self) -> float:
        return 0.0

    @property
    def bounds(self) -> Optional[Envelope]:
        return Envelope.of(self.coordinates())

    @property
    def is_empty(self) -> bool:
        return False

    def to_shapely(self) -> BaseGeometry:
        raise NotImplementedError


@dataclass(frozen=True)
class Point(Geometry):
    """A single position."""

    geometry_type: ClassVar[str] = "Point"

    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    def coordinates(self) -> Iterator[Coordinate]:
        yield (self.x, self.y)

    def to_shapely(self) -> BaseGeometry:
        return ShapelyPoint(self.x, self.y)


@dataclass(frozen=True)
class LineString(Geometry):
    """An ordered sequence of at least two positions."""

    geometry_type: ClassVar[str] = "LineString"

    coords: Tuple[Coordinate, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "coords", _to_coords(self.coords))
        if len(self.coords) < 2:
            raise GeometryError(
                f"LineString must have at least 2 coordinates, got {len(self.coords)}",
                geometry_type=self.geometry_type,
            )

    def coordinates(self) -> Iterator[Coordinate]:
        yield from self.coords

    def to_shapely(self) -> BaseGeometry:
        return ShapelyLineString(self.coords)


@dataclass(frozen=True)
class Polygon(Geometry):
    """
    A polygon with one closed outer ring and zero or more closed holes.

    Hole containment is not checked; area and union work best-effort on
    invalid polygons.
    """

    geometry_type: ClassVar[str] = "Polygon"

    shell: Ring
    holes: Tuple[Ring, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "shell", self._checked_ring(self.shell, "shell"))
        object.__setattr__(
            self, "holes", tuple(self._checked_ring(h, "hole") for h in self.holes)
        )

    @classmethod
    def _checked_ring(cls, values: Iterable[Sequence[float]], role: str) -> Ring:
        ring = _to_coords(values)
        if len(ring) < MIN_RING_COORDINATES:
            raise GeometryError(
                f"Polygon {role} must have at least {MIN_RING_COORDINATES} "
                f"coordinates, got {len(ring)}",
                geometry_type=cls.geometry_type,
            )
        if ring[0] != ring[-1]:
            raise GeometryError(
                f"Polygon {role} is not closed: first point {ring[0]} "
                f"differs from last point {ring[-1]}",
                geometry_type=cls.geometry_type,
            )
        return ring

    def coordinates(self) -> Iterator[Coordinate]:
        yield from self.shell
        for hole in self.holes:
            yield from hole

    @property
    def area(self) -> float:
        return _ring_area(self.shell) - sum(_ring_area(h) for h in self.holes)

    def to_shapely(self) -> BaseGeometry:
        return ShapelyPolygon(self.shell, self.holes)


@dataclass(frozen=True)
class Collection(Geometry):
    """
    An ordered group of geometries.

    Models both heterogeneous geometry collections and multi-polygons.
    """

    geometry_type: ClassVar[str] = "GeometryCollection"

    geometries: Tuple[Geometry, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "geometries", tuple(self.geometries))

    def coordinates(self) -> Iterator[Coordinate]:
        for geometry in self.geometries:
            yield from geometry.coordinates()

    def leaves(self) -> Iterator[Geometry]:
        for geometry in self.geometries:
            yield from geometry.leaves()

    @property
    def area(self) -> float:
        return sum(g.area for g in self.geometries)

    @property
    def is_empty(self) -> bool:
        return all(g.is_empty for g in self.geometries)

    @property
    def is_multi_polygon(self) -> bool:
        """True for a non-empty collection made only of polygons."""
        return bool(self.geometries) and all(
            isinstance(g, Polygon) for g in self.geometries
        )

    def to_shapely(self) -> BaseGeometry:
        return ShapelyGeometryCollection([g.to_shapely() for g in self.geometries])


@dataclass
class Feature:
    """A geometry paired with its string attribute table."""

    geometry: Geometry
    attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> Optional[str]:
        return self.attributes.get("name")

    @property
    def display_name(self) -> str:
        """Placemark label: the ``name`` attribute or the default label."""
        return self.name or DEFAULT_FEATURE_NAME

    def to_dict(self) -> Dict[str, Any]:
        return {
            "geometry_type": self.geometry.geometry_type,
            "attributes": dict(self.attributes),
        }


def from_shapely(geometry: BaseGeometry) -> Geometry:
    """
    Convert a shapely geometry back into the model.

    Multi-part shapely types become Collections; empty parts are dropped.
    Z values are discarded.

    Raises:
        UnsupportedGeometryError: For shapely types with no model variant
    """
    if geometry.is_empty:
        return Collection(())

    geom_type = geometry.geom_type
    if geom_type == "Point":
        return Point(geometry.x, geometry.y)
    if geom_type in ("LineString", "LinearRing"):
        return LineString(geometry.coords)
    if geom_type == "Polygon":
        return Polygon(
            geometry.exterior.coords,
            tuple(interior.coords for interior in geometry.interiors),
        )
    if isinstance(geometry, BaseMultipartGeometry):
        return Collection(
            tuple(from_shapely(part) for part in geometry.geoms if not part.is_empty)
        )

    raise UnsupportedGeometryError(geom_type)
