"""
GeoJSON codec.

Decodes a GeoJSON FeatureCollection into model Features and encodes
Features back into a FeatureCollection. Positions are [longitude,
latitude] on both sides, so coordinates pass through unchanged.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from geoconvert.core.errors import FormatError, UnsupportedGeometryError
from geoconvert.core.geometry import (
    Collection,
    Coordinate,
    Feature,
    Geometry,
    LineString,
    Point,
    Polygon,
)

logger = logging.getLogger(__name__)

FILE_TYPE = "GeoJSON"

SUPPORTED_TYPES = ("Point", "LineString", "Polygon", "MultiPolygon", "GeometryCollection")


def decode_geojson(data: bytes, source: Optional[str] = None) -> List[Feature]:
    """
    Decode a GeoJSON FeatureCollection.

    Features whose geometry is ``null`` are skipped. Property values are
    converted to strings.

    Args:
        data: Raw GeoJSON bytes (UTF-8)
        source: Name of the input, used in error messages

    Returns:
        List of Features in document order

    Raises:
        FormatError: If the payload is not a valid FeatureCollection or uses
            a geometry type outside the supported set
    """
    try:
        document = json.loads(data)
    except (UnicodeDecodeError, ValueError) as e:
        raise FormatError(
            f"Invalid GeoJSON{_in(source)}: {e}", file_type=FILE_TYPE, source=source
        ) from e

    if not isinstance(document, dict) or document.get("type") != "FeatureCollection":
        raise FormatError(
            f"GeoJSON{_in(source)} is not a FeatureCollection",
            file_type=FILE_TYPE,
            source=source,
        )

    raw_features = document.get("features")
    if not isinstance(raw_features, list):
        raise FormatError(
            f"GeoJSON FeatureCollection{_in(source)} has no 'features' array",
            file_type=FILE_TYPE,
            source=source,
        )

    features: List[Feature] = []
    for index, raw in enumerate(raw_features):
        if not isinstance(raw, dict) or "geometry" not in raw:
            raise FormatError(
                f"Feature {index}{_in(source)} is not a GeoJSON Feature object",
                file_type=FILE_TYPE,
                source=source,
            )
        if raw["geometry"] is None:
            logger.debug(f"Skipping feature {index} without geometry")
            continue

        try:
            geometry = _parse_geometry(raw["geometry"])
        except UnsupportedGeometryError as e:
            raise FormatError(
                f"Feature {index}{_in(source)}: {e.message}",
                file_type=FILE_TYPE,
                source=source,
                details={"geometry_type": e.geometry_type},
            ) from e

        features.append(Feature(geometry, _parse_properties(raw.get("properties"))))

    logger.info(f"Decoded {len(features)} GeoJSON feature(s){_in(source)}")
    return features


def encode_geojson(features: List[Feature]) -> bytes:
    """
    Encode Features as a GeoJSON FeatureCollection.

    A Collection made only of polygons is written as a MultiPolygon; any
    other Collection as a GeometryCollection.

    Args:
        features: Features to encode

    Returns:
        UTF-8 encoded GeoJSON
    """
    collection = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": geometry_to_geojson(feature.geometry),
                "properties": dict(feature.attributes),
            }
            for feature in features
        ],
    }
    logger.info(f"Encoded {len(features)} feature(s) as GeoJSON")
    return json.dumps(collection, ensure_ascii=False).encode("utf-8")


def geometry_to_geojson(geometry: Geometry) -> Dict[str, Any]:
    """Convert a model geometry to a GeoJSON geometry dict."""
    if isinstance(geometry, Point):
        return {"type": "Point", "coordinates": [geometry.x, geometry.y]}
    elif isinstance(geometry, LineString):
        return {"type": "LineString", "coordinates": _positions(geometry.coords)}
    elif isinstance(geometry, Polygon):
        return {"type": "Polygon", "coordinates": _polygon_rings(geometry)}
    elif isinstance(geometry, Collection):
        if geometry.is_multi_polygon:
            return {
                "type": "MultiPolygon",
                "coordinates": [_polygon_rings(p) for p in geometry.geometries],
            }
        return {
            "type": "GeometryCollection",
            "geometries": [geometry_to_geojson(g) for g in geometry.geometries],
        }
    else:
        raise UnsupportedGeometryError(type(geometry).__name__)


def _parse_geometry(obj: Any) -> Geometry:
    if not isinstance(obj, dict):
        raise FormatError("Geometry must be a JSON object", file_type=FILE_TYPE)

    geom_type = obj.get("type")
    if geom_type not in SUPPORTED_TYPES:
        raise UnsupportedGeometryError(str(geom_type))

    if geom_type == "GeometryCollection":
        members = obj.get("geometries")
        if not isinstance(members, list):
            raise FormatError(
                "GeometryCollection has no 'geometries' array", file_type=FILE_TYPE
            )
        return Collection(tuple(_parse_geometry(m) for m in members))

    coords = obj.get("coordinates")
    if geom_type == "Point":
        x, y = _position(coords)
        return Point(x, y)
    if geom_type == "LineString":
        return LineString(_position_list(coords))
    if geom_type == "Polygon":
        return _parse_polygon(coords)
    # MultiPolygon
    if not isinstance(coords, list) or not coords:
        raise FormatError(
            "MultiPolygon coordinates must be a non-empty array of polygons",
            file_type=FILE_TYPE,
        )
    return Collection(tuple(_parse_polygon(p) for p in coords))


def _parse_polygon(coords: Any) -> Polygon:
    if not isinstance(coords, list) or not coords:
        raise FormatError(
            "Polygon coordinates must be a non-empty array of rings", file_type=FILE_TYPE
        )
    rings = [_position_list(ring) for ring in coords]
    return Polygon(rings[0], tuple(rings[1:]))


def _position(value: Any) -> Coordinate:
    if (
        not isinstance(value, list)
        or len(value) < 2
        or not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value[:2])
    ):
        raise FormatError(f"Invalid GeoJSON position: {value!r}", file_type=FILE_TYPE)
    return (float(value[0]), float(value[1]))


def _position_list(value: Any) -> List[Coordinate]:
    if not isinstance(value, list):
        raise FormatError(f"Expected an array of positions, got {value!r}", file_type=FILE_TYPE)
    return [_position(v) for v in value]


def _positions(coords: tuple) -> List[List[float]]:
    return [[x, y] for x, y in coords]


def _polygon_rings(polygon: Polygon) -> List[List[List[float]]]:
    return [_positions(polygon.shell)] + [_positions(h) for h in polygon.holes]


def _parse_properties(properties: Any) -> Dict[str, str]:
    if properties is None:
        return {}
    if not isinstance(properties, dict):
        raise FormatError("Feature 'properties' must be an object", file_type=FILE_TYPE)
    return {str(key): _stringify(value) for key, value in properties.items()}


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _in(source: Optional[str]) -> str:
    return f" in '{source}'" if source else ""
