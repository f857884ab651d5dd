"""
Shared fixtures for geoconvert tests.
"""

import io
import json
import zipfile
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest

from geoconvert.core.geometry import Polygon

KML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n<kml xmlns="http://www.opengis.net/kml/2.2">'


def square_ring(x0: float, y0: float, x1: float, y1: float) -> List[List[float]]:
    """Closed counter-clockwise ring for an axis-aligned rectangle."""
    return [[x0, y0], [x1, y0], [x1, y1], [x0, y1], [x0, y0]]


def square(x0: float, y0: float, x1: float, y1: float) -> Polygon:
    """Axis-aligned rectangle as a model Polygon."""
    return Polygon(tuple(tuple(p) for p in square_ring(x0, y0, x1, y1)))


def feature_collection(
    geometries: Iterable[Dict[str, Any]],
    properties: Optional[List[Dict[str, Any]]] = None,
) -> bytes:
    """GeoJSON FeatureCollection bytes with one feature per geometry."""
    geometries = list(geometries)
    properties = properties or [{} for _ in geometries]
    return json.dumps(
        {
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "geometry": g, "properties": p}
                for g, p in zip(geometries, properties)
            ],
        }
    ).encode("utf-8")


def polygon_geojson(x0: float, y0: float, x1: float, y1: float) -> Dict[str, Any]:
    return {"type": "Polygon", "coordinates": [square_ring(x0, y0, x1, y1)]}


def kml_coordinates(ring: List[List[float]]) -> str:
    return " ".join(f"{x},{y},0" for x, y in ring)


def kml_document(body: str) -> bytes:
    """Wrap placemark markup in a KML Document."""
    return f"{KML_HEADER}<Document>{body}</Document></kml>".encode("utf-8")


def kml_polygon_placemark(name: str, x0: float, y0: float, x1: float, y1: float) -> str:
    return (
        f"<Placemark><name>{name}</name><Polygon><outerBoundaryIs><LinearRing>"
        f"<coordinates>{kml_coordinates(square_ring(x0, y0, x1, y1))}</coordinates>"
        "</LinearRing></outerBoundaryIs></Polygon></Placemark>"
    )


def zip_bytes(entries: Iterable[Tuple[str, bytes]]) -> bytes:
    """In-memory zip archive; names ending in '/' become directory entries."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in entries:
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def square_geojson() -> bytes:
    """FeatureCollection with a single named 10x10 square."""
    return feature_collection([polygon_geojson(0, 0, 10, 10)], [{"name": "Main"}])


@pytest.fixture
def square_kml() -> bytes:
    """KML document with a single named 10x10 square."""
    return kml_document(kml_polygon_placemark("Main", 0, 0, 10, 10))
