#!/usr/bin/env python3
"""
Demo script showing the conversion and validation core.

This example demonstrates:
1. Converting a GeoJSON FeatureCollection to KML
2. Reading the KML back as GeoJSON
3. Packaging KML documents into a KMZ
4. Validating position parcels against a main boundary
"""

import json
import zipfile
from io import BytesIO

from geoconvert.core.archive import package_kmz
from geoconvert.core.codecs import decode_geojson, decode_kml, encode_geojson, encode_kml
from geoconvert.core.config import settings
from geoconvert.core.geometry import Polygon
from geoconvert.core.validator import validate_area_and_bounds


def square(x0: float, y0: float, x1: float, y1: float) -> Polygon:
    return Polygon(((x0, y0), (x1, y0), (x1, y1), (x0, y1), (x0, y0)))


def main():
    """Run conversion demo."""
    print("=" * 70)
    print("GeoJSON / KML Conversion Demo")
    print("=" * 70)

    geojson = json.dumps(
        {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "properties": {"name": "Parcel A", "owner": "County"},
                    "geometry": {
                        "type": "Polygon",
                        "coordinates": [[[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]],
                    },
                },
                {
                    "type": "Feature",
                    "properties": {"kind": "well"},
                    "geometry": {"type": "Point", "coordinates": [5, 5]},
                },
            ],
        }
    ).encode("utf-8")

    print("\n1. GeoJSON -> KML")
    print("-" * 70)
    features = decode_geojson(geojson, source="parcels.geojson")
    kml = encode_kml(features, settings.kml_document_name, settings.kml_document_description)
    print(kml.decode("utf-8"))

    print("\n2. KML -> GeoJSON")
    print("-" * 70)
    print(encode_geojson(decode_kml(kml)).decode("utf-8"))

    print("\n3. Packaging KMZ")
    print("-" * 70)
    kmz = package_kmz([("main.kml", kml), ("notes.txt", b"skipped"), ("extra.kml", kml)])
    with zipfile.ZipFile(BytesIO(kmz)) as zf:
        print(f"Entries: {zf.namelist()}")

    print("\n4. Area and bounds validation")
    print("-" * 70)
    main_boundary = square(0, 0, 10, 10)
    for label, positions in [
        ("two halves", [square(0, 0, 10, 5), square(0, 5, 10, 10)]),
        ("missing strip", [square(0, 0, 10, 8)]),
    ]:
        result = validate_area_and_bounds(main_boundary, positions)
        status = "✓" if result.success else "✗"
        print(f"{status} {label}: {result.message}")


if __name__ == "__main__":
    main()
