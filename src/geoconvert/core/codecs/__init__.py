"""
GeoJSON and KML codecs.

Both codecs convert between raw bytes and lists of model Features.
"""

from .geojson import decode_geojson, encode_geojson, geometry_to_geojson
from .kml import (
    KML_NAMESPACE,
    KMLReader,
    KMLWriter,
    decode_kml,
    encode_kml,
    parse_kml_coordinates,
)

__all__ = [
    # GeoJSON
    "decode_geojson",
    "encode_geojson",
    "geometry_to_geojson",
    # KML
    "KML_NAMESPACE",
    "KMLReader",
    "KMLWriter",
    "decode_kml",
    "encode_kml",
    "parse_kml_coordinates",
]
