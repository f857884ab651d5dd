"""
Input dispatch: picks a codec from a filename and expands archives.
"""

import logging
from typing import Callable, Dict, List, Optional

from geoconvert.core.archive import entry_extension, is_zip_archive, read_archive_entries
from geoconvert.core.codecs import decode_geojson, decode_kml
from geoconvert.core.config import settings
from geoconvert.core.errors import EmptyGeometryError, UnsupportedFileTypeError
from geoconvert.core.geometry import Feature, Geometry
from geoconvert.core.union import union_geometries
from geoconvert.utils.logging import log_performance

logger = logging.getLogger(__name__)

Decoder = Callable[..., List[Feature]]

DECODERS: Dict[str, Decoder] = {
    ".kml": decode_kml,
    ".geojson": decode_geojson,
    ".json": decode_geojson,
}

ARCHIVE_EXTENSIONS = (".zip", ".kmz")


def decoder_for(filename: str) -> Optional[Decoder]:
    """Decoder for a filename's extension, or None when it is not recognised."""
    return DECODERS.get(entry_extension(filename))


def codec_for_filename(filename: str) -> Decoder:
    """
    Decoder for a primary input file.

    Raises:
        UnsupportedFileTypeError: If the extension is not .kml/.geojson/.json
    """
    decoder = decoder_for(filename)
    if decoder is None:
        raise UnsupportedFileTypeError(filename)
    return decoder


def load_features(filename: str, data: bytes) -> List[Feature]:
    """
    Decode a KML or GeoJSON file, choosing the codec by extension.

    Raises:
        UnsupportedFileTypeError: For any other extension
        FormatError: If the payload is malformed
    """
    return codec_for_filename(filename)(data, source=filename)


@log_performance(threshold_ms=500)
def load_main_geometry(filename: str, data: bytes) -> Geometry:
    """
    Load the reference geometry: the union of every feature in the file.

    Raises:
        EmptyGeometryError: If the file holds no geometry
    """
    features = load_features(filename, data)
    if not features:
        raise EmptyGeometryError(f"Main file '{filename}' contains no geometry", source=filename)
    return union_geometries([f.geometry for f in features])


def load_position_geometries(filename: str, data: bytes) -> List[Geometry]:
    """
    Load every geometry from a position upload.

    A zip/KMZ upload is expanded and each entry with a KML or GeoJSON
    extension is decoded; other entries are ignored. Any other upload is
    decoded as a single KML/GeoJSON file.

    Args:
        filename: Upload filename
        data: Upload bytes

    Returns:
        Geometries in archive/document order

    Raises:
        FileTooLargeError: If an archive expands beyond the configured limit
    """
    if is_zip_archive(data) or entry_extension(filename) in ARCHIVE_EXTENSIONS:
        geometries: List[Geometry] = []
        entries = read_archive_entries(
            data, source=filename, max_total_size=settings.max_archive_size_bytes
        )
        for entry_name, content in entries:
            decoder = decoder_for(entry_name)
            if decoder is None:
                logger.debug(f"Ignoring archive entry {entry_name} in {filename}")
                continue
            geometries.extend(
                f.geometry for f in decoder(content, source=f"{filename}/{entry_name}")
            )
        return geometries

    return [f.geometry for f in load_features(filename, data)]
