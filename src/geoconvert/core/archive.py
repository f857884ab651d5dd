"""
KMZ/zip archive handling.

Packages KML documents into a KMZ archive and flattens uploaded zip or
KMZ archives into (entry name, bytes) pairs.
"""

import io
import logging
import zipfile
from pathlib import PurePosixPath
from typing import List, Optional, Sequence, Tuple

from geoconvert.core.errors import FileTooLargeError, FormatError

logger = logging.getLogger(__name__)

MAIN_DOCUMENT_NAME = "doc.kml"

ZIP_SIGNATURES = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")


def kmz_entry_name(position: int) -> str:
    """
    Archive entry name for the ``position``-th kept document (1-based).

    The first document is always ``doc.kml``, the main document by KMZ
    convention; later ones are ``class{N}.kml``.
    """
    return MAIN_DOCUMENT_NAME if position == 1 else f"class{position}.kml"


def package_kmz(documents: Sequence[Tuple[str, bytes]]) -> bytes:
    """
    Package KML documents into a single KMZ archive.

    Inputs whose name does not end in ``.kml`` are skipped. An input list
    with no KML documents yields an empty, valid archive.

    Args:
        documents: (source filename, KML bytes) pairs in upload order

    Returns:
        KMZ (zip) archive bytes
    """
    buffer = io.BytesIO()
    kept = 0

    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for filename, content in documents:
            if not filename.lower().endswith(".kml"):
                logger.info(f"Skipping non-KML input: {filename}")
                continue

            kept += 1
            entry_name = kmz_entry_name(kept)
            zf.writestr(entry_name, content)
            logger.debug(f"Added {filename} as {entry_name}")

    logger.info(f"Packaged {kept} KML document(s) into KMZ")
    return buffer.getvalue()


def is_zip_archive(data: bytes) -> bool:
    """Check the zip file signature."""
    return data.startswith(ZIP_SIGNATURES)


def read_archive_entries(
    data: bytes,
    source: str = "",
    max_total_size: Optional[int] = None,
) -> List[Tuple[str, bytes]]:
    """
    Read every file entry of a zip/KMZ archive.

    Directory entries are skipped; nested paths are kept as entry names.

    Args:
        data: Raw archive bytes
        source: Name of the archive, used in error messages
        max_total_size: Limit on the summed uncompressed size of all file
            entries, checked before anything is decompressed

    Returns:
        (entry name, content) pairs in archive order

    Raises:
        FormatError: If the data is not a readable zip archive
        FileTooLargeError: If the entries expand beyond ``max_total_size``
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
            infos = [info for info in zf.infolist() if not info.is_dir()]
            total_size = sum(info.file_size for info in infos)
            if max_total_size is not None and total_size > max_total_size:
                raise FileTooLargeError(
                    f"Archive{f' {source!r}' if source else ''} expands to {total_size} bytes, "
                    f"exceeding the {max_total_size} byte limit",
                    details={"uncompressed_size": total_size, "max_size": max_total_size},
                )
            # zf.read never returns more than an entry's declared file_size
            entries = [(info.filename, zf.read(info)) for info in infos]
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise FormatError(
            f"Invalid zip archive{f' {source!r}' if source else ''}: {e}",
            file_type="ZIP",
            source=source or None,
        ) from e

    logger.debug(f"Read {len(entries)} entries from archive {source}")
    return entries


def entry_extension(name: str) -> str:
    """Lowercase extension of an archive entry or upload filename."""
    return PurePosixPath(name.replace("\\", "/")).suffix.lower()
