"""
Format conversion endpoints: GeoJSON to KML, KML to GeoJSON, KML files to KMZ.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, File, Response, UploadFile

from geoconvert.api.uploads import attachment, output_stem, read_upload
from geoconvert.core.archive import package_kmz
from geoconvert.core.codecs import decode_geojson, decode_kml, encode_geojson, encode_kml
from geoconvert.core.config import settings
from geoconvert.core.errors import ValidationError
from geoconvert.models.errors import ErrorResponse
from geoconvert.utils.logging import PerformanceTimer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/convert", tags=["convert"])

KML_MEDIA_TYPE = "application/vnd.google-earth.kml+xml"
GEOJSON_MEDIA_TYPE = "application/json"
KMZ_MEDIA_TYPE = "application/vnd.google-earth.kmz"

GEOJSON_OUTPUT_NAME = "output.geojson"
KMZ_OUTPUT_NAME = "merged.kmz"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or empty upload"},
    413: {"model": ErrorResponse, "description": "File too large"},
    422: {"model": ErrorResponse, "description": "Malformed input or unsupported geometry"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


@router.post(
    "/geojson-to-kml",
    response_class=Response,
    responses={200: {"content": {KML_MEDIA_TYPE: {}}}, **ERROR_RESPONSES},
    summary="Convert a GeoJSON FeatureCollection to KML",
)
async def geojson_to_kml(
    file: Annotated[UploadFile, File(description="GeoJSON FeatureCollection")],
) -> Response:
    """
    Convert an uploaded GeoJSON FeatureCollection into a KML document.

    Each feature becomes a Placemark named after its ``name`` property
    (``Unnamed Feature`` otherwise); the remaining properties are written
    as ExtendedData. The response is named after the upload, with a
    ``.kml`` extension.
    """
    content = await read_upload(file)
    features = decode_geojson(content, source=file.filename)

    with PerformanceTimer("kml_encode", threshold_ms=500):
        kml = encode_kml(
            features,
            document_name=settings.kml_document_name,
            document_description=settings.kml_document_description,
        )
    filename = f"{output_stem(file.filename)}.kml"
    logger.info(f"Converted {len(features)} GeoJSON feature(s) from {file.filename} to KML")

    return Response(content=kml, media_type=KML_MEDIA_TYPE, headers=attachment(filename))


@router.post(
    "/kml-to-geojson",
    response_class=Response,
    responses={200: {"content": {GEOJSON_MEDIA_TYPE: {}}}, **ERROR_RESPONSES},
    summary="Convert a KML document to GeoJSON",
)
async def kml_to_geojson(
    file: Annotated[UploadFile, File(description="KML document")],
) -> Response:
    """
    Convert every Placemark of an uploaded KML document into a GeoJSON feature.

    Placemarks are collected depth-first through Documents and Folders.
    """
    content = await read_upload(file)
    features = decode_kml(content, source=file.filename)

    with PerformanceTimer("geojson_encode", threshold_ms=500):
        geojson = encode_geojson(features)
    logger.info(f"Converted {len(features)} placemark(s) from {file.filename} to GeoJSON")

    return Response(
        content=geojson,
        media_type=GEOJSON_MEDIA_TYPE,
        headers=attachment(GEOJSON_OUTPUT_NAME),
    )


@router.post(
    "/multi-kml-to-kmz",
    response_class=Response,
    responses={200: {"content": {KMZ_MEDIA_TYPE: {}}}, **ERROR_RESPONSES},
    summary="Package several KML files into one KMZ",
)
async def multi_kml_to_kmz(
    files: Annotated[List[UploadFile], File(description="KML files, main document first")],
) -> Response:
    """
    Package the uploaded KML files into a KMZ archive.

    The first KML upload becomes ``doc.kml`` and later ones ``class2.kml``,
    ``class3.kml`` and so on. Uploads without a ``.kml`` extension are
    skipped. Documents are copied byte for byte.
    """
    if not files:
        raise ValidationError("No files uploaded", field="files")

    documents = []
    for upload in files:
        content = await read_upload(upload, field="files")
        documents.append((upload.filename or "", content))

    kmz = package_kmz(documents)

    return Response(
        content=kmz,
        media_type=KMZ_MEDIA_TYPE,
        headers=attachment(KMZ_OUTPUT_NAME),
    )
