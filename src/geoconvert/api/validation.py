"""
Area and location validation endpoint.
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from geoconvert.api.uploads import read_upload
from geoconvert.core.config import settings
from geoconvert.core.errors import ValidationError
from geoconvert.core.geometry import Geometry
from geoconvert.core.loaders import load_main_geometry, load_position_geometries
from geoconvert.core.validation import validate_file_extension
from geoconvert.core.validator import validate_area_and_bounds
from geoconvert.models.errors import ErrorResponse
from geoconvert.models.validation import AreaValidationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/validation", tags=["validation"])


@router.post(
    "/check-area-and-location",
    response_model=AreaValidationResponse,
    responses={
        400: {
            "model": AreaValidationResponse,
            "description": "Area or bounds mismatch (or missing uploads, as ErrorResponse)",
        },
        413: {"model": ErrorResponse, "description": "File too large"},
        415: {"model": ErrorResponse, "description": "Main file is not KML or GeoJSON"},
        422: {"model": ErrorResponse, "description": "Malformed input or unsupported geometry"},
    },
    summary="Check position files against a main file",
)
async def check_area_and_location(
    mainFile: Annotated[UploadFile, File(description="Reference KML or GeoJSON file")],
    positionFiles: Annotated[
        List[UploadFile],
        File(description="KML/GeoJSON files, or zip/KMZ archives containing them"),
    ],
    tolerance_percent: Annotated[
        Optional[float],
        Form(ge=0, description="Relative area tolerance (0.05 = 5%)"),
    ] = None,
) -> JSONResponse:
    """
    Validate that the position files cover the main file.

    The main file's features are unioned into one reference geometry.
    Every position file is decoded (archives are expanded) and the
    resulting geometries are unioned and compared by area and envelope.

    Returns 200 with the comparison when both checks pass, 400 with the
    same body and the mismatch reasons otherwise.
    """
    if not positionFiles:
        raise ValidationError("No position files uploaded", field="positionFiles")

    validate_file_extension(mainFile.filename, settings.allowed_extensions)
    main_content = await read_upload(mainFile, field="mainFile")
    main_geometry = load_main_geometry(mainFile.filename or "", main_content)

    position_geometries: List[Geometry] = []
    for upload in positionFiles:
        validate_file_extension(upload.filename, settings.allowed_extensions)
        content = await read_upload(upload, field="positionFiles")
        position_geometries.extend(load_position_geometries(upload.filename or "", content))

    logger.info(
        f"Validating {len(position_geometries)} position geometries "
        f"from {len(positionFiles)} file(s) against {mainFile.filename}"
    )

    tolerance = settings.tolerance_percent if tolerance_percent is None else tolerance_percent
    result = validate_area_and_bounds(
        main_geometry,
        position_geometries,
        tolerance_percent=tolerance,
        bounds_tolerance=settings.bounds_tolerance,
    )

    response = AreaValidationResponse.from_result(result)
    status_code = status.HTTP_200_OK if result.success else status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))
