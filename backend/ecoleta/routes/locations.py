"""
Ecoleta Backend — Location Route Handlers
==========================================

What:  GET /locations, GET /locations/{id}, POST /locations,
       PUT /locations/{id}.
How:   Extracts query, path, body and upload data, delegates to
       LocationService with the request's AsyncSession, returns JSON.

Error responses come from the global handlers in main.py:
    400: validation failure (aggregated) or "Location not found"
    500: failed transaction or storage error
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ecoleta.database import get_db_session
from ecoleta.schemas.common import ErrorResponse
from ecoleta.schemas.location import (
    LocationCreate,
    LocationDetailResponse,
    LocationResponse,
)
from ecoleta.services.file_service import FileService, get_file_service
from ecoleta.services.location_service import location_service, parse_item_ids

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["Locations"])


@router.get(
    "",
    response_model=List[LocationResponse],
    responses={
        400: {"description": "Malformed items filter", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List collection points",
    description=(
        "Returns every location. When city, uf and items are all supplied, only "
        "locations in that city and state accepting at least one of the items are "
        "returned, each once."
    ),
)
async def list_locations(
    city: Optional[str] = Query(default=None, description="City name"),
    uf: Optional[str] = Query(default=None, description="State code"),
    items: Optional[str] = Query(default=None, description="Comma-separated item ids, e.g. 1,2"),
    db: AsyncSession = Depends(get_db_session),
) -> List[LocationResponse]:
    item_ids = parse_item_ids(items) if (city and uf and items) else None
    return await location_service.list_locations(db=db, city=city, uf=uf, items=item_ids)


@router.get(
    "/{location_id}",
    response_model=LocationDetailResponse,
    responses={
        400: {"description": "Location not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a location and its item titles",
)
async def get_location(
    location_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> LocationDetailResponse:
    return await location_service.get_location(db=db, location_id=location_id)


@router.post(
    "",
    response_model=LocationResponse,
    responses={
        400: {"description": "Validation failed", "model": ErrorResponse},
        500: {"description": "Transaction failed", "model": ErrorResponse},
    },
    summary="Create a location",
    description=(
        "Creates the location and its item associations in a single transaction. "
        "The body is validated before anything is written; all field errors are "
        "reported together."
    ),
)
async def create_location(
    body: LocationCreate,
    db: AsyncSession = Depends(get_db_session),
) -> LocationResponse:
    return await location_service.create_location(db=db, payload=body)


@router.put(
    "/{location_id}",
    response_model=LocationResponse,
    responses={
        400: {"description": "Location not found or invalid image", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Replace a location's image",
    description=(
        "multipart/form-data with an optional `image` field (PNG, JPG or JPEG). "
        "Without it the location is rewritten with its current image."
    ),
)
async def update_location_image(
    location_id: int,
    image: Optional[UploadFile] = File(default=None, description="Location picture"),
    db: AsyncSession = Depends(get_db_session),
    files: FileService = Depends(get_file_service),
) -> LocationResponse:
    """
    Read the upload into memory (bounded by the size check in FileService)
    and hand it to the service. The upload is always closed afterwards.
    """
    if image is None:
        logger.info("No image received for location %s", location_id)
        return await location_service.update_image(
            db=db, location_id=location_id, filename=None, content=None, files=files
        )

    try:
        content = await image.read()
        logger.info(
            "Received image for location %s: filename=%s, size=%d bytes",
            location_id,
            image.filename or "unknown",
            len(content),
        )
        return await location_service.update_image(
            db=db,
            location_id=location_id,
            filename=image.filename or "image.jpg",
            content=content,
            files=files,
        )
    finally:
        await image.close()
