"""
Ecoleta Backend — Upload Serving Route
=======================================

What:  GET /uploads/{filename} returns a stored location image.
How:   FileService.resolve() confines lookups to the upload directory, so
       "../" style names are refused before touching the filesystem.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from ecoleta.schemas.common import ErrorResponse
from ecoleta.services.file_service import FileService, get_file_service

router = APIRouter(prefix="/uploads", tags=["Uploads"])


@router.get(
    "/{filename}",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Invalid name or file not found", "model": ErrorResponse},
    },
    summary="Serve an uploaded location image",
)
async def serve_upload(
    filename: str,
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    path = files.resolve(filename)
    # media type is guessed from the extension
    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
