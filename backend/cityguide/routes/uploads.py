"""
CityGuide Backend — Image Upload Routes
=========================================

What:  POST /api/upload-image stores a place image; GET /uploads/{path} serves it.
How:   The multipart field is named "image". The returned imageUrl is absolute,
       built from the request's base URL, and is what clients put in a
       submission's or update request's `image` field.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import FileResponse

from cityguide.dependencies import get_current_user
from cityguide.exceptions import ValidationError
from cityguide.models.user import User
from cityguide.schemas.common import ApiResponse, ErrorResponse
from cityguide.schemas.upload import UploadResponse
from cityguide.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


@router.post(
    "/api/upload-image",
    response_model=ApiResponse[UploadResponse],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Upload a place image (max 5MB)",
)
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
) -> ApiResponse[UploadResponse]:
    if image is None:
        raise ValidationError(message="No image file provided", field="image")

    # One byte past the limit is enough to detect an oversized file
    content = await image.read(file_service.max_file_size + 1)

    _, relative_path = await file_service.validate_and_store(
        filename=image.filename,
        content_type=image.content_type,
        content=content,
        content_length=image.size,
    )
    logger.info("Image uploaded by %s: %s", user.id, relative_path)

    image_url = f"{str(request.base_url).rstrip('/')}/uploads/{relative_path}"
    return ApiResponse(
        message="Image uploaded successfully",
        data=UploadResponse(image_url=image_url, filename=relative_path),
    )


@router.get(
    "/uploads/{file_path:path}",
    responses={404: {"model": ErrorResponse}},
    summary="Serve a stored image",
)
async def serve_upload(file_path: str) -> FileResponse:
    full_path, media_type = file_service.resolve_stored_file(file_path)
    return FileResponse(
        path=str(full_path),
        media_type=media_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )
