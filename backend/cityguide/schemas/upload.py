"""Response schema for POST /api/upload-image."""

from cityguide.schemas.common import CamelModel


class UploadResponse(CamelModel):
    image_url: str
    filename: str
