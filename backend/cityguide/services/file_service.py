"""
CityGuide Backend — Image Storage Service
===========================================

What:  Validates, stores and serves the place images uploaded through
       POST /api/upload-image.
How:   Files are written with aiofiles under STORAGE_ROOT in date-organized
       directories with UUID names, and served back from /uploads/<path>.
Who:   The upload and file-serving routes.

Validation order (cheapest first):
    1. Extension is one of .png .jpg .jpeg .gif .webp
    2. Declared content type starts with image/
    3. Size is at most MAX_FILE_SIZE (5MB by default), using Content-Length
       when the client sends it and the actual byte count always
    4. Content sniffed with python-magic must be the image type the
       extension names (a .png must carry PNG header bytes)

Directory structure:
    uploads/
    └── 2026/
        └── 10/
            └── 18/
                ├── a1b2c3d4-....jpg
                └── e5f6g7h8-....webp

UUID filenames contain no user input, so stored paths cannot traverse.
Serving resolves the requested path and rejects anything outside the root.
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from cityguide.config import settings
from cityguide.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

# Served media type per extension
MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


class FileService:
    """
    Upload lifecycle:
        1. Route reads the multipart "image" part → validate_and_store()
        2. Extension, content type, size and magic-byte checks
        3. Bytes written to YYYY/MM/DD/<uuid><ext>
        4. Relative path returned; the route turns it into a public URL
    """

    def __init__(self, storage_root: Optional[str] = None, max_file_size: Optional[int] = None):
        """
        Args:
            storage_root:  Override settings.storage_root (tests use a temp dir)
            max_file_size: Override settings.max_file_size in bytes
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.max_file_size = max_file_size or settings.max_file_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: Optional[str]) -> str:
        """Returns the lower-cased extension, dot included."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message="Only image files are allowed!",
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_content_type(self, content_type: Optional[str]) -> None:
        if not content_type or not content_type.lower().startswith("image/"):
            raise ValidationError(
                message="Only image files are allowed!",
                field="image",
                context={"content_type": content_type},
            )

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Checks the reported Content-Length (if any) and then the real size.

        Raises:
            ValidationError: either exceeds max_file_size, or the file is empty
        """
        max_mb = self.max_file_size / (1024 * 1024)
        too_large = f"File too large. Maximum size is {max_mb:.0f}MB."

        if content_length and content_length > self.max_file_size:
            raise ValidationError(
                message=too_large,
                field="image",
                context={"max_size": self.max_file_size, "reported_size": content_length},
            )
        if actual_size > self.max_file_size:
            raise ValidationError(
                message=too_large,
                field="image",
                context={"max_size": self.max_file_size, "actual_size": actual_size},
            )
        if actual_size == 0:
            raise ValidationError(message="No image file provided", field="image")

    def validate_mime_type(self, content: bytes, extension: str) -> str:
        """
        Detects the real type from the file header and checks it against the
        extension.

        Returns:
            Detected MIME type, e.g. "image/png"

        Raises:
            ValidationError: content is not an image, or not the image type
                             the extension claims
            FileStorageError: libmagic failed to inspect the bytes
        """
        try:
            import magic
            mime_type = magic.from_buffer(content, mime=True)
        except ImportError:
            # python-magic or libmagic not installed (e.g. bare CI images)
            logger.warning(
                "python-magic not available, falling back to extension-based type detection. "
                "Install libmagic for production security."
            )
            mime_type = MEDIA_TYPES.get(extension, "application/octet-stream")
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type != MEDIA_TYPES.get(extension):
            logger.warning("Upload rejected: %s content named %s", mime_type, extension)
            raise ValidationError(
                message="Only image files are allowed!",
                field="image",
                context={"detected_type": mime_type, "extension": extension},
            )
        return mime_type

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        now = datetime.now(timezone.utc)
        relative_path = f"{now.strftime('%Y/%m/%d')}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Writes validated bytes to disk and returns (absolute_path, relative_path).

        Raises:
            FileStorageError: directory creation or write failed
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return str(absolute_path), relative_path

    async def cleanup_file(self, file_path: str) -> None:
        """Best-effort removal of a stored file; failures are only logged."""
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        ext = self.validate_extension(filename)
        self.validate_content_type(content_type)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content, ext)
        return await self.store_file(content, ext)

    def resolve_stored_file(self, relative_path: str) -> Tuple[Path, str]:
        """
        Maps a /uploads/<path> request onto the storage root.

        Returns:
            (absolute_path, media_type)

        Raises:
            ValidationError: the path escapes the storage root
            NotFoundError: nothing stored there
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path", context={"path": relative_path})
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        media_type = MEDIA_TYPES.get(full_path.suffix.lower(), "application/octet-stream")
        return full_path, media_type


file_service = FileService()
