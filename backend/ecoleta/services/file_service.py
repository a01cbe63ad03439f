"""
Ecoleta Backend — Upload Storage Service
=========================================

What:  Validates, stores, serves and cleans up location images.
How:   Checks extension, size and the content bytes (libmagic), writes
       the bytes asynchronously into the upload directory under a
       collision-free name, hands the stored filename back for the
       `locations.image` column.
Who:   Called by LocationService.update_image and the /uploads route.
When:  On PUT /locations/{id}, after the location is known to exist.

Stored names:
    <12 hex chars>-<sanitized original name>, e.g. "3f9a1c0b7d2e-photo.jpg"
    The random prefix keeps concurrent uploads of "photo.jpg" apart; the
    sanitized original name keeps files recognisable on disk. Only
    [A-Za-z0-9._-] survive sanitizing, so a stored name can never contain a
    path separator.
"""

import logging
import os
import re
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import magic

from ecoleta.config import settings
from ecoleta.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}

ALLOWED_MIME_TYPES = {"image/png", "image/jpeg", "image/jpg"}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileService:
    """
    Manages the upload directory.

    Directory Structure:
        uploads/
        ├── 3f9a1c0b7d2e-photo.jpg
        └── a07bc1d2e3f4-fachada.png
    """

    def __init__(self, upload_dir: Optional[str] = None, max_size: Optional[int] = None):
        """
        Args:
            upload_dir: Override the configured upload directory (used in tests).
            max_size:   Override the configured maximum upload size in bytes.
        """
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.max_size = max_size or settings.max_upload_size
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with upload_dir=%s", self.upload_dir)

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized (lowercase) extension.

        Raises ValidationError if the extension is not an accepted image type.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, size: int) -> None:
        """Rejects empty uploads and uploads above max_size."""
        if size == 0:
            raise ValidationError(message="Uploaded image is empty", field="image")

        if size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image is too large ({size / (1024 * 1024):.1f}MB). Maximum is {max_mb:.0f}MB.",
                field="image",
                context={"max_size": self.max_size, "actual_size": size},
            )

    def validate_mime_type(self, content: bytes, filename: str) -> str:
        """
        Check the content's real type from its leading bytes (libmagic).

        Returns the detected MIME type. Raises ValidationError when the bytes
        are not a PNG or JPEG image, whatever the filename says.
        """
        try:
            mime_type = magic.from_buffer(content, mime=True)
        except magic.MagicException as e:
            logger.error("MIME type detection failed for %s: %s", filename, str(e))
            raise FileStorageError(
                message="Could not verify the image type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The image must be a PNG or JPEG."
                ),
                field="image",
                context={"detected_mime": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def generate_filename(self, original_name: str) -> str:
        """Random 12-hex prefix + sanitized basename of the client's filename."""
        basename = Path(original_name).name or "image"
        safe_name = _UNSAFE_CHARS.sub("_", basename)
        return f"{uuid.uuid4().hex[:12]}-{safe_name}"

    async def store_file(self, content: bytes, original_name: str) -> str:
        """
        Write validated content to the upload directory.

        Returns the stored filename (relative to upload_dir).
        Raises FileStorageError if the write fails.
        """
        stored_name = self.generate_filename(original_name)
        absolute_path = self.upload_dir / stored_name

        try:
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("Upload stored: %s (%d bytes)", stored_name, len(content))
        return stored_name

    async def validate_and_store(self, filename: str, content: bytes) -> str:
        """
        Full pipeline: extension check, size check, content sniffing, write.

        Cheap checks run first so invalid uploads never touch the disk.
        """
        self.validate_extension(filename)
        self.validate_size(len(content))
        self.validate_mime_type(content, filename)
        return await self.store_file(content, filename)

    async def cleanup_file(self, stored_name: str) -> None:
        """
        Best-effort removal of a stored upload.

        Used when the database write that should reference the file fails.
        Failures are logged and not raised; the caller is already reporting
        the original error.
        """
        path = self.upload_dir / stored_name
        try:
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up upload: %s", stored_name)
            else:
                logger.debug("Cleanup: upload already gone: %s", stored_name)
        except OSError as e:
            logger.warning("Failed to clean up upload %s: %s", stored_name, str(e))

    def resolve(self, stored_name: str) -> Path:
        """
        Absolute path of a stored upload, for serving.

        Raises ValidationError for names escaping upload_dir and
        NotFoundError for files that do not exist.
        """
        full_path = (self.upload_dir / stored_name).resolve()
        if full_path.parent != self.upload_dir:
            raise ValidationError(message="Invalid file path", field="filename")
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=stored_name)
        return full_path


file_service = FileService()


def get_file_service() -> FileService:
    """FastAPI dependency returning the shared FileService."""
    return file_service
