# ==============================================================================
# UPLOAD SERVICE - Image Storage
# ==============================================================================
# Local-disk image store under UPLOAD_DIR, served from UPLOAD_URL_PREFIX
# ==============================================================================

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple
from uuid import uuid4

from storefront.core.constants import ErrorMessages
from storefront.core.exceptions import NotFoundError, StorageError, ValidationError
from storefront.core.settings import settings
from storefront.schemas.upload import UploadResult

logger = logging.getLogger(__name__)

# Content type -> stored file extension
IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

_DATA_URI = re.compile(r"^data:(?P<type>image/[a-zA-Z0-9.+-]+);base64,(?P<data>.+)$", re.DOTALL)
_PUBLIC_ID = re.compile(r"^[a-f0-9]{32}$")

# (content, content type, original filename)
IncomingFile = Tuple[bytes, Optional[str], Optional[str]]


class UploadService:
    """
    Stores validated images on local disk.

    Files are named ``<public_id>.<ext>``; the public id is the only
    handle clients get, so deletes cannot address arbitrary paths.
    """

    def __init__(
        self,
        upload_dir: Optional[str] = None,
        url_prefix: Optional[str] = None,
    ) -> None:
        self._dir = Path(upload_dir or settings.UPLOAD_DIR)
        self._url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")

    # ==========================================================================
    # VALIDATION
    # ==========================================================================

    @staticmethod
    def _validate(content: bytes, content_type: Optional[str], filename: Optional[str] = None) -> str:
        """
        Check type and size of one file.

        Returns:
            Normalized content type

        Raises:
            ValidationError: If empty, too large or not an allowed image type
        """
        name = filename or "upload"
        content_type = (content_type or "").split(";")[0].strip().lower()

        if content_type not in settings.UPLOAD_ALLOWED_TYPES or content_type not in IMAGE_EXTENSIONS:
            raise ValidationError(
                message=f"Unsupported file type for {name}: {content_type or 'unknown'}",
                errors={"allowed_types": list(settings.UPLOAD_ALLOWED_TYPES)},
            )
        if not content:
            raise ValidationError(message=f"Empty file not allowed: {name}")
        if len(content) > settings.UPLOAD_MAX_SIZE:
            raise ValidationError(
                message=f"File too large: {name}. Maximum: {settings.UPLOAD_MAX_SIZE} bytes",
            )
        return content_type

    # ==========================================================================
    # STORAGE
    # ==========================================================================

    def _write(self, content: bytes, content_type: str) -> UploadResult:
        public_id = uuid4().hex
        extension = IMAGE_EXTENSIONS[content_type]
        file_path = self._dir / f"{public_id}.{extension}"

        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            with open(file_path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to store image {file_path}: {e}")
            raise StorageError(message="Failed to store image") from e

        logger.info(f"Image stored: {public_id}.{extension} ({len(content)} bytes)")
        return UploadResult(
            public_id=public_id,
            url=f"{self._url_prefix}/{public_id}.{extension}",
            format=extension,
            size=len(content),
            content_type=content_type,
        )

    def _write_all(self, checked: List[Tuple[bytes, str]]) -> List[UploadResult]:
        """Write validated files; on failure remove the ones already written."""
        results: List[UploadResult] = []
        try:
            for content, content_type in checked:
                results.append(self._write(content, content_type))
        except StorageError:
            for stored in results:
                self._find(stored.public_id).unlink(missing_ok=True)
            raise
        return results

    def _find(self, public_id: str) -> Path:
        if not _PUBLIC_ID.match(public_id):
            raise NotFoundError(message=ErrorMessages.IMAGE_NOT_FOUND, resource_type="image", resource_id=public_id)
        for path in self._dir.glob(f"{public_id}.*"):
            return path
        raise NotFoundError(message=ErrorMessages.IMAGE_NOT_FOUND, resource_type="image", resource_id=public_id)

    def _remove(self, public_id: str) -> Path:
        path = self._find(public_id)
        try:
            path.unlink()
        except OSError as e:
            logger.error(f"Failed to delete image {path}: {e}")
            raise StorageError(message="Failed to delete image") from e
        return path

    # ==========================================================================
    # OPERATIONS
    # ==========================================================================
    # Disk work runs in the default executor so large writes do not block
    # the event loop

    async def upload_image(
        self,
        content: bytes,
        content_type: Optional[str],
        filename: Optional[str] = None,
    ) -> UploadResult:
        """Store a single image."""
        checked_type = self._validate(content, content_type, filename)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._write, content, checked_type)

    async def upload_images(self, files: List[IncomingFile]) -> List[UploadResult]:
        """
        Store several images.

        Every file is validated before the first one is written; a
        storage failure removes the files already written.

        Raises:
            ValidationError: If no files, too many files or any file invalid
        """
        if not files:
            raise ValidationError(message="No files uploaded")
        if len(files) > settings.UPLOAD_MAX_FILES:
            raise ValidationError(
                message=f"Too many files: {len(files)}. Maximum: {settings.UPLOAD_MAX_FILES}",
            )

        checked = [
            (content, self._validate(content, content_type, filename))
            for content, content_type, filename in files
        ]

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._write_all, checked)

    async def upload_base64(self, data_uri: str) -> UploadResult:
        """
        Store an image sent as ``data:image/<type>;base64,<payload>``.

        Raises:
            ValidationError: If the data URI or its payload is malformed
        """
        match = _DATA_URI.match(data_uri.strip())
        if match is None:
            raise ValidationError(message="Invalid image data URI")

        try:
            content = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(message="Invalid base64 image payload") from e

        return await self.upload_image(content, match.group("type"))

    async def delete_image(self, public_id: str) -> bool:
        """
        Delete a stored image.

        Raises:
            NotFoundError: If no image has this public id
            StorageError: If the file cannot be removed
        """
        loop = asyncio.get_running_loop()
        path = await loop.run_in_executor(None, self._remove, public_id)

        logger.info(f"Image deleted: {path.name}")
        return True
