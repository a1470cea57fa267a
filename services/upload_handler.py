"""Validation and storage of uploaded student images.

Accepted files are written under the configured upload directory as
`<millisecond-timestamp>-<sanitized-original-name>`. Only that filename is
handed back to callers; the directory itself never leaves this module.
"""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path, PurePosixPath
from typing import Callable, Optional, Sequence

import aiofiles
from fastapi import UploadFile

from models.student_record import StoredUpload
from utils.errors import UploadValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/gif",
    "image/webp",
}

INVALID_TYPE_MESSAGE = "Only image files are allowed (png, jpg, jpeg, gif, webp)."

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.\-_]")
_CHUNK_SIZE = 64 * 1024


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lower-case a media type and drop parameters such as `; charset=`."""
    return (content_type or "").lower().split(";", 1)[0].strip()


def sanitize_filename(original: Optional[str]) -> str:
    """Strip directories from `original` and replace unsafe characters with `_`."""
    base = PurePosixPath((original or "").replace("\\", "/")).name
    safe = _UNSAFE_CHARS.sub("_", base)
    return safe or "upload"


class UploadHandler:
    """Validate and persist at most one image per request.

    Args:
        upload_dir: Directory receiving uploaded files, created on demand.
        clock: Returns the current time in seconds; injectable for tests.
    """

    def __init__(self, upload_dir: Path | str, clock: Callable[[], float] = time.time) -> None:
        self.upload_dir = Path(upload_dir)
        self._clock = clock
        self._last_prefix = 0

    def ensure_directory(self) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir

    @staticmethod
    def is_empty_part(file: UploadFile) -> bool:
        """Browsers send a nameless part when the file input was left blank."""
        return not file.filename

    def validate(self, file: UploadFile) -> str:
        """Return the normalized media type or raise UploadValidationError."""
        content_type = normalize_content_type(file.content_type)
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise UploadValidationError(INVALID_TYPE_MESSAGE)
        return content_type

    def next_prefix(self) -> int:
        """Millisecond timestamp, strictly increasing for this handler."""
        now_ms = int(self._clock() * 1000)
        self._last_prefix = max(now_ms, self._last_prefix + 1)
        return self._last_prefix

    async def save(self, file: UploadFile) -> Optional[StoredUpload]:
        """Validate `file` and write it to the upload directory.

        Returns:
            StoredUpload describing the written file, or None for an empty part.

        Raises:
            UploadValidationError: If the declared media type is not an allowed image type.
        """
        if self.is_empty_part(file):
            return None

        content_type = self.validate(file)
        safe_name = sanitize_filename(file.filename)
        self.ensure_directory()

        while True:
            filename = f"{self.next_prefix()}-{safe_name}"
            try:
                async with aiofiles.open(self.upload_dir / filename, "xb") as out:
                    size = await self._copy(file, out)
            except FileExistsError:
                # Name already taken on disk; move on to the next prefix.
                continue
            break

        logger.info("Stored upload %s (%s, %d bytes)", filename, content_type, size)
        return StoredUpload(filename=filename, content_type=content_type, size=size)

    @staticmethod
    async def _copy(file: UploadFile, out) -> int:
        size = 0
        while chunk := await file.read(_CHUNK_SIZE):
            await out.write(chunk)
            size += len(chunk)
        return size

    async def handle(self, files: Sequence[UploadFile]) -> Optional[StoredUpload]:
        """Store the single image attached to a write request, if any.

        Raises:
            UploadValidationError: If more than one file was attached or the type is not allowed.
        """
        attached = [f for f in files if not self.is_empty_part(f)]
        if len(attached) > 1:
            raise UploadValidationError("Only one image file may be uploaded per request.")
        if not attached:
            return None
        return await self.save(attached[0])
