"""Booking photo storage on local disk."""

import asyncio
import re
import time
from pathlib import Path
from typing import Callable, Optional

from nanjil.app.core.logging import get_log_context, get_logger
from nanjil.app.exceptions import (
    InvalidBookingIdError,
    InvalidPhotoFilenameError,
    PhotoUploadError,
)

logger = get_logger(__name__)

DEFAULT_EXTENSION = "jpg"

_BOOKING_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
_EXTENSION_RE = re.compile(r"^[A-Za-z0-9]+$")


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def photo_extension(original_filename: Optional[str]) -> str:
    """Extension of the uploaded file name, or "jpg" when there is none."""
    if original_filename and "." in original_filename:
        ext = original_filename.rsplit(".", 1)[1]
        if _EXTENSION_RE.match(ext):
            return ext
    return DEFAULT_EXTENSION


class PhotoService:
    """Stores booking photos as ``<booking_id>-<epoch_ms>.<ext>``.

    Files are written under ``upload_dir`` and exposed to clients as
    ``<url_prefix>/<filename>``; serving them is left to the web server.
    """

    def __init__(
        self,
        upload_dir: str | Path = "./uploads/photos",
        url_prefix: str = "/uploads/photos",
        clock: Optional[Callable[[], int]] = None,
    ):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self._clock = clock or _epoch_ms
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def upload_photo(
        self,
        content: bytes,
        original_filename: Optional[str],
        booking_id: str,
    ) -> str:
        """Write a photo for a booking and return its public URL.

        Raises:
            InvalidBookingIdError: If booking_id is not safe in a file name
            PhotoUploadError: If the file could not be written
        """
        if not _BOOKING_ID_RE.match(booking_id or ""):
            raise InvalidBookingIdError(booking_id)

        filename = f"{booking_id}-{self._clock()}.{photo_extension(original_filename)}"
        filepath = self.upload_dir / filename

        try:
            await asyncio.to_thread(filepath.write_bytes, content)
        except OSError as e:
            logger.error(
                f"Photo upload failed: {e}",
                extra=get_log_context(booking_id=booking_id, photo_file=filename),
            )
            raise PhotoUploadError() from e

        logger.info(
            "Photo stored",
            extra=get_log_context(booking_id=booking_id, photo_file=filename, size=len(content)),
        )
        return f"{self.url_prefix}/{filename}"

    def get_photo_path(self, filename: str) -> Path:
        """Filesystem path of a stored photo.

        Raises:
            InvalidPhotoFilenameError: If filename would resolve outside the
                upload directory
        """
        path = self.upload_dir / filename
        if path.resolve().parent != self.upload_dir.resolve():
            raise InvalidPhotoFilenameError(filename)
        return path
