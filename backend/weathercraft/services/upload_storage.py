"""
Local disk storage for report photos, served back under /uploads.
"""

import logging
import os
import secrets
import time
from typing import Optional

from fastapi import UploadFile

from weathercraft.core.config import get_settings
from weathercraft.core.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
UPLOADS_URL_PREFIX = "/uploads"
_CHUNK_SIZE = 64 * 1024


class LocalUploadStorage:
    def __init__(self, directory: Optional[str] = None, max_bytes: Optional[int] = None) -> None:
        settings = get_settings()
        self.directory = directory or settings.UPLOADS_DIR
        self.max_bytes = max_bytes if max_bytes is not None else settings.MAX_UPLOAD_BYTES
        os.makedirs(self.directory, exist_ok=True)

    def save(self, upload: UploadFile) -> str:
        """Write the upload to disk under a unique name and return its public URL."""
        ext = os.path.splitext(upload.filename or "")[1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError("Photo must be a JPEG, PNG, GIF or WebP image")

        filename = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
        path = os.path.join(self.directory, filename)
        written = 0
        try:
            with open(path, "wb") as out:
                while chunk := upload.file.read(_CHUNK_SIZE):
                    written += len(chunk)
                    if written > self.max_bytes:
                        break
                    out.write(chunk)
        except OSError as e:
            logger.error("Saving upload %s failed: %s", filename, e)
            self._discard(path)
            raise StorageError("Failed to store photo") from e

        if written > self.max_bytes:
            self._discard(path)
            raise ValidationError(f"Photo exceeds {self.max_bytes} bytes")
        return f"{UPLOADS_URL_PREFIX}/{filename}"

    def delete(self, url: str) -> None:
        """Remove a file previously returned by `save`. Unknown URLs are ignored."""
        if not url.startswith(f"{UPLOADS_URL_PREFIX}/"):
            return
        filename = os.path.basename(url)
        self._discard(os.path.join(self.directory, filename))

    @staticmethod
    def _discard(path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)


def get_upload_storage() -> LocalUploadStorage:
    """Dependency for FastAPI."""
    return LocalUploadStorage()
