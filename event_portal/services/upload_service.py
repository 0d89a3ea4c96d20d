"""Poster image storage on local disk.

Files are stored under a generated name (``file-<epoch-ms>-<random><ext>``)
so a client-supplied filename never reaches the filesystem.  The extension
is kept only when it is one of the image extensions; otherwise it is
derived from the MIME type.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

from event_portal.core.metrics import UPLOADS
from event_portal.services.errors import UploadRejected

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})

_EXTENSION_FOR_MIME = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}
_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp"})


@dataclass(frozen=True, slots=True)
class StoredUpload:
    url: str
    filename: str
    mimetype: str
    size: int


def _reject(message: str, *, status_code: int = 400) -> UploadRejected:
    UPLOADS.labels(outcome="rejected").inc()
    logger.warning("Upload rejected: %s", message)
    return UploadRejected(message, status_code=status_code)


def generate_filename(original_name: str | None, mimetype: str) -> str:
    ext = Path(original_name or "").suffix.lower()
    if ext not in _IMAGE_EXTENSIONS:
        ext = _EXTENSION_FOR_MIME[mimetype]
    return f"file-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


def validate_upload(mimetype: str | None, size: int, *, max_bytes: int) -> str:
    if mimetype not in ALLOWED_MIME_TYPES:
        raise _reject("Invalid file type. Only JPEG, PNG, and WEBP images are allowed.")
    if size > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise _reject(f"File size exceeds {limit_mb}MB limit.", status_code=413)
    return mimetype


def store_poster(
    content: bytes,
    *,
    original_name: str | None,
    mimetype: str | None,
    upload_dir: str,
    app_url: str,
    max_bytes: int,
) -> StoredUpload:
    """Validate and write one poster; return where it can be fetched."""
    if not content:
        raise _reject("No file uploaded")
    mimetype = validate_upload(mimetype, len(content), max_bytes=max_bytes)

    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    filename = generate_filename(original_name, mimetype)
    (directory / filename).write_bytes(content)

    UPLOADS.labels(outcome="stored").inc()
    logger.info("Poster stored: filename=%s size=%d", filename, len(content))
    return StoredUpload(
        url=f"{app_url}/uploads/{filename}",
        filename=filename,
        mimetype=mimetype,
        size=len(content),
    )


def resolve_stored_path(upload_dir: str, filename: str) -> Path | None:
    """Map a requested name to a stored file, or None.

    Only bare file names are accepted; anything with a directory part or a
    leading dot is refused.
    """
    if not filename or filename != Path(filename).name or filename.startswith("."):
        return None
    path = Path(upload_dir) / filename
    return path if path.is_file() else None
