from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from pydantic import BaseModel

from event_portal.api.dependencies import CurrentAdmin
from event_portal.core.config import SETTINGS
from event_portal.services import upload_service
from event_portal.services.errors import UploadRejected

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["uploads"])


class UploadOut(BaseModel):
    url: str
    filename: str
    mimetype: str
    size: int


@router.post("", response_model=UploadOut, status_code=status.HTTP_201_CREATED)
async def upload_poster(admin: CurrentAdmin, file: UploadFile | None = None) -> UploadOut:
    """Store a poster image (JPEG, PNG or WEBP, at most MAX_UPLOAD_BYTES)."""
    if file is None:
        raise UploadRejected("No file uploaded")

    # One byte past the limit is enough to know it is too large
    content = await file.read(SETTINGS.max_upload_bytes + 1)
    stored = await asyncio.to_thread(
        upload_service.store_poster,
        content,
        original_name=file.filename,
        mimetype=file.content_type,
        upload_dir=SETTINGS.upload_dir,
        app_url=SETTINGS.app_url,
        max_bytes=SETTINGS.max_upload_bytes,
    )
    logger.info("Poster uploaded by admin=%s filename=%s", admin.id, stored.filename)
    return UploadOut(
        url=stored.url,
        filename=stored.filename,
        mimetype=stored.mimetype,
        size=stored.size,
    )


@router.get("/{filename}", include_in_schema=False)
async def get_poster(filename: str) -> FileResponse:
    path = upload_service.resolve_stored_path(SETTINGS.upload_dir, filename)
    if path is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(path)
