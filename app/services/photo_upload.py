"""
Validation and all-or-nothing upload of report photos
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, UploadFile, status

from app.config import MAX_PHOTOS_PER_REPORT, MAX_PHOTO_BYTES
from app.utils.error_handler import PhotoUploadError

logger = logging.getLogger(__name__)

REPORT_PHOTO_FOLDER = "/reports"

@dataclass
class PhotoFile:
    """A validated photo held in memory until it is uploaded"""
    content: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

def _too_large() -> HTTPException:
    return _bad_request(f"File too large (max {MAX_PHOTO_BYTES // (1024 * 1024)}MB)")

async def read_photos(files: Optional[list[UploadFile]]) -> list[PhotoFile]:
    """Read and validate uploaded photos: at most two images of at most 5MB each"""
    files = [f for f in (files or []) if f is not None and f.filename]

    if len(files) > MAX_PHOTOS_PER_REPORT:
        raise _bad_request(f"Too many files (max {MAX_PHOTOS_PER_REPORT})")

    photos = []
    for upload in files:
        content_type = upload.content_type or ""
        if not content_type.startswith("image/"):
            raise _bad_request("Invalid file type")

        # Declared size first so oversized files are never read into memory
        if upload.size is not None and upload.size > MAX_PHOTO_BYTES:
            raise _too_large()

        content = await upload.read()
        if len(content) > MAX_PHOTO_BYTES:
            raise _too_large()
        if not content:
            raise _bad_request("File is empty")

        photos.append(PhotoFile(content=content, filename=upload.filename, content_type=content_type))

    return photos

async def delete_uploaded_photos(storage, file_ids: list[str]):
    """Compensating delete for files whose submission failed"""
    file_ids = [file_id for file_id in file_ids if file_id]
    results = await asyncio.gather(
        *(storage.delete(file_id) for file_id in file_ids),
        return_exceptions=True
    )
    for file_id, result in zip(file_ids, results):
        if isinstance(result, Exception):
            logger.warning(f"Rollback delete failed for {file_id}: {result}")

async def upload_photos(storage, photos: list[PhotoFile]) -> list[dict]:
    """Upload every photo concurrently.

    Either all uploads succeed and their metadata is returned in input
    order, or the successful ones are deleted again and PhotoUploadError is
    raised. Nothing is retried.
    """
    if not photos:
        return []

    results = await asyncio.gather(
        *(storage.upload(photo.content, photo.filename, REPORT_PHOTO_FOLDER) for photo in photos),
        return_exceptions=True
    )

    successes = []
    failures = []
    for photo, result in zip(photos, results):
        if isinstance(result, Exception) or not result:
            failures.append((photo.filename, result))
        else:
            successes.append((photo, result))

    if failures:
        for filename, reason in failures:
            logger.error(f"Photo upload failed for {filename}: {reason}")
        await delete_uploaded_photos(storage, [meta.get("fileId") for _, meta in successes])
        raise PhotoUploadError(
            "Failed to upload one or more photos",
            failures=[filename for filename, _ in failures]
        )

    return [
        {
            "url": meta.get("url"),
            "thumbnail_url": meta.get("thumbnailUrl"),
            "file_id": meta.get("fileId"),
            "original_name": photo.filename,
            "size": photo.size,
            "mime_type": photo.content_type,
        }
        for photo, meta in successes
    ]
