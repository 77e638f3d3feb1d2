"""
Client for the ImageKit image hosting service
"""

import base64
import logging
from typing import Optional

import httpx

from app.config import IMAGEKIT_PRIVATE_KEY, IMAGEKIT_UPLOAD_URL, IMAGEKIT_API_URL

logger = logging.getLogger(__name__)

class ImageUploadFailed(Exception):
    """The image host rejected or failed an upload"""

class ImageKitStorage:
    """Uploads report photos and deletes them by file id.

    ImageKit authenticates server-side calls with HTTP basic auth, the
    private key as username and an empty password.
    """

    def __init__(
        self,
        private_key: Optional[str] = None,
        upload_url: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.private_key = private_key if private_key is not None else IMAGEKIT_PRIVATE_KEY
        self.upload_url = upload_url or IMAGEKIT_UPLOAD_URL
        self.api_url = (api_url or IMAGEKIT_API_URL).rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def _auth(self) -> tuple[str, str]:
        return (self.private_key, "")

    async def upload(self, content: bytes, filename: str, folder: str = "/reports") -> dict:
        """Upload raw bytes, returning ``{url, thumbnailUrl, fileId}``"""
        if not self.private_key:
            raise ImageUploadFailed("Image hosting is not configured")

        form = {
            "file": base64.b64encode(content).decode("ascii"),
            "fileName": filename,
            "folder": folder,
            "useUniqueFileName": "true",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.upload_url, data=form, auth=self._auth)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Error uploading {filename} to ImageKit: {e}")
            raise ImageUploadFailed("Image upload failed") from e

        return {
            "url": data.get("url"),
            "thumbnailUrl": data.get("thumbnailUrl") or data.get("thumbnail"),
            "fileId": data.get("fileId"),
        }

    async def delete(self, file_id: str) -> bool:
        """Delete a hosted file; a file that is already gone counts as deleted"""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.delete(f"{self.api_url}/files/{file_id}", auth=self._auth)
            if response.status_code == 404:
                return True
            response.raise_for_status()
        return True

_storage: Optional[ImageKitStorage] = None

def get_image_storage() -> ImageKitStorage:
    """FastAPI dependency returning the process-wide storage client"""
    global _storage
    if _storage is None:
        _storage = ImageKitStorage()
    return _storage
