"""
Unit tests for the ImageKit client and the photo upload helpers
"""

import asyncio
import io
import base64
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi import HTTPException
from starlette.datastructures import Headers, UploadFile

from app.services.image_storage import ImageKitStorage, ImageUploadFailed
from app.config import MAX_PHOTO_BYTES
from app.services.photo_upload import PhotoFile, read_photos, upload_photos, delete_uploaded_photos
from app.utils.error_handler import PhotoUploadError
from conftest import FakeImageStorage

UPLOAD_URL = "https://upload.example.test/api/v1/files/upload"
API_URL = "https://api.example.test/v1"

def make_storage(handler, private_key="private_test_key"):
    return ImageKitStorage(
        private_key=private_key,
        upload_url=UPLOAD_URL,
        api_url=API_URL,
        transport=httpx.MockTransport(handler)
    )

class TestImageKitStorage:
    """Test cases for the HTTP client"""

    def test_upload_posts_base64_form(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(200, json={
                "url": "https://ik.imagekit.io/demo/reports/a.jpg",
                "thumbnailUrl": "https://ik.imagekit.io/demo/tr:n-thumb/reports/a.jpg",
                "fileId": "abc123",
            })

        result = asyncio.run(make_storage(handler).upload(b"jpeg-bytes", "a.jpg"))
        assert result == {
            "url": "https://ik.imagekit.io/demo/reports/a.jpg",
            "thumbnailUrl": "https://ik.imagekit.io/demo/tr:n-thumb/reports/a.jpg",
            "fileId": "abc123",
        }

        request = seen["request"]
        assert request.method == "POST"
        assert str(request.url) == UPLOAD_URL
        form = parse_qs(request.content.decode())
        assert form["fileName"] == ["a.jpg"]
        assert form["folder"] == ["/reports"]
        assert base64.b64decode(form["file"][0]) == b"jpeg-bytes"

        expected = base64.b64encode(b"private_test_key:").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"

    def test_upload_error_status_raises(self):
        storage = make_storage(lambda request: httpx.Response(500, json={"message": "boom"}))

        with pytest.raises(ImageUploadFailed):
            asyncio.run(storage.upload(b"jpeg-bytes", "a.jpg"))

    def test_upload_without_key_raises(self):
        storage = make_storage(lambda request: httpx.Response(200, json={}), private_key="")

        with pytest.raises(ImageUploadFailed):
            asyncio.run(storage.upload(b"jpeg-bytes", "a.jpg"))

    def test_delete_by_file_id(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(204)

        assert asyncio.run(make_storage(handler).delete("abc123")) is True
        assert seen["request"].method == "DELETE"
        assert str(seen["request"].url) == f"{API_URL}/files/abc123"

    def test_delete_missing_file_counts_as_deleted(self):
        storage = make_storage(lambda request: httpx.Response(404))
        assert asyncio.run(storage.delete("gone")) is True

    def test_delete_server_error_raises(self):
        storage = make_storage(lambda request: httpx.Response(503))

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(storage.delete("abc123"))

class TestUploadPhotos:
    """Test cases for the all-or-nothing upload helper"""

    def photos(self, *names):
        return [PhotoFile(content=b"img", filename=name, content_type="image/jpeg") for name in names]

    def test_all_succeed_in_order(self):
        storage = FakeImageStorage()

        result = asyncio.run(upload_photos(storage, self.photos("a.jpg", "b.jpg")))
        assert [meta["original_name"] for meta in result] == ["a.jpg", "b.jpg"]
        assert [meta["file_id"] for meta in result] == ["file_1", "file_2"]
        assert result[0]["size"] == 3
        assert storage.deleted == []

    def test_no_photos(self):
        assert asyncio.run(upload_photos(FakeImageStorage(), [])) == []

    def test_failure_deletes_successes(self):
        storage = FakeImageStorage()
        storage.fail_uploads = {"b.jpg"}

        with pytest.raises(PhotoUploadError) as exc_info:
            asyncio.run(upload_photos(storage, self.photos("a.jpg", "b.jpg")))

        assert exc_info.value.failures == ["b.jpg"]
        assert storage.deleted == ["file_1"]

    def test_compensating_delete_tolerates_errors(self):
        storage = FakeImageStorage()
        storage.fail_deletes = True

        asyncio.run(delete_uploaded_photos(storage, ["file_1", None, "file_2"]))
        assert storage.deleted == []

class UnreadableFile(io.BytesIO):
    def read(self, *args):
        raise AssertionError("upload body should not be read")

def upload_file(name, file, size=None, mime="image/jpeg"):
    return UploadFile(file=file, size=size, filename=name, headers=Headers({"content-type": mime}))

class TestReadPhotos:
    """Test cases for photo validation before upload"""

    def test_declared_size_rejected_before_reading(self):
        oversized = upload_file("huge.jpg", UnreadableFile(), size=MAX_PHOTO_BYTES + 1)

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(read_photos([oversized]))

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "File too large (max 5MB)"

    def test_valid_photo_read(self):
        photo = upload_file("a.jpg", io.BytesIO(b"jpeg-bytes"), size=10)

        result = asyncio.run(read_photos([photo]))
        assert result == [PhotoFile(content=b"jpeg-bytes", filename="a.jpg", content_type="image/jpeg")]

    def test_empty_photo_rejected(self):
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(read_photos([upload_file("empty.jpg", io.BytesIO(b""), size=0)]))

        assert exc_info.value.detail == "File is empty"
