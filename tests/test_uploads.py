"""Object storage upload tests."""

from __future__ import annotations

import httpx
import pytest

from tasktracker.client.uploads import FileUpload, ObjectStorage
from tasktracker.common.exceptions import ApiError, NetworkError, ValidationException
from tests.conftest import STORAGE_BASE


class TestObjectStorage:

    async def test_upload_returns_public_url(self, object_storage, storage_upstream):
        storage_upstream.default = lambda request: httpx.Response(200, json={"Key": request.url.path})

        url = await object_storage.upload("photo.png", b"\x89PNG", "image/png")

        sent = storage_upstream.calls[0]
        assert sent.method == "POST"
        assert sent.url.path.startswith("/storage/v1/object/tasktracker/tasktracker/")
        assert sent.url.path.endswith("_photo.png")
        assert sent.headers["apikey"] == "storage-key"
        assert sent.headers["Authorization"] == "Bearer storage-key"
        assert sent.headers["Content-Type"] == "image/png"
        assert sent.content == b"\x89PNG"
        assert url.startswith(f"{STORAGE_BASE}/storage/v1/object/public/tasktracker/tasktracker/")
        assert url.endswith("_photo.png")

    async def test_content_type_guessed_from_name(self, object_storage, storage_upstream):
        storage_upstream.default = lambda request: httpx.Response(200, json={})
        await object_storage.upload_file(FileUpload(filename="scan.pdf", content=b"%PDF"))
        assert storage_upstream.calls[0].headers["Content-Type"] == "application/pdf"

    async def test_missing_file_rejected(self, object_storage):
        with pytest.raises(ValidationException) as exc_info:
            await object_storage.upload(None, None)
        assert exc_info.value.detail == "Please select a file"

    async def test_storage_error(self, object_storage, storage_upstream):
        storage_upstream.default = lambda request: httpx.Response(400, json={"error": "Bucket not found"})

        with pytest.raises(ApiError) as exc_info:
            await object_storage.upload_file(FileUpload(filename="a.pdf", content=b"%PDF"))
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Upload failed"

    async def test_unreachable_storage(self, object_storage, storage_upstream):
        def boom(request):
            raise httpx.ConnectTimeout("timeout", request=request)

        storage_upstream.default = boom
        with pytest.raises(NetworkError):
            await object_storage.upload("a.png", b"x")

    async def test_unconfigured_storage(self):
        storage = ObjectStorage("", "tasktracker", "")
        with pytest.raises(ApiError) as exc_info:
            await storage.upload("a.png", b"x")
        assert exc_info.value.status_code == 500

    def test_object_path_is_unique_per_upload(self, object_storage):
        path = object_storage.object_path("doc.pdf")
        prefix, name = path.split("/", 1)
        assert prefix == "tasktracker"
        stamp, filename = name.split("_", 1)
        assert filename == "doc.pdf"
        assert stamp.isdigit()


# ── Upload routes ───────────────────────────────────────────────────


class TestUploadRoutes:

    async def test_photo_requires_admin(self, client, worker_session):
        resp = await client.post(
            "/api/uploads/photo", files={"file": ("me.png", b"png", "image/png")},
        )
        assert resp.status_code == 403

    async def test_photo_type_checked(self, client, admin_session, storage_upstream):
        resp = await client.post(
            "/api/uploads/photo", files={"file": ("cv.pdf", b"%PDF", "application/pdf")},
        )
        assert resp.status_code == 422
        assert storage_upstream.calls == []

    async def test_photo_url_returned(self, client, admin_session, storage_upstream):
        storage_upstream.default = lambda request: httpx.Response(200, json={})

        resp = await client.post(
            "/api/uploads/photo", files={"file": ("me.png", b"png", "image/png")},
        )

        body = resp.json()
        assert body["filename"] == "me.png"
        assert body["url"].startswith(f"{STORAGE_BASE}/storage/v1/object/public/")

    async def test_document_size_limit(self, client, worker_session, storage_upstream):
        resp = await client.post(
            "/api/uploads/document",
            files={"file": ("scan.pdf", b"x" * (1024 * 1024 + 1), "application/pdf")},
        )
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Image size should be less than 1MB"
        assert storage_upstream.calls == []
