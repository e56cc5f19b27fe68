"""Object-storage uploads for worker photos and leave documents.

Files go to a Supabase Storage bucket over its REST API; the public URL of
the stored object is what the Task Tracker API keeps as the photo/document
reference.
"""

from __future__ import annotations

import logging
import mimetypes
import time
from typing import Optional
from urllib.parse import quote

import httpx
from fastapi import UploadFile
from pydantic import BaseModel

from tasktracker.common.exceptions import ApiError, NetworkError, ValidationException
from tasktracker.config import settings

logger = logging.getLogger(__name__)


class FileUpload(BaseModel):
    """A file selected for upload."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


async def read_upload(file: Optional[UploadFile]) -> Optional[FileUpload]:
    """Buffer a multipart upload; an absent or unnamed part yields ``None``."""
    if file is None or not file.filename:
        return None
    return FileUpload(
        filename=file.filename,
        content=await file.read(),
        content_type=file.content_type,
    )


class ObjectStorage:
    """Minimal client for one storage bucket."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        bucket: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.STORAGE_URL).rstrip("/")
        self.bucket = bucket or settings.STORAGE_BUCKET
        self._api_key = api_key if api_key is not None else settings.STORAGE_API_KEY
        self._transport = transport

    def object_path(self, filename: str) -> str:
        """``<bucket>/<epoch-ms>_<filename>``, unique per upload."""
        return f"{self.bucket}/{int(time.time() * 1000)}_{filename}"

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"

    async def upload(
        self,
        filename: Optional[str],
        content: Optional[bytes],
        content_type: Optional[str] = None,
    ) -> str:
        """Store the file and return its public URL."""
        if not filename or not content:
            raise ValidationException({"file": ["Please select a file"]})
        if not self.base_url:
            raise ApiError(500, "Object storage is not configured")

        path = self.object_path(filename)
        content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(path)}"

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=60) as client:
                resp = await client.post(
                    url,
                    content=content,
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "apikey": self._api_key,
                        "Content-Type": content_type,
                    },
                )
        except httpx.RequestError as exc:
            logger.error("Upload of %s failed: %s", filename, exc)
            raise NetworkError() from exc

        if resp.is_error:
            logger.error("Upload failed [%s]: %s", resp.status_code, resp.text)
            raise ApiError(resp.status_code, "Upload failed")

        public_url = self.public_url(path)
        logger.info("Uploaded file URL: %s", public_url)
        return public_url

    async def upload_file(self, file: FileUpload) -> str:
        return await self.upload(file.filename, file.content, file.content_type)
