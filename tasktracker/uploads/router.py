"""Upload router — stores files in object storage and returns their public URL.

The URL is what worker and leave requests reference as ``photo`` / ``document``.
"""

from fastapi import APIRouter, Depends, File, UploadFile

from tasktracker.auth.dependencies import get_current_user, require_admin
from tasktracker.auth.schemas import UserProfile
from tasktracker.client.uploads import ObjectStorage, read_upload
from tasktracker.common.exceptions import ValidationException
from tasktracker.config import settings
from tasktracker.dependencies import get_object_storage

router = APIRouter(prefix="", tags=["uploads"])

IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
DOCUMENT_TYPES = IMAGE_TYPES | {"application/pdf"}


# ── POST /photo ──────────────────────────────────────────────────────

@router.post("/photo")
async def upload_photo(
    file: UploadFile = File(...),
    _: UserProfile = Depends(require_admin),
    storage: ObjectStorage = Depends(get_object_storage),
):
    """Upload a worker photo."""
    if file.content_type not in IMAGE_TYPES:
        raise ValidationException(
            {"file": [f"File type '{file.content_type}' not allowed. Accepted: JPEG, PNG, GIF, WEBP."]},
        )
    upload = await read_upload(file)
    if upload is None:
        raise ValidationException({"file": ["Please select a file"]})
    return {"url": await storage.upload_file(upload), "filename": upload.filename}


# ── POST /document ───────────────────────────────────────────────────

@router.post("/document")
async def upload_document(
    file: UploadFile = File(...),
    _: UserProfile = Depends(get_current_user),
    storage: ObjectStorage = Depends(get_object_storage),
):
    """Upload a supporting document (size-limited)."""
    if file.content_type not in DOCUMENT_TYPES:
        raise ValidationException(
            {"file": [f"File type '{file.content_type}' not allowed. Accepted: images, PDF."]},
        )
    upload = await read_upload(file)
    if upload is None:
        raise ValidationException({"file": ["Please select a file"]})
    if upload.size > settings.MAX_DOCUMENT_SIZE_MB * 1024 * 1024:
        raise ValidationException(
            {"file": [f"Image size should be less than {settings.MAX_DOCUMENT_SIZE_MB}MB"]},
        )
    return {"url": await storage.upload_file(upload), "filename": upload.filename}
