"""Leave service — worker applications and the admin approval workflow."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from tasktracker.client.api import ApiClient
from tasktracker.client.uploads import FileUpload, ObjectStorage
from tasktracker.common.constants import LeaveStatus
from tasktracker.common.exceptions import AppException, ValidationException
from tasktracker.common.filters import apply_filters, apply_sorting
from tasktracker.config import settings
from tasktracker.leave.schemas import Leave, LeaveCreate

logger = logging.getLogger(__name__)

STATUS_ALL = "all"


def _as_leaves(data: Any) -> list[Leave]:
    if not isinstance(data, list):
        return []
    return [Leave.model_validate(item) for item in data]


def inclusive_days(start: date, end: date) -> int:
    """Calendar days from *start* to *end*, both included."""
    return abs((end - start).days) + 1


class LeaveService:
    """Async leave operations. Admin endpoints are refused upstream for workers."""

    # ── Worker side ─────────────────────────────────────────────────

    @staticmethod
    async def get_my_leaves(client: ApiClient) -> list[Leave]:
        data = await client.get("/leaves/me", fallback="Failed to fetch leaves")
        return apply_sorting(_as_leaves(data), "-created_at")

    @staticmethod
    async def apply_leave(
        client: ApiClient,
        storage: ObjectStorage,
        body: LeaveCreate,
        document: Optional[FileUpload] = None,
    ) -> Leave:
        """Validate the application, upload the document, submit."""
        if not (body.leave_type and body.start_date and body.end_date and body.reason):
            raise ValidationException({"form": ["Please fill in all required fields"]})
        if body.end_date < body.start_date:
            raise ValidationException({"end_date": ["End date cannot be before start date"]})

        update: dict[str, Any] = {"total_days": inclusive_days(body.start_date, body.end_date)}
        if document is not None:
            limit_mb = settings.MAX_DOCUMENT_SIZE_MB
            if document.size > limit_mb * 1024 * 1024:
                raise ValidationException(
                    {"document": [f"Image size should be less than {limit_mb}MB"]},
                )
            update["document"] = await storage.upload_file(document)
        body = body.model_copy(update=update)

        data = await client.post("/leaves", json=body.to_api(), fallback="Failed to create leave")
        return Leave.model_validate(data or body.to_api())

    @staticmethod
    async def mark_viewed(client: ApiClient, leave_id: str) -> Any:
        return await client.put(f"/leaves/{leave_id}/viewed", fallback="Failed to mark leave as viewed")

    # ── Admin side ──────────────────────────────────────────────────

    @staticmethod
    async def get_all_leaves(client: ApiClient) -> list[Leave]:
        return _as_leaves(await client.get("/leaves", fallback="Failed to fetch leaves"))

    @staticmethod
    async def get_leaves_by_status(client: ApiClient, status: str = STATUS_ALL) -> list[Leave]:
        data = await client.get(
            "/leaves/status",
            params={"status": status},
            fallback="Failed to fetch leaves",
        )
        return _as_leaves(data)

    @staticmethod
    async def get_leaves_by_range(client: ApiClient, start: date, end: date) -> list[Leave]:
        data = await client.get(
            "/leaves/range",
            params={"startDate": start.isoformat(), "endDate": end.isoformat()},
            fallback="Failed to fetch leaves",
        )
        return _as_leaves(data)

    @staticmethod
    async def update_status(client: ApiClient, leave_id: str, status: LeaveStatus) -> Leave:
        data = await client.put(
            f"/leaves/{leave_id}/status",
            json={"status": status.value},
            fallback="Failed to update leave status",
        )
        return Leave.model_validate(data or {"_id": leave_id, "status": status.value})

    @staticmethod
    async def mark_viewed_by_admin(client: ApiClient) -> bool:
        """Clear the admin's new-leave badge. Failure is logged, never raised."""
        try:
            await client.put("/leaves/mark-viewed-by-admin", fallback="Failed to mark leaves as viewed")
        except AppException as exc:
            logger.error("Failed to mark leaves as viewed: %s", exc.detail)
            return False
        return True

    @staticmethod
    async def new_requests_count(client: ApiClient) -> int:
        data = await client.get("/leaves/new-requests-count", fallback="Failed to fetch leave count")
        if isinstance(data, dict):
            return int(data.get("count") or 0)
        if isinstance(data, (int, float)):
            return int(data)
        return 0

    # ── In-memory views ─────────────────────────────────────────────

    @staticmethod
    def filter_leaves(
        leaves: list[Leave],
        *,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Leave]:
        """Status (``all`` = any), leaves starting on/after *date_from*, ending on/before *date_to*."""
        return apply_filters(
            leaves,
            {
                "status": None if status in (None, STATUS_ALL) else status,
                "start_date__from": date_from,
                "end_date__to": date_to,
            },
        )
