"""Attendance service — RFID punches and attendance lists."""

from __future__ import annotations

import logging
from typing import Any, Optional

from tasktracker.attendance.schemas import AttendanceRecord
from tasktracker.client.api import ApiClient
from tasktracker.common.exceptions import ValidationException
from tasktracker.common.filters import apply_filters

logger = logging.getLogger(__name__)

# The landing tenant; it has no attendance of its own
MAIN_SUBDOMAIN = "main"


def _as_records(data: Any) -> list[AttendanceRecord]:
    if isinstance(data, dict):
        data = data.get("data") or data.get("attendance")
    if not isinstance(data, list):
        return []
    return [AttendanceRecord.model_validate(item) for item in data]


class AttendanceService:
    """Async attendance operations."""

    @staticmethod
    async def put_attendance(client: ApiClient, rfid: str, subdomain: Optional[str] = None) -> Any:
        """Record an IN/OUT punch for *rfid*."""
        rfid = (rfid or "").strip()
        if not rfid:
            raise ValidationException({"rfid": ["Enter all the fields"]})
        logger.info("RFID submitted: %s", rfid)
        return await client.put(
            "/attendance",
            json={"rfid": rfid, "subdomain": subdomain or client.store.subdomain},
            fallback="Failed to update attendance",
        )

    @staticmethod
    async def get_worker_attendance(
        client: ApiClient,
        rfid: Optional[str],
        subdomain: Optional[str],
    ) -> list[AttendanceRecord]:
        if not rfid or not subdomain or subdomain == MAIN_SUBDOMAIN:
            raise ValidationException({"rfid": ["Invalid RFID or subdomain."]})
        data = await client.get(
            f"/attendance/worker/{rfid}",
            params={"subdomain": subdomain},
            fallback="Failed to fetch attendance data.",
        )
        return _as_records(data)

    @staticmethod
    async def get_subdomain_attendance(
        client: ApiClient,
        subdomain: Optional[str] = None,
    ) -> list[AttendanceRecord]:
        subdomain = subdomain or client.store.subdomain
        data = await client.get(
            f"/attendance/subdomain/{subdomain}",
            fallback="Failed to fetch attendance data.",
        )
        return _as_records(data)

    # ── In-memory views ─────────────────────────────────────────────

    @staticmethod
    def filter_by_date(
        records: list[AttendanceRecord],
        date_prefix: Optional[str] = None,
    ) -> list[AttendanceRecord]:
        """Records whose date starts with *date_prefix*, newest first.

        The API lists punches oldest first, so the selection is reversed.
        """
        rows = apply_filters(records, {"date__prefix": date_prefix or None})
        return list(reversed(rows))
