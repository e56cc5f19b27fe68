"""Attendance schemas — punch records, RFID submission, scanner state."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from tasktracker.common.models import ApiRecord


class AttendanceRecord(ApiRecord):
    """One IN/OUT punch. ``presence`` true means IN."""

    rfid: Optional[str] = None
    name: Optional[str] = None
    photo: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    presence: bool = False

    @property
    def day(self) -> Optional[str]:
        """``YYYY-MM-DD`` part of the server date."""
        return self.date.split("T")[0] if self.date else None


class AttendanceSubmit(BaseModel):
    rfid: str = ""
    subdomain: Optional[str] = None


class AttendanceListResponse(BaseModel):
    data: list[AttendanceRecord]
    total: int
    date: Optional[str] = None
    refreshed_at: Optional[str] = None


class ScannerStatus(BaseModel):
    running: bool
    interval: float
    pending_rfid: Optional[str] = None
    scans: int = 0
    last_scan_at: Optional[str] = None


class QRDecodeResult(BaseModel):
    rfid: Optional[str] = None
    found: bool = False
