"""Attendance routers — admin RFID/QR capture and worker attendance report."""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import Response

from tasktracker.attendance.export import content_disposition, render_csv, report_filename
from tasktracker.attendance.scanner import QRScanner, decode_qr_image
from tasktracker.attendance.schemas import (
    AttendanceListResponse,
    AttendanceRecord,
    AttendanceSubmit,
    QRDecodeResult,
    ScannerStatus,
)
from tasktracker.attendance.service import AttendanceService
from tasktracker.auth.dependencies import require_admin, require_worker
from tasktracker.auth.schemas import UserProfile
from tasktracker.client.api import ApiClient
from tasktracker.client.storage import CredentialStore
from tasktracker.common.exceptions import ValidationException
from tasktracker.common.polling import CachedResource
from tasktracker.dependencies import get_api_client, get_cache, get_scanner, get_store

ATTENDANCE_CACHE = "attendance"

admin_router = APIRouter(prefix="", tags=["attendance"])
worker_router = APIRouter(prefix="", tags=["attendance"])


def _scanner_status(scanner: QRScanner) -> ScannerStatus:
    return ScannerStatus(
        running=scanner.running,
        interval=scanner.interval,
        pending_rfid=scanner.pending_rfid,
        scans=scanner.scans,
        last_scan_at=scanner.last_scan_at.isoformat() if scanner.last_scan_at else None,
    )


# ═════════════════════════════════════════════════════════════════════
# Admin
# ═════════════════════════════════════════════════════════════════════


# ── GET / ────────────────────────────────────────────────────────────

@admin_router.get("", response_model=AttendanceListResponse)
async def subdomain_attendance(
    date: Optional[str] = Query(None, description="YYYY-MM-DD prefix"),
    refresh: bool = Query(False),
    _: UserProfile = Depends(require_admin),
    cache: CachedResource = Depends(get_cache(ATTENDANCE_CACHE)),
):
    """Tenant attendance, refreshed in the background every minute."""
    records = AttendanceService.filter_by_date(await cache.get(force=refresh) or [], date)
    return AttendanceListResponse(
        data=records,
        total=len(records),
        date=date,
        refreshed_at=cache.refreshed_at.isoformat() if cache.refreshed_at else None,
    )


# ── POST / ───────────────────────────────────────────────────────────

@admin_router.post("")
async def submit_attendance(
    body: AttendanceSubmit,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
    scanner: QRScanner = Depends(get_scanner),
    cache: CachedResource = Depends(get_cache(ATTENDANCE_CACHE)),
):
    """Punch an RFID. A blank RFID falls back to the last scanned QR code."""
    rfid = body.rfid.strip() or scanner.take_pending() or ""
    result = await AttendanceService.put_attendance(client, rfid, body.subdomain)
    cache.invalidate()
    return result or {"message": "Attendance recorded", "rfid": rfid}


# ── Scanner ──────────────────────────────────────────────────────────

@admin_router.get("/scanner", response_model=ScannerStatus)
async def scanner_status(
    _: UserProfile = Depends(require_admin),
    scanner: QRScanner = Depends(get_scanner),
):
    return _scanner_status(scanner)


@admin_router.post("/scanner/start", response_model=ScannerStatus)
async def start_scanner(
    _: UserProfile = Depends(require_admin),
    scanner: QRScanner = Depends(get_scanner),
):
    await scanner.start()
    return _scanner_status(scanner)


@admin_router.post("/scanner/stop", response_model=ScannerStatus)
async def stop_scanner(
    _: UserProfile = Depends(require_admin),
    scanner: QRScanner = Depends(get_scanner),
):
    await scanner.stop()
    return _scanner_status(scanner)


# ── POST /scan-image ─────────────────────────────────────────────────

@admin_router.post("/scan-image", response_model=QRDecodeResult)
async def scan_image(
    image: UploadFile = File(...),
    _: UserProfile = Depends(require_admin),
    scanner: QRScanner = Depends(get_scanner),
):
    """Decode a QR code from an uploaded photo into the pending RFID."""
    content = await image.read()
    if not content:
        raise ValidationException({"image": ["Please select a file"]})
    rfid = await asyncio.to_thread(decode_qr_image, content)
    if rfid:
        scanner.pending_rfid = rfid
    return QRDecodeResult(rfid=rfid, found=rfid is not None)


# ═════════════════════════════════════════════════════════════════════
# Worker
# ═════════════════════════════════════════════════════════════════════


async def _my_records(
    client: ApiClient,
    store: CredentialStore,
    user: UserProfile,
    date: Optional[str],
) -> list[AttendanceRecord]:
    records = await AttendanceService.get_worker_attendance(client, user.rfid, store.subdomain)
    return AttendanceService.filter_by_date(records, date)


# ── GET / ────────────────────────────────────────────────────────────

@worker_router.get("", response_model=AttendanceListResponse)
async def my_attendance(
    date: Optional[str] = Query(None, description="YYYY-MM-DD prefix"),
    user: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
    store: CredentialStore = Depends(get_store),
):
    records = await _my_records(client, store, user, date)
    return AttendanceListResponse(data=records, total=len(records), date=date)


# ── GET /export ──────────────────────────────────────────────────────

@worker_router.get("/export")
async def export_attendance(
    date: Optional[str] = Query(None, description="YYYY-MM-DD prefix"),
    user: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
    store: CredentialStore = Depends(get_store),
):
    """Download the filtered records as CSV."""
    records = await _my_records(client, store, user, date)
    content = render_csv(records)
    filename = report_filename(user.name, date)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": content_disposition(filename)},
    )
