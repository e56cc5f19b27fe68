"""Leave routers — admin approval screen and worker application screen."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from tasktracker.auth.dependencies import require_admin, require_worker
from tasktracker.auth.schemas import UserProfile
from tasktracker.client.api import ApiClient
from tasktracker.client.uploads import ObjectStorage, read_upload
from tasktracker.common.constants import LeaveStatus
from tasktracker.dependencies import get_api_client, get_object_storage
from tasktracker.leave.schemas import (
    Leave,
    LeaveCreate,
    LeaveListResponse,
    LeaveStatusUpdate,
    NewRequestsCount,
)
from tasktracker.leave.service import STATUS_ALL, LeaveService

admin_router = APIRouter(prefix="", tags=["leave"])
worker_router = APIRouter(prefix="", tags=["leave"])


# ═════════════════════════════════════════════════════════════════════
# Admin
# ═════════════════════════════════════════════════════════════════════


# ── GET / ────────────────────────────────────────────────────────────

@admin_router.get("", response_model=LeaveListResponse)
async def list_leaves(
    status: str = Query(STATUS_ALL, pattern="^(all|Pending|Approved|Rejected)$"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    """Leaves for the admin screen; opening it clears the new-leave badge."""
    await LeaveService.mark_viewed_by_admin(client)
    leaves = await LeaveService.get_leaves_by_status(client, status)
    leaves = LeaveService.filter_leaves(leaves, date_from=date_from, date_to=date_to)
    return LeaveListResponse(data=leaves, total=len(leaves), status=status)


# ── GET /range ───────────────────────────────────────────────────────

@admin_router.get("/range", response_model=list[Leave])
async def leaves_in_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return await LeaveService.get_leaves_by_range(client, start_date, end_date)


# ── GET /new-requests-count ──────────────────────────────────────────

@admin_router.get("/new-requests-count", response_model=NewRequestsCount)
async def new_requests_count(
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return NewRequestsCount(count=await LeaveService.new_requests_count(client))


# ── PUT /{leave_id}/status ───────────────────────────────────────────

@admin_router.put("/{leave_id}/status", response_model=Leave)
async def update_leave_status(
    leave_id: str,
    body: LeaveStatusUpdate,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return await LeaveService.update_status(client, leave_id, body.status)


# ── PUT /{leave_id}/approve ──────────────────────────────────────────

@admin_router.put("/{leave_id}/approve", response_model=Leave)
async def approve_leave(
    leave_id: str,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return await LeaveService.update_status(client, leave_id, LeaveStatus.approved)


# ── PUT /{leave_id}/reject ───────────────────────────────────────────

@admin_router.put("/{leave_id}/reject", response_model=Leave)
async def reject_leave(
    leave_id: str,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return await LeaveService.update_status(client, leave_id, LeaveStatus.rejected)


# ═════════════════════════════════════════════════════════════════════
# Worker
# ═════════════════════════════════════════════════════════════════════


# ── GET / ────────────────────────────────────────────────────────────

@worker_router.get("", response_model=list[Leave])
async def my_leaves(
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
):
    """The signed-in worker's leaves, newest first."""
    return await LeaveService.get_my_leaves(client)


# ── POST / ───────────────────────────────────────────────────────────

@worker_router.post("", response_model=Leave, status_code=201)
async def apply_for_leave(
    leave_type: Optional[str] = Form(None),
    start_date: Optional[date] = Form(None),
    end_date: Optional[date] = Form(None),
    reason: Optional[str] = Form(None),
    document: Optional[UploadFile] = File(None),
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
    storage: ObjectStorage = Depends(get_object_storage),
):
    """Apply for leave; ``totalDays`` is computed, the document is optional."""
    body = LeaveCreate(
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
    )
    return await LeaveService.apply_leave(client, storage, body, await read_upload(document))


# ── PUT /{leave_id}/viewed ───────────────────────────────────────────

@worker_router.put("/{leave_id}/viewed")
async def mark_leave_viewed(
    leave_id: str,
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
):
    await LeaveService.mark_viewed(client, leave_id)
    return {"message": "Leave marked as viewed"}
