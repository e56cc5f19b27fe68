"""Workforce routers — worker directory, scoreboard and departments.

Directory and department management are admin-only; the public worker
list backs the worker login picker and needs no session.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from tasktracker.auth.dependencies import get_current_user, require_admin
from tasktracker.auth.schemas import UserProfile
from tasktracker.client.api import ApiClient
from tasktracker.client.uploads import ObjectStorage
from tasktracker.common.pagination import PaginatedResponse, PaginationParams, paginate
from tasktracker.dependencies import get_api_client, get_object_storage
from tasktracker.workforce.schemas import (
    Department,
    DepartmentCreate,
    ScoreboardResponse,
    Worker,
    WorkerCreate,
    WorkerUpdate,
)
from tasktracker.workforce.service import DepartmentService, WorkerService

router = APIRouter(prefix="", tags=["workers"])
public_router = APIRouter(prefix="", tags=["workers"])
departments_router = APIRouter(prefix="", tags=["departments"])


# ── GET / ────────────────────────────────────────────────────────────

@router.get("", response_model=PaginatedResponse[Worker])
async def list_workers(
    search: Optional[str] = Query(None, description="Matches name or department"),
    pagination: PaginationParams = Depends(),
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    workers = WorkerService.search(await WorkerService.get_workers(client), search)
    return paginate(workers, pagination)


# ── GET /public ──────────────────────────────────────────────────────

@public_router.get("/public", response_model=list[Worker])
async def public_workers(
    subdomain: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    client: ApiClient = Depends(get_api_client),
):
    """Workers of a tenant for the worker login picker."""
    workers = await WorkerService.get_public_workers(client, subdomain)
    return WorkerService.search(workers, search)


# ── GET /generate-id ─────────────────────────────────────────────────

@router.get("/generate-id")
async def generate_worker_id(
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return await WorkerService.generate_id(client)


# ── GET /scoreboard ──────────────────────────────────────────────────

@public_router.get("/scoreboard", response_model=ScoreboardResponse)
async def scoreboard(
    department: str = Query(..., min_length=1),
    _: UserProfile = Depends(get_current_user),
    client: ApiClient = Depends(get_api_client),
):
    """Department members ranked by total points."""
    workers = await WorkerService.get_workers(client)
    return ScoreboardResponse(
        department=department,
        data=WorkerService.scoreboard(workers, department),
    )


# ── POST / ───────────────────────────────────────────────────────────

@router.post("", response_model=Worker, status_code=201)
async def create_worker(
    body: WorkerCreate,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
    storage: ObjectStorage = Depends(get_object_storage),
):
    """Create a worker. ``photo`` is a URL returned by ``/uploads/photo``."""
    return await WorkerService.create_worker(client, storage, body)


# ── PUT /{worker_id} ─────────────────────────────────────────────────

@router.put("/{worker_id}", response_model=Worker)
async def update_worker(
    worker_id: str,
    body: WorkerUpdate,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
    storage: ObjectStorage = Depends(get_object_storage),
):
    return await WorkerService.update_worker(client, storage, worker_id, body)


# ── DELETE /{worker_id} ──────────────────────────────────────────────

@router.delete("/{worker_id}")
async def delete_worker(
    worker_id: str,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    await WorkerService.delete_worker(client, worker_id)
    return {"message": "Worker deleted successfully"}


# ═════════════════════════════════════════════════════════════════════
# Departments
# ═════════════════════════════════════════════════════════════════════


# ── GET / ────────────────────────────────────────────────────────────

@departments_router.get("", response_model=list[Department])
async def list_departments(
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return await DepartmentService.get_departments(client)


# ── POST / ───────────────────────────────────────────────────────────

@departments_router.post("", response_model=Department, status_code=201)
async def create_department(
    body: DepartmentCreate,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return await DepartmentService.create_department(client, body)


# ── DELETE /{department_id} ──────────────────────────────────────────

@departments_router.delete("/{department_id}")
async def delete_department(
    department_id: str,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    await DepartmentService.delete_department(client, department_id)
    return {"message": "Department deleted successfully"}
