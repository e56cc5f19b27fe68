"""Salary router — worker salary list, bonuses, monthly reset. Admin only."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from tasktracker.auth.dependencies import require_admin
from tasktracker.auth.schemas import UserProfile
from tasktracker.client.api import ApiClient
from tasktracker.dependencies import get_api_client
from tasktracker.salary.schemas import (
    BonusRequest,
    SalaryActionResponse,
    SalaryListResponse,
    SalaryResetRequest,
)
from tasktracker.salary.service import SalaryService
from tasktracker.workforce.service import WorkerService

router = APIRouter(prefix="", tags=["salary"])


# ── GET / ────────────────────────────────────────────────────────────

@router.get("", response_model=SalaryListResponse)
async def salary_list(
    search: Optional[str] = Query(None, description="Matches name or department"),
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    workers = WorkerService.search(await WorkerService.get_workers(client), search)
    return SalaryListResponse(data=workers, total=len(workers), search=search)


# ── PUT /{worker_id}/bonus ───────────────────────────────────────────

@router.put("/{worker_id}/bonus", response_model=SalaryActionResponse)
async def give_bonus(
    worker_id: str,
    body: BonusRequest,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return SalaryActionResponse(
        message=await SalaryService.give_bonus(client, worker_id, body.amount),
    )


# ── PUT /reset ───────────────────────────────────────────────────────

@router.put("/reset", response_model=SalaryActionResponse)
async def reset_salary(
    body: SalaryResetRequest,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return SalaryActionResponse(
        message=await SalaryService.reset_salary(client, body.subdomain),
    )
