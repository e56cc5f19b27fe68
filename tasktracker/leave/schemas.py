"""Leave schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Response           → screen responses (read)
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Union

from pydantic import BaseModel

from tasktracker.common.constants import LeaveStatus
from tasktracker.common.models import ApiPayload, ApiRecord, WorkerBrief


class Leave(ApiRecord):
    """Leave request as returned by ``/leaves`` endpoints.

    Dates are kept as the server's ISO strings; filters compare their
    ``YYYY-MM-DD`` prefix.
    """

    worker: Optional[Union[WorkerBrief, str]] = None
    leave_type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    total_days: Optional[float] = None
    reason: Optional[str] = None
    status: str = LeaveStatus.pending.value
    document: Optional[str] = None
    worker_viewed: bool = False
    admin_viewed: bool = False
    created_at: Optional[str] = None

    @property
    def worker_name(self) -> str:
        if isinstance(self.worker, WorkerBrief):
            return self.worker.name or ""
        return ""


class LeaveCreate(ApiPayload):
    """Worker leave application, sent once required fields are present."""

    leave_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None
    total_days: Optional[int] = None
    document: Optional[str] = None


class LeaveStatusUpdate(BaseModel):
    status: LeaveStatus


class LeaveListResponse(BaseModel):
    data: list[Leave]
    total: int
    status: str = "all"


class NewRequestsCount(BaseModel):
    count: int = 0
