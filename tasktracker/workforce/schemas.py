"""Worker / department schemas — request / response validation.

Naming conventions:
  - *Create / *Update  → request bodies (write)
  - *Out / *Response   → screen responses (read)
"""

from __future__ import annotations

from typing import Optional, Union
from urllib.parse import quote

from pydantic import BaseModel, Field

from tasktracker.common.models import ApiPayload, ApiRecord, DepartmentBrief


# ═════════════════════════════════════════════════════════════════════
# Records
# ═════════════════════════════════════════════════════════════════════


class Department(ApiRecord):
    name: str = ""


class Worker(ApiRecord):
    """Worker as returned by ``/workers/all`` and ``/workers/public``."""

    name: str = ""
    username: Optional[str] = None
    department: Optional[Union[str, DepartmentBrief]] = None
    rfid: Optional[str] = None
    salary: Optional[float] = None
    final_salary: Optional[float] = None
    photo: Optional[str] = None
    total_points: Optional[float] = None
    subdomain: Optional[str] = None

    @property
    def department_name(self) -> str:
        if isinstance(self.department, DepartmentBrief):
            return self.department.name
        return self.department or ""

    @property
    def avatar_url(self) -> str:
        """Stored photo, else a generated initials avatar."""
        if self.photo:
            return self.photo
        return f"https://ui-avatars.com/api/?name={quote(self.name or 'Unknown')}"


# ═════════════════════════════════════════════════════════════════════
# Requests
# ═════════════════════════════════════════════════════════════════════


class WorkerCreate(ApiPayload):
    """New worker. Required fields are checked before anything is sent."""

    name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    salary: Optional[Union[str, float]] = None
    department: Optional[str] = None
    subdomain: Optional[str] = None
    rfid: Optional[str] = None
    email: Optional[str] = None
    photo: Optional[str] = None


class WorkerUpdate(ApiPayload):
    name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    salary: Optional[Union[str, float]] = None
    department: Optional[str] = None
    rfid: Optional[str] = None
    email: Optional[str] = None
    photo: Optional[str] = None


class DepartmentCreate(BaseModel):
    name: str = ""


# ═════════════════════════════════════════════════════════════════════
# Screen responses
# ═════════════════════════════════════════════════════════════════════


class ScoreboardEntry(BaseModel):
    rank: int
    id: Optional[str] = None
    name: str
    photo: str
    total_points: float = Field(default=0)


class ScoreboardResponse(BaseModel):
    department: str
    data: list[ScoreboardEntry]
