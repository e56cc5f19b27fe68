"""Salary schemas — bonus and monthly reset requests."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from tasktracker.workforce.schemas import Worker


class BonusRequest(BaseModel):
    amount: float = Field(..., description="Bonus added to the worker's final salary")


class SalaryResetRequest(BaseModel):
    subdomain: Optional[str] = None


class SalaryListResponse(BaseModel):
    data: list[Worker]
    total: int
    search: Optional[str] = None


class SalaryActionResponse(BaseModel):
    message: str
