"""Food request schemas."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel

from tasktracker.common.models import ApiRecord, WorkerBrief


class FoodRequest(ApiRecord):
    worker: Optional[Union[WorkerBrief, str]] = None
    date: Optional[str] = None


class FoodRequestSettings(ApiRecord):
    enabled: bool = True


class FoodRequestsScreen(BaseModel):
    """Today's requests plus the current acceptance switch."""

    data: list[FoodRequest]
    total: int
    enabled: bool
    refreshed_at: Optional[str] = None


class ToggleResponse(BaseModel):
    enabled: bool
    message: str
