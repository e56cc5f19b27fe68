"""Notification badge schemas."""

from typing import Optional

from pydantic import BaseModel, computed_field


class NotificationCounts(BaseModel):
    """Sidebar badge counts of the admin layout."""

    new_leave_requests: int = 0
    new_comments: int = 0
    refreshed_at: Optional[str] = None

    @computed_field
    @property
    def total(self) -> int:
        return self.new_leave_requests + self.new_comments
