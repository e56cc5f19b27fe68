"""Comment schemas — worker comments and their reply threads."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field

from tasktracker.common.models import ApiRecord, WorkerBrief


class Reply(ApiRecord):
    text: str = ""
    is_admin_reply: bool = False
    is_new: bool = False
    created_at: Optional[str] = None


class Comment(ApiRecord):
    worker: Optional[Union[WorkerBrief, str]] = None
    text: str = ""
    attachment: Optional[str] = None
    is_new: bool = False
    created_at: Optional[str] = None
    replies: list[Reply] = Field(default_factory=list)

    @property
    def has_new_activity(self) -> bool:
        """The comment itself or any of its replies is flagged new."""
        return self.is_new or any(r.is_new for r in self.replies)


class CommentCreate(BaseModel):
    text: str = ""
    attachment: Optional[str] = None


class ReplyCreate(BaseModel):
    text: str = ""


class CommentListResponse(BaseModel):
    data: list[Comment]
    total: int
    departments: list[str] = Field(default_factory=list)
    refreshed_at: Optional[str] = None
