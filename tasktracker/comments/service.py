"""Comment service — worker comments, admin replies, and the admin comment board."""

from __future__ import annotations

import logging
from typing import Any, Optional

from tasktracker.client.api import ApiClient
from tasktracker.comments.schemas import Comment, CommentCreate, ReplyCreate
from tasktracker.common.constants import CommentStatusFilter
from tasktracker.common.exceptions import AppException, ValidationException
from tasktracker.common.filters import apply_search, distinct_values

logger = logging.getLogger(__name__)

COMMENT_SEARCH_FIELDS = ("worker.name", "text")


def _as_comments(data: Any) -> list[Comment]:
    if not isinstance(data, list):
        return []
    return [Comment.model_validate(item) for item in data]


class CommentService:
    """Async comment operations."""

    # ── Reads ───────────────────────────────────────────────────────

    @staticmethod
    async def get_all_comments(client: ApiClient) -> list[Comment]:
        return _as_comments(await client.get("/comments", fallback="Failed to fetch comments"))

    @staticmethod
    async def get_my_comments(client: ApiClient) -> list[Comment]:
        return _as_comments(await client.get("/comments/me", fallback="Failed to fetch comments"))

    @staticmethod
    async def get_worker_comments(client: ApiClient, worker_id: str) -> list[Comment]:
        data = await client.get(f"/comments/worker/{worker_id}", fallback="Failed to fetch comments")
        return _as_comments(data)

    @staticmethod
    async def get_unread_admin_replies(client: ApiClient) -> list[Any]:
        """Unread admin replies for the worker badge; empty when unavailable."""
        try:
            data = await client.get(
                "/comments/unread-admin-replies",
                fallback="Failed to fetch unread admin replies",
            )
        except AppException as exc:
            logger.error("Failed to fetch unread admin replies: %s", exc.detail)
            return []
        return data if isinstance(data, list) else []

    # ── Writes ──────────────────────────────────────────────────────

    @staticmethod
    async def create_comment(client: ApiClient, body: CommentCreate) -> Comment:
        text = body.text.strip()
        if not text:
            raise ValidationException({"text": ["Please enter a comment"]})
        payload = {"text": text}
        if body.attachment:
            payload["attachment"] = body.attachment
        data = await client.post("/comments", json=payload, fallback="Failed to create comment")
        return Comment.model_validate(data or payload)

    @staticmethod
    async def add_reply(client: ApiClient, comment_id: str, body: ReplyCreate) -> Comment:
        text = body.text.strip()
        if not text:
            raise ValidationException({"text": ["Please enter a reply"]})
        data = await client.post(
            f"/comments/{comment_id}/replies",
            json={"text": text},
            fallback="Failed to add reply",
        )
        return Comment.model_validate(data or {"_id": comment_id})

    @staticmethod
    async def mark_as_read(client: ApiClient, comment_id: str) -> Any:
        return await client.put(
            f"/comments/{comment_id}/read",
            json={},
            fallback="Failed to mark comment as read",
        )

    @staticmethod
    async def mark_admin_replies_read(client: ApiClient) -> bool:
        try:
            await client.put(
                "/comments/mark-admin-replies-read",
                fallback="Failed to mark admin replies as read",
            )
        except AppException as exc:
            logger.error("Failed to mark admin replies as read: %s", exc.detail)
            return False
        return True

    @staticmethod
    async def cleanup(client: ApiClient) -> Any:
        return await client.post("/comments/cleanup", json={}, fallback="Failed to cleanup comments")

    # ── In-memory views ─────────────────────────────────────────────

    @staticmethod
    def filter_comments(
        comments: list[Comment],
        *,
        search: Optional[str] = None,
        department: Optional[str] = None,
        status: Optional[CommentStatusFilter] = None,
    ) -> list[Comment]:
        """Search worker name/text, exact department, and new/read activity."""
        rows = apply_search(comments, search, COMMENT_SEARCH_FIELDS)
        if department:
            rows = [c for c in rows if CommentService.department_of(c) == department]
        if status is CommentStatusFilter.new:
            rows = [c for c in rows if c.has_new_activity]
        elif status is CommentStatusFilter.read:
            rows = [c for c in rows if not c.has_new_activity]
        return rows

    @staticmethod
    def department_of(comment: Comment) -> str:
        worker = comment.worker
        if worker is None or isinstance(worker, str):
            return ""
        return worker.department_name

    @staticmethod
    def departments(comments: list[Comment]) -> list[str]:
        """Distinct department names among commenting workers."""
        return distinct_values(comments, "worker.department")

    @staticmethod
    def count_new(comments: list[Comment]) -> int:
        return sum(1 for c in comments if c.has_new_activity)
