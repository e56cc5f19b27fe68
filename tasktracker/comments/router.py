"""Comment routers — admin comment board and worker comment thread.

The admin board reads from the ``comments`` cache, which a background
poller refreshes every 30 seconds.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from tasktracker.auth.dependencies import require_admin, require_worker
from tasktracker.auth.schemas import UserProfile
from tasktracker.client.api import ApiClient
from tasktracker.comments.schemas import (
    Comment,
    CommentCreate,
    CommentListResponse,
    ReplyCreate,
)
from tasktracker.comments.service import CommentService
from tasktracker.common.constants import CommentStatusFilter
from tasktracker.common.polling import CachedResource
from tasktracker.dependencies import get_api_client, get_cache

COMMENTS_CACHE = "comments"

admin_router = APIRouter(prefix="", tags=["comments"])
worker_router = APIRouter(prefix="", tags=["comments"])


# ═════════════════════════════════════════════════════════════════════
# Admin
# ═════════════════════════════════════════════════════════════════════


# ── GET / ────────────────────────────────────────────────────────────

@admin_router.get("", response_model=CommentListResponse)
async def list_comments(
    search: Optional[str] = Query(None, description="Worker name or comment text"),
    department: Optional[str] = Query(None),
    status: Optional[CommentStatusFilter] = Query(None),
    refresh: bool = Query(False),
    _: UserProfile = Depends(require_admin),
    cache: CachedResource = Depends(get_cache(COMMENTS_CACHE)),
):
    comments = await cache.get(force=refresh) or []
    rows = CommentService.filter_comments(
        comments, search=search, department=department, status=status,
    )
    return CommentListResponse(
        data=rows,
        total=len(rows),
        departments=CommentService.departments(comments),
        refreshed_at=cache.refreshed_at.isoformat() if cache.refreshed_at else None,
    )


# ── GET /worker/{worker_id} ──────────────────────────────────────────

@admin_router.get("/worker/{worker_id}", response_model=list[Comment])
async def worker_comments(
    worker_id: str,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
):
    return await CommentService.get_worker_comments(client, worker_id)


# ── POST /{comment_id}/replies ───────────────────────────────────────

@admin_router.post("/{comment_id}/replies", response_model=Comment)
async def admin_reply(
    comment_id: str,
    body: ReplyCreate,
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
    cache: CachedResource = Depends(get_cache(COMMENTS_CACHE)),
):
    comment = await CommentService.add_reply(client, comment_id, body)
    await cache.refresh()
    return comment


# ── POST /cleanup ────────────────────────────────────────────────────

@admin_router.post("/cleanup")
async def cleanup_comments(
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
    cache: CachedResource = Depends(get_cache(COMMENTS_CACHE)),
):
    """Ask the API to purge old comments, then reload the board."""
    result = await CommentService.cleanup(client)
    await cache.refresh()
    return result or {"message": "Comments cleaned up"}


# ═════════════════════════════════════════════════════════════════════
# Worker
# ═════════════════════════════════════════════════════════════════════


# ── GET / ────────────────────────────────────────────────────────────

@worker_router.get("", response_model=list[Comment])
async def my_comments(
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
):
    return await CommentService.get_my_comments(client)


# ── POST / ───────────────────────────────────────────────────────────

@worker_router.post("", response_model=Comment, status_code=201)
async def create_comment(
    body: CommentCreate,
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
):
    return await CommentService.create_comment(client, body)


# ── GET /unread-admin-replies ────────────────────────────────────────

@worker_router.get("/unread-admin-replies")
async def unread_admin_replies(
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
):
    replies = await CommentService.get_unread_admin_replies(client)
    return {"data": replies, "count": len(replies)}


# ── PUT /mark-admin-replies-read ─────────────────────────────────────

@worker_router.put("/mark-admin-replies-read")
async def mark_admin_replies_read(
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
):
    return {"success": await CommentService.mark_admin_replies_read(client)}


# ── POST /{comment_id}/replies ───────────────────────────────────────

@worker_router.post("/{comment_id}/replies", response_model=Comment)
async def worker_reply(
    comment_id: str,
    body: ReplyCreate,
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
):
    return await CommentService.add_reply(client, comment_id, body)


# ── PUT /{comment_id}/read ───────────────────────────────────────────

@worker_router.put("/{comment_id}/read")
async def mark_comment_read(
    comment_id: str,
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
):
    await CommentService.mark_as_read(client, comment_id)
    return {"message": "Comment marked as read"}
