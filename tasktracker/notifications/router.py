"""Notification router — admin sidebar badge counts."""

from fastapi import APIRouter, Depends, Query

from tasktracker.auth.dependencies import require_admin
from tasktracker.auth.schemas import UserProfile
from tasktracker.common.polling import CachedResource
from tasktracker.dependencies import get_cache
from tasktracker.notifications.schemas import NotificationCounts

NOTIFICATIONS_CACHE = "notifications"

router = APIRouter(prefix="", tags=["notifications"])


# ── GET / — badge counts ────────────────────────────────────────────

@router.get("", response_model=NotificationCounts)
async def notification_counts(
    refresh: bool = Query(False),
    _: UserProfile = Depends(require_admin),
    cache: CachedResource = Depends(get_cache(NOTIFICATIONS_CACHE)),
):
    counts: NotificationCounts = await cache.get(force=refresh)
    return counts.model_copy(
        update={"refreshed_at": cache.refreshed_at.isoformat() if cache.refreshed_at else None},
    )
