"""Food request routers — admin daily list and toggle, worker submission."""

from fastapi import APIRouter, Depends, Query

from tasktracker.auth.dependencies import require_admin, require_worker
from tasktracker.auth.schemas import UserProfile
from tasktracker.client.api import ApiClient
from tasktracker.common.polling import CachedResource
from tasktracker.dependencies import get_api_client, get_cache
from tasktracker.food_requests.schemas import (
    FoodRequestSettings,
    FoodRequestsScreen,
    ToggleResponse,
)
from tasktracker.food_requests.service import FoodRequestService

FOOD_REQUESTS_CACHE = "food_requests"

admin_router = APIRouter(prefix="", tags=["food-requests"])
worker_router = APIRouter(prefix="", tags=["food-requests"])


# ── GET / ────────────────────────────────────────────────────────────

@admin_router.get("", response_model=FoodRequestsScreen)
async def today_requests(
    refresh: bool = Query(False),
    _: UserProfile = Depends(require_admin),
    cache: CachedResource = Depends(get_cache(FOOD_REQUESTS_CACHE)),
):
    """Today's requests; refreshed in the background every 30 seconds."""
    screen: FoodRequestsScreen = await cache.get(force=refresh)
    return screen.model_copy(
        update={"refreshed_at": cache.refreshed_at.isoformat() if cache.refreshed_at else None},
    )


# ── PUT /toggle ──────────────────────────────────────────────────────

@admin_router.put("/toggle", response_model=ToggleResponse)
async def toggle_requests(
    _: UserProfile = Depends(require_admin),
    client: ApiClient = Depends(get_api_client),
    cache: CachedResource = Depends(get_cache(FOOD_REQUESTS_CACHE)),
):
    enabled = await FoodRequestService.toggle(client)
    cache.invalidate()
    return ToggleResponse(
        enabled=enabled,
        message=f"Food requests {'enabled' if enabled else 'disabled'} successfully",
    )


# ── POST / ───────────────────────────────────────────────────────────

@worker_router.post("", status_code=201)
async def submit_request(
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
):
    result = await FoodRequestService.submit(client)
    return result or {"message": "Food request submitted"}


# ── GET /settings ────────────────────────────────────────────────────

@worker_router.get("/settings", response_model=FoodRequestSettings)
async def request_settings(
    _: UserProfile = Depends(require_worker),
    client: ApiClient = Depends(get_api_client),
):
    """Whether requests are currently accepted."""
    return await FoodRequestService.get_settings(client)
