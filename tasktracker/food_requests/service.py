"""Food request service — worker meal requests and the admin on/off switch."""

from __future__ import annotations

import logging
from typing import Any

from tasktracker.client.api import ApiClient
from tasktracker.food_requests.schemas import (
    FoodRequest,
    FoodRequestSettings,
    FoodRequestsScreen,
)

logger = logging.getLogger(__name__)


class FoodRequestService:
    """Async food request operations."""

    @staticmethod
    async def submit(client: ApiClient) -> Any:
        """Request a meal for today as the signed-in worker."""
        return await client.post("/food-requests", fallback="Failed to submit food request")

    @staticmethod
    async def get_today_requests(client: ApiClient) -> list[FoodRequest]:
        data = await client.get("/food-requests", fallback="Failed to fetch food requests")
        if not isinstance(data, list):
            return []
        return [FoodRequest.model_validate(item) for item in data]

    @staticmethod
    async def get_settings(client: ApiClient) -> FoodRequestSettings:
        data = await client.get("/food-requests/settings", fallback="Failed to fetch settings")
        return FoodRequestSettings.model_validate(data or {})

    @staticmethod
    async def toggle(client: ApiClient) -> bool:
        """Flip whether requests are accepted; returns the new state."""
        data = await client.put("/food-requests/toggle", fallback="Failed to toggle food requests")
        enabled = FoodRequestSettings.model_validate(data or {}).enabled
        logger.info("Food requests %s", "enabled" if enabled else "disabled")
        return enabled

    @staticmethod
    async def load_screen(client: ApiClient) -> FoodRequestsScreen:
        """Today's requests and settings, fetched together for the admin screen."""
        requests = await FoodRequestService.get_today_requests(client)
        settings = await FoodRequestService.get_settings(client)
        return FoodRequestsScreen(data=requests, total=len(requests), enabled=settings.enabled)
