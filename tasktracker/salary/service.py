"""Salary service — bonuses and the monthly salary reset."""

from __future__ import annotations

import logging
from typing import Any, Optional

from tasktracker.client.api import ApiClient
from tasktracker.common.exceptions import ValidationException

logger = logging.getLogger(__name__)


def _message(data: Any, default: str) -> str:
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return default


class SalaryService:
    """Async salary operations (admin only)."""

    @staticmethod
    async def give_bonus(client: ApiClient, worker_id: str, amount: float) -> str:
        if not worker_id:
            raise ValidationException({"id": ["Please select a worker"]})
        if amount is None or amount <= 0:
            raise ValidationException({"amount": ["Bonus amount must be greater than 0"]})
        data = await client.put(
            f"/workers/{worker_id}/bonus",
            json={"amount": amount},
            fallback="Failed to give bonus",
        )
        logger.info("Bonus of %s given to worker %s", amount, worker_id)
        return _message(data, "Bonus added successfully")

    @staticmethod
    async def reset_salary(client: ApiClient, subdomain: Optional[str] = None) -> str:
        """Reset every worker's final salary to the base salary for the tenant."""
        subdomain = subdomain or client.store.subdomain
        data = await client.put(
            "/workers/reset-salary",
            json={"subdomain": subdomain},
            fallback="Failed to reset salary",
        )
        logger.info("Salaries reset for %s", subdomain)
        return _message(data, "Salary reset successfully")
