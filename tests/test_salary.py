"""Salary screen tests: list, bonuses and the monthly reset."""

from __future__ import annotations

import json

import pytest

from tasktracker.common.exceptions import AdminOnlyRoute, ValidationException
from tasktracker.salary.service import SalaryService

WORKERS = [
    {"_id": "w1", "name": "Jane Doe", "department": "kitchen", "salary": 1000, "finalSalary": 1100},
    {"_id": "w2", "name": "Sam Lee", "department": "delivery", "salary": 900, "finalSalary": 900},
]


class TestBonus:

    async def test_worker_required(self, api, upstream):
        with pytest.raises(ValidationException) as exc_info:
            await SalaryService.give_bonus(api, "", 50)
        assert exc_info.value.detail == "Please select a worker"
        assert upstream.calls == []

    @pytest.mark.parametrize("amount", [0, -10])
    async def test_amount_must_be_positive(self, client, admin_session, upstream, amount):
        resp = await client.put("/api/admin/salary/w1/bonus", json={"amount": amount})

        assert resp.status_code == 422
        assert resp.json()["detail"] == "Bonus amount must be greater than 0"
        assert upstream.calls == []

    async def test_bonus_sent(self, client, admin_session, upstream):
        upstream.add("PUT", "/workers/w1/bonus", json={"message": "Bonus of 50 added"})

        resp = await client.put("/api/admin/salary/w1/bonus", json={"amount": 50})

        assert resp.json() == {"message": "Bonus of 50 added"}
        assert json.loads(upstream.calls[0].content) == {"amount": 50.0}

    async def test_default_message(self, api, admin_session, upstream):
        upstream.add("PUT", "/workers/w1/bonus", json={"_id": "w1"})
        assert await SalaryService.give_bonus(api, "w1", 10) == "Bonus added successfully"


class TestReset:

    async def test_reset_uses_stored_subdomain(self, client, admin_session, upstream):
        upstream.add("PUT", "/workers/reset-salary", json={})

        resp = await client.put("/api/admin/salary/reset", json={})

        assert resp.json() == {"message": "Salary reset successfully"}
        assert json.loads(upstream.calls[0].content) == {"subdomain": "acme"}

    async def test_worker_refresh_blocks_admin_only_retry(self, api, admin_session, upstream):
        """A 401 whose refresh demotes the session to worker is not retried."""
        upstream.add("PUT", "/workers/reset-salary", json={"message": "expired"}, status=401)
        upstream.add("POST", "/auth/refresh-token", json={"token": "t2", "role": "worker"})

        with pytest.raises(AdminOnlyRoute) as exc_info:
            await SalaryService.reset_salary(api)

        assert exc_info.value.status_code == 403
        assert len(upstream.calls_to("PUT", "/workers/reset-salary")) == 1


class TestSalaryList:

    async def test_search(self, client, admin_session, upstream):
        upstream.add("POST", "/workers/all", json=WORKERS)

        body = (await client.get("/api/admin/salary", params={"search": "kitchen"})).json()

        assert body["total"] == 1
        assert body["data"][0]["finalSalary"] == 1100
        assert body["search"] == "kitchen"
