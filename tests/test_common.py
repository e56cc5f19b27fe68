"""Tests for common utilities — filters, pagination, and problem documents."""

from __future__ import annotations

from datetime import date

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tasktracker.common.exceptions import (
    ApiError,
    NothingToExport,
    SessionExpired,
    ValidationException,
    register_exception_handlers,
)
from tasktracker.common.filters import (
    apply_filters,
    apply_search,
    apply_sorting,
    distinct_values,
)
from tasktracker.common.pagination import PaginationParams, paginate
from tasktracker.leave.schemas import Leave
from tasktracker.workforce.schemas import Worker


def _params(page: int = 1, page_size: int = 50, sort=None) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size, sort=sort)


# ═════════════════════════════════════════════════════════════════════
# FILTER TESTS
# ═════════════════════════════════════════════════════════════════════


class TestApplyFilters:

    ROWS = [
        {"status": "Pending", "startDate": "2024-03-01T00:00:00.000Z", "name": "Alpha"},
        {"status": "Approved", "startDate": "2024-03-10T00:00:00.000Z", "name": "Beta"},
        {"status": "Pending", "startDate": "2024-04-02", "name": "gamma"},
    ]

    def test_equality(self):
        assert [r["name"] for r in apply_filters(self.ROWS, {"status": "Pending"})] == ["Alpha", "gamma"]

    def test_none_values_skipped(self):
        assert len(apply_filters(self.ROWS, {"status": None})) == 3

    def test_date_from_compares_dates(self):
        rows = apply_filters(self.ROWS, {"startDate__from": date(2024, 3, 10)})
        assert [r["name"] for r in rows] == ["Beta", "gamma"]

    def test_date_to(self):
        rows = apply_filters(self.ROWS, {"startDate__to": date(2024, 3, 10)})
        assert [r["name"] for r in rows] == ["Alpha", "Beta"]

    def test_ilike(self):
        assert len(apply_filters(self.ROWS, {"name__ilike": "GAM"})) == 1

    def test_in(self):
        assert len(apply_filters(self.ROWS, {"status__in": ["Approved"]})) == 1

    def test_prefix(self):
        assert len(apply_filters(self.ROWS, {"startDate__prefix": "2024-03"})) == 2

    def test_models_and_dotted_paths(self):
        leaves = [
            Leave.model_validate({"_id": "1", "worker": {"name": "Ann", "department": {"name": "ops"}}}),
            Leave.model_validate({"_id": "2", "worker": {"name": "Bob", "department": "kitchen"}}),
        ]
        assert [l.id for l in apply_filters(leaves, {"worker.department__ilike": "kit"})] == ["2"]


class TestApplySearch:

    def test_matches_any_field_case_insensitive(self):
        workers = [
            Worker(name="Alice", department="Kitchen"),
            Worker(name="Bob", department="Delivery"),
            Worker(name="Carol", department={"name": "kitchen"}),
        ]
        assert [w.name for w in apply_search(workers, "KITCH", ("name", "department"))] == ["Alice", "Carol"]

    def test_blank_search_keeps_all(self):
        assert len(apply_search([{"name": "a"}, {"name": "b"}], "  ", ("name",))) == 2

    def test_distinct_values(self):
        rows = [{"d": {"name": "b"}}, {"d": "a"}, {"d": None}, {"d": "b"}]
        assert distinct_values(rows, "d") == ["a", "b"]


class TestApplySorting:

    def test_desc_with_missing_last(self):
        rows = [{"p": 1}, {"p": None}, {"p": 3}]
        assert [r["p"] for r in apply_sorting(rows, "-p")] == [3, 1, None]

    def test_strings_case_insensitive(self):
        rows = [{"n": "b"}, {"n": "A"}, {"n": "c"}]
        assert [r["n"] for r in apply_sorting(rows, "n")] == ["A", "b", "c"]

    def test_no_sort_keeps_order(self):
        rows = [{"n": 2}, {"n": 1}]
        assert apply_sorting(rows, None) == rows


# ═════════════════════════════════════════════════════════════════════
# PAGINATION TESTS
# ═════════════════════════════════════════════════════════════════════


class TestPaginate:

    def test_slices_and_counts(self):
        page = paginate(list(range(7)), _params(page=2, page_size=3))
        assert list(page.data) == [3, 4, 5]
        assert page.meta.total == 7
        assert page.meta.total_pages == 3
        assert page.meta.has_next and page.meta.has_prev

    def test_empty(self):
        page = paginate([], _params())
        assert page.meta.total == 0
        assert page.meta.total_pages == 0
        assert not page.meta.has_next

    def test_sorts_before_slicing(self):
        rows = [{"n": i} for i in (3, 1, 2)]
        page = paginate(rows, _params(page_size=2, sort="-n"))
        assert [r["n"] for r in page.data] == [3, 2]


# ═════════════════════════════════════════════════════════════════════
# PROBLEM DOCUMENTS
# ═════════════════════════════════════════════════════════════════════


@pytest.fixture
async def problem_client():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/expired")
    async def expired():
        raise SessionExpired("/admin/login")

    @app.get("/invalid")
    async def invalid():
        raise ValidationException({"name": ["Name is required and cannot be empty"]})

    @app.get("/upstream")
    async def upstream():
        raise ApiError(302, "odd status")

    @app.get("/empty")
    async def empty():
        raise NothingToExport()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestProblemDetails:

    async def test_session_expired_carries_login_url(self, problem_client):
        resp = await problem_client.get("/expired")
        assert resp.status_code == 401
        assert resp.headers["content-type"].startswith("application/problem+json")
        body = resp.json()
        assert body["login_url"] == "/admin/login"
        assert body["instance"] == "/expired"

    async def test_validation_detail_is_first_message(self, problem_client):
        body = (await problem_client.get("/invalid")).json()
        assert body["status"] == 422
        assert body["detail"] == "Name is required and cannot be empty"
        assert body["errors"] == {"name": ["Name is required and cannot be empty"]}

    async def test_non_error_upstream_status_maps_to_502(self, problem_client):
        assert (await problem_client.get("/upstream")).status_code == 502

    async def test_nothing_to_export_is_a_warning(self, problem_client):
        body = (await problem_client.get("/empty")).json()
        assert body["detail"] == "No attendance data to download"
        assert body["level"] == "warning"
