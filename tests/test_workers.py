"""Worker directory, scoreboard and department tests."""

from __future__ import annotations

import json

import httpx
import pytest

from tasktracker.client.uploads import FileUpload
from tasktracker.common.exceptions import ValidationException
from tasktracker.workforce.schemas import DepartmentCreate, Worker, WorkerCreate
from tasktracker.workforce.service import DepartmentService, WorkerService

WORKERS = [
    {"_id": "w1", "name": "Alice Smith", "department": {"_id": "d1", "name": "kitchen"}, "totalPoints": 40},
    {"_id": "w2", "name": "Bob Stone", "department": "delivery", "totalPoints": 75},
    {"_id": "w3", "name": "Carla Kitchener", "department": "delivery"},
    {"_id": "w4", "name": "Dan Ray", "department": "kitchen", "totalPoints": 90, "photo": "https://img/d.png"},
]


def _valid_worker(**overrides) -> WorkerCreate:
    fields = {
        "name": "Eve",
        "username": "eve",
        "password": "secret",
        "salary": 1200,
        "department": "kitchen",
        "subdomain": "acme",
    }
    fields.update(overrides)
    return WorkerCreate(**fields)


# ── Search ──────────────────────────────────────────────────────────


class TestWorkerSearch:

    def test_name_or_department_match(self):
        workers = [Worker.model_validate(w) for w in WORKERS]
        found = WorkerService.search(workers, "kitch")
        assert [w.id for w in found] == ["w1", "w3", "w4"]

    async def test_admin_list_filters_and_paginates(self, client, admin_session, upstream):
        upstream.add("POST", "/workers/all", json=WORKERS)

        resp = await client.get("/api/admin/workers", params={"search": "DELIVERY"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["meta"]["total"] == 2
        assert [w["id"] for w in body["data"]] == ["w2", "w3"]
        assert json.loads(upstream.calls[0].content) == {"subdomain": "acme"}

    async def test_no_session_yields_empty_list(self, api, upstream):
        assert await WorkerService.get_workers(api) == []
        assert upstream.calls == []

    async def test_public_list_for_login_picker(self, client, upstream):
        upstream.add("POST", "/workers/public", json=WORKERS[:2])

        resp = await client.get("/api/workers/public", params={"subdomain": "acme", "search": "bob"})

        assert [w["name"] for w in resp.json()] == ["Bob Stone"]
        assert json.loads(upstream.calls[0].content) == {"subdomain": "acme"}


# ── Create ──────────────────────────────────────────────────────────


class TestCreateWorker:

    @pytest.mark.parametrize(
        "missing, message",
        [
            ("name", "Name is required and cannot be empty"),
            ("username", "Username is required and cannot be empty"),
            ("password", "Password is required and cannot be empty"),
            ("salary", "Salary is required and cannot be empty"),
            ("department", "Department is required"),
        ],
    )
    def test_required_fields(self, missing, message):
        with pytest.raises(ValidationException) as exc_info:
            WorkerService.validate_new_worker(_valid_worker(**{missing: " "}))
        assert exc_info.value.detail == message

    def test_first_failure_reported(self):
        with pytest.raises(ValidationException) as exc_info:
            WorkerService.validate_new_worker(WorkerCreate())
        assert exc_info.value.detail == "Name is required and cannot be empty"

    async def test_photo_uploaded_before_create(
        self, api, admin_session, upstream, object_storage, storage_upstream,
    ):
        storage_upstream.default = lambda request: httpx.Response(200, json={})
        upstream.add("POST", "/workers", json={"_id": "w9", "name": "Eve"}, status=201)

        worker = await WorkerService.create_worker(
            api, object_storage, _valid_worker(subdomain=None),
            photo=FileUpload(filename="eve.png", content=b"png"),
        )

        assert worker.id == "w9"
        sent = json.loads(upstream.calls_to("POST", "/workers")[0].content)
        assert sent["photo"].startswith("https://storage.test/storage/v1/object/public/")
        assert sent["subdomain"] == "acme"
        assert len(storage_upstream.calls) == 1

    async def test_invalid_worker_never_sent(self, client, admin_session, upstream):
        resp = await client.post("/api/admin/workers", json={"username": "eve"})

        assert resp.status_code == 422
        assert resp.json()["detail"] == "Name is required and cannot be empty"
        assert upstream.calls == []

    async def test_server_message_surfaces(self, client, admin_session, upstream):
        upstream.add("POST", "/workers", json={"message": "Username already exists"}, status=400)

        resp = await client.post("/api/admin/workers", json=_valid_worker().model_dump())

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Username already exists"


class TestGenerateId:

    async def test_without_session(self, api):
        assert await WorkerService.generate_id(api) == []

    async def test_returns_server_value(self, client, admin_session, upstream):
        upstream.add("GET", "/workers/generate-id", json={"rfid": "RF-123"})
        assert (await client.get("/api/admin/workers/generate-id")).json() == {"rfid": "RF-123"}


# ── Scoreboard ──────────────────────────────────────────────────────


class TestScoreboard:

    def test_ranked_by_points_with_missing_as_zero(self):
        workers = [Worker.model_validate(w) for w in WORKERS]
        board = WorkerService.scoreboard(workers, "delivery")

        assert [(e.rank, e.name, e.total_points) for e in board] == [
            (1, "Bob Stone", 75),
            (2, "Carla Kitchener", 0),
        ]
        assert board[1].photo.startswith("https://ui-avatars.com/api/?name=Carla%20Kitchener")

    async def test_route(self, client, worker_session, upstream):
        upstream.add("POST", "/workers/all", json=WORKERS)

        data = (await client.get("/api/workers/scoreboard", params={"department": "kitchen"})).json()

        assert data["department"] == "kitchen"
        assert [e["id"] for e in data["data"]] == ["w4", "w1"]
        assert data["data"][0]["photo"] == "https://img/d.png"


# ── Departments ─────────────────────────────────────────────────────


class TestDepartments:

    async def test_short_name_rejected(self, api, upstream):
        with pytest.raises(ValidationException) as exc_info:
            await DepartmentService.create_department(api, DepartmentCreate(name=" a "))
        assert exc_info.value.detail == "Department name must be at least 2 characters long"
        assert upstream.calls == []

    async def test_name_trimmed_and_lowercased(self, client, admin_session, upstream):
        upstream.add("POST", "/departments", json={"_id": "d9", "name": "front desk"}, status=201)

        resp = await client.post("/api/admin/departments", json={"name": "  Front Desk "})

        assert resp.status_code == 201
        assert json.loads(upstream.calls[0].content) == {"name": "front desk"}

    async def test_non_list_payload_is_empty(self, api, admin_session, upstream):
        upstream.add("GET", "/departments", json={"message": "none"})
        assert await DepartmentService.get_departments(api) == []

    async def test_delete(self, client, admin_session, upstream):
        upstream.add("DELETE", "/departments/d1", json={"message": "gone"})

        resp = await client.delete("/api/admin/departments/d1")

        assert resp.json() == {"message": "Department deleted successfully"}
