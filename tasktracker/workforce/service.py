"""Worker directory and department operations against the remote API."""

from __future__ import annotations

import logging
from typing import Any, Optional

from tasktracker.client.api import ApiClient
from tasktracker.client.uploads import FileUpload, ObjectStorage
from tasktracker.common.exceptions import ValidationException
from tasktracker.common.filters import apply_search, apply_sorting
from tasktracker.workforce.schemas import (
    Department,
    DepartmentCreate,
    ScoreboardEntry,
    Worker,
    WorkerCreate,
    WorkerUpdate,
)

logger = logging.getLogger(__name__)

WORKER_SEARCH_FIELDS = ("name", "department")

# Checked in order; the first failure is reported
_REQUIRED_WORKER_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "Name is required and cannot be empty"),
    ("username", "Username is required and cannot be empty"),
    ("subdomain", "Subdomain is missing, please check the url"),
    ("password", "Password is required and cannot be empty"),
    ("salary", "Salary is required and cannot be empty"),
    ("department", "Department is required"),
)


def _as_list(data: Any) -> list:
    return data if isinstance(data, list) else []


def _blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


# ── Workers ─────────────────────────────────────────────────────────


class WorkerService:
    """Async worker-directory operations."""

    @staticmethod
    def validate_new_worker(body: WorkerCreate) -> None:
        for field, message in _REQUIRED_WORKER_FIELDS:
            if _blank(getattr(body, field)):
                raise ValidationException({field: [message]})

    @staticmethod
    async def generate_id(client: ApiClient) -> Any:
        """Ask the API for an unused worker id (RFID)."""
        if client.store.token is None:
            logger.warning("No auth token available")
            return []
        return await client.get("/workers/generate-id", fallback="Failed to generate worker id") or []

    @staticmethod
    async def create_worker(
        client: ApiClient,
        storage: ObjectStorage,
        body: WorkerCreate,
        photo: Optional[FileUpload] = None,
    ) -> Worker:
        """Validate, upload the photo, then create the worker."""
        if body.subdomain is None:
            body = body.model_copy(update={"subdomain": client.store.subdomain})
        WorkerService.validate_new_worker(body)

        if photo is not None:
            body = body.model_copy(update={"photo": await storage.upload_file(photo)})

        data = await client.post("/workers", json=body.to_api(), fallback="Failed to create worker")
        return Worker.model_validate(data or {})

    @staticmethod
    async def get_workers(client: ApiClient, subdomain: Optional[str] = None) -> list[Worker]:
        """All workers of the tenant (admin view). Empty without a session."""
        if client.store.token is None:
            logger.warning("No auth token available")
            return []
        data = await client.post(
            "/workers/all",
            json={"subdomain": subdomain or client.store.subdomain},
            fallback="Failed to fetch workers",
        )
        return [Worker.model_validate(w) for w in _as_list(data)]

    @staticmethod
    async def get_public_workers(client: ApiClient, subdomain: Optional[str] = None) -> list[Worker]:
        """Workers shown on the worker-login picker; no session required."""
        data = await client.post(
            "/workers/public",
            json={"subdomain": subdomain or client.store.subdomain},
            fallback="Failed to load workers",
        )
        return [Worker.model_validate(w) for w in _as_list(data)]

    @staticmethod
    async def update_worker(
        client: ApiClient,
        storage: ObjectStorage,
        worker_id: str,
        body: WorkerUpdate,
        photo: Optional[FileUpload] = None,
    ) -> Worker:
        if photo is not None:
            body = body.model_copy(update={"photo": await storage.upload_file(photo)})
        data = await client.put(
            f"/workers/{worker_id}",
            json=body.to_api(),
            fallback="Failed to update worker",
        )
        return Worker.model_validate(data or {})

    @staticmethod
    async def delete_worker(client: ApiClient, worker_id: str) -> Any:
        return await client.delete(f"/workers/{worker_id}", fallback="Failed to delete worker")

    # ── In-memory views ─────────────────────────────────────────────

    @staticmethod
    def search(workers: list[Worker], term: Optional[str]) -> list[Worker]:
        """Workers whose name or department contains *term* (case-insensitive)."""
        return apply_search(workers, term, WORKER_SEARCH_FIELDS)

    @staticmethod
    def scoreboard(workers: list[Worker], department: str) -> list[ScoreboardEntry]:
        """Workers of *department* ranked by total points, highest first."""
        members = [w for w in workers if w.department_name == department]
        for w in members:
            w.total_points = w.total_points or 0
        ranked = apply_sorting(members, "-total_points")
        return [
            ScoreboardEntry(
                rank=index,
                id=w.id,
                name=w.name,
                photo=w.avatar_url,
                total_points=w.total_points or 0,
            )
            for index, w in enumerate(ranked, start=1)
        ]


# ── Departments ─────────────────────────────────────────────────────


class DepartmentService:
    """Async department operations."""

    @staticmethod
    async def create_department(client: ApiClient, body: DepartmentCreate) -> Department:
        """Names are trimmed, at least 2 characters, and stored lowercase."""
        name = (body.name or "").strip()
        if len(name) < 2:
            raise ValidationException(
                {"name": ["Department name must be at least 2 characters long"]},
            )
        data = await client.post(
            "/departments",
            json={"name": name.lower()},
            fallback="Failed to create department",
        )
        return Department.model_validate(data or {"name": name.lower()})

    @staticmethod
    async def get_departments(client: ApiClient) -> list[Department]:
        data = await client.get("/departments", fallback="Failed to fetch departments")
        return [Department.model_validate(d) for d in _as_list(data)]

    @staticmethod
    async def delete_department(client: ApiClient, department_id: str) -> Any:
        return await client.delete(
            f"/departments/{department_id}",
            fallback="Failed to delete department",
        )
