"""Shared test fixtures: fake upstream API, credential store, app and clients.

The remote Task Tracker API is replaced by ``httpx.MockTransport`` routed
through ``FakeUpstream``; the dashboard app is exercised over
``httpx.ASGITransport``.
"""

from __future__ import annotations

import os

# Settings must be fixed before any tasktracker import touches pydantic-settings
os.environ.setdefault("CREDENTIALS_PATH", "")
os.environ.setdefault("ENABLE_POLLERS", "false")
os.environ.setdefault("STORAGE_URL", "https://storage.test")
os.environ.setdefault("STORAGE_API_KEY", "storage-key")
os.environ.setdefault("API_BASE_URL", "https://api.test/api")

import inspect
from typing import Any, AsyncGenerator, Callable, Optional

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from tasktracker.attendance.scanner import QRScanner
from tasktracker.client.api import ApiClient
from tasktracker.client.storage import CredentialStore
from tasktracker.client.uploads import ObjectStorage
from tasktracker.main import create_app

API_BASE = "https://api.test/api"
STORAGE_BASE = "https://storage.test"

ADMIN_PROFILE = {
    "_id": "admin-1",
    "username": "boss",
    "email": "boss@acme.test",
    "role": "admin",
    "name": "Big Boss",
}
WORKER_PROFILE = {
    "_id": "worker-1",
    "username": "jdoe",
    "role": "worker",
    "name": "Jane Doe",
    "department": "kitchen",
    "rfid": "RF-001",
}


# ── Fake upstream API ───────────────────────────────────────────────

Handler = Callable[[httpx.Request], Any]


class FakeUpstream:
    """Route table for ``httpx.MockTransport``; records every request.

    Paths are matched without the ``/api`` base path. Handlers may be plain
    or async callables returning an ``httpx.Response``.
    """

    def __init__(self, base_path: str = "/api") -> None:
        self.base_path = base_path
        self.routes: dict[tuple[str, str], Handler] = {}
        self.calls: list[httpx.Request] = []
        # Used when no route matches
        self.default: Optional[Handler] = None

    def add(
        self,
        method: str,
        path: str,
        handler: Optional[Handler] = None,
        *,
        json: Any = None,
        status: int = 200,
    ) -> None:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json)
        self.routes[(method.upper(), path)] = handler

    def path_of(self, request: httpx.Request) -> str:
        path = request.url.path
        if self.base_path and path.startswith(self.base_path):
            path = path[len(self.base_path):]
        return path

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get((request.method, self.path_of(request))) or self.default
        if handler is None:
            return httpx.Response(404, json={"message": f"No route {request.method} {self.path_of(request)}"})
        result = handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    def calls_to(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.calls
            if r.method == method.upper() and self.path_of(r) == path
        ]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def storage_upstream() -> FakeUpstream:
    return FakeUpstream(base_path="")


# ── Credentials ─────────────────────────────────────────────────────

@pytest.fixture
def store(tmp_path) -> CredentialStore:
    return CredentialStore(tmp_path / "credentials.json", default_subdomain="main")


@pytest.fixture
def admin_session(store) -> CredentialStore:
    store.save_session("admin-token", dict(ADMIN_PROFILE))
    store.subdomain = "acme"
    return store


@pytest.fixture
def worker_session(store) -> CredentialStore:
    store.save_session("worker-token", dict(WORKER_PROFILE))
    store.subdomain = "acme"
    return store


# ── Service-level clients ───────────────────────────────────────────

@pytest.fixture
async def api(store, upstream) -> AsyncGenerator[ApiClient, None]:
    """ApiClient against the fake upstream; no pre-emptive refresh."""
    async with ApiClient(
        store,
        base_url=API_BASE,
        transport=upstream.transport,
        refresh_leeway=0,
    ) as client:
        yield client


@pytest.fixture
def object_storage(storage_upstream) -> ObjectStorage:
    return ObjectStorage(
        STORAGE_BASE,
        "tasktracker",
        "storage-key",
        transport=storage_upstream.transport,
    )


# ── QR scanner without a camera ─────────────────────────────────────

class FakeCamera:
    """Frame source serving queued frames; ``None`` means no data yet."""

    def __init__(self, frames: Optional[list[Any]] = None) -> None:
        self.frames = list(frames or [])
        self.released = False

    def read(self) -> Optional[Any]:
        return self.frames.pop(0) if self.frames else None

    def release(self) -> None:
        self.released = True


@pytest.fixture
def camera() -> FakeCamera:
    return FakeCamera()


@pytest.fixture
def scanner(camera) -> QRScanner:
    """Scanner whose "frames" are the QR payloads themselves."""
    return QRScanner(interval=0.01, source_factory=lambda: camera, decoder=lambda frame: frame)


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from tasktracker.common.rate_limit import limiter
    try:
        limiter.reset()
    except Exception:
        pass
    yield


@pytest.fixture
async def app(store, upstream, storage_upstream, scanner):
    """A fresh dashboard app wired to the fake upstream and storage."""
    application = create_app(
        store=store,
        transport=upstream.transport,
        storage_transport=storage_upstream.transport,
        scanner=scanner,
    )
    yield application
    await application.state.scanner.stop()
    await application.state.api_client.aclose()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
