"""Task Tracker Dashboard — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tasktracker.attendance.router import ATTENDANCE_CACHE
from tasktracker.attendance.router import admin_router as admin_attendance_router
from tasktracker.attendance.router import worker_router as worker_attendance_router
from tasktracker.attendance.scanner import QRScanner
from tasktracker.attendance.service import AttendanceService
from tasktracker.auth.router import router as auth_router
from tasktracker.client.api import ApiClient
from tasktracker.client.storage import CredentialStore
from tasktracker.client.uploads import ObjectStorage
from tasktracker.comments.router import COMMENTS_CACHE
from tasktracker.comments.router import admin_router as admin_comments_router
from tasktracker.comments.router import worker_router as worker_comments_router
from tasktracker.comments.service import CommentService
from tasktracker.common.constants import UserRole
from tasktracker.common.exceptions import register_exception_handlers
from tasktracker.common.polling import CachedResource, Poller, PollerGroup, invalidate_all
from tasktracker.common.rate_limit import limiter
from tasktracker.config import settings
from tasktracker.food_requests.router import FOOD_REQUESTS_CACHE
from tasktracker.food_requests.router import admin_router as admin_food_router
from tasktracker.food_requests.router import worker_router as worker_food_router
from tasktracker.food_requests.service import FoodRequestService
from tasktracker.leave.router import admin_router as admin_leave_router
from tasktracker.leave.router import worker_router as worker_leave_router
from tasktracker.notifications.router import NOTIFICATIONS_CACHE
from tasktracker.notifications.router import router as notifications_router
from tasktracker.notifications.service import NotificationService
from tasktracker.salary.router import router as salary_router
from tasktracker.uploads.router import router as uploads_router
from tasktracker.workforce.router import departments_router
from tasktracker.workforce.router import public_router as public_workers_router
from tasktracker.workforce.router import router as workers_router

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)


def build_caches(client: ApiClient) -> dict[str, CachedResource]:
    """Screen caches kept fresh by the background pollers."""
    return {
        NOTIFICATIONS_CACHE: CachedResource(
            NOTIFICATIONS_CACHE, lambda: NotificationService.fetch_counts(client),
        ),
        COMMENTS_CACHE: CachedResource(
            COMMENTS_CACHE, lambda: CommentService.get_all_comments(client),
        ),
        FOOD_REQUESTS_CACHE: CachedResource(
            FOOD_REQUESTS_CACHE, lambda: FoodRequestService.load_screen(client),
        ),
        ATTENDANCE_CACHE: CachedResource(
            ATTENDANCE_CACHE, lambda: AttendanceService.get_subdomain_attendance(client),
        ),
    }


def build_pollers(caches: dict[str, CachedResource], store: CredentialStore) -> PollerGroup:
    """One poller per cache; ticks without an admin session are skipped."""
    intervals = {
        NOTIFICATIONS_CACHE: settings.NOTIFICATIONS_POLL_SECONDS,
        COMMENTS_CACHE: settings.COMMENTS_POLL_SECONDS,
        FOOD_REQUESTS_CACHE: settings.FOOD_REQUESTS_POLL_SECONDS,
        ATTENDANCE_CACHE: settings.ATTENDANCE_POLL_SECONDS,
    }
    group = PollerGroup()
    for name, interval in intervals.items():
        cache = caches[name]

        async def _refresh(cache: CachedResource = cache) -> None:
            if store.token is None or store.role != UserRole.admin.value:
                return
            await cache.refresh()

        group.add(Poller(name, _refresh, interval))
    return group


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    # Startup
    if settings.ENABLE_POLLERS:
        app.state.pollers.start_all()
    yield
    # Shutdown
    await app.state.pollers.stop_all()
    await app.state.scanner.stop()
    await app.state.api_client.aclose()


def create_app(
    *,
    store: Optional[CredentialStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    storage_transport: Optional[httpx.AsyncBaseTransport] = None,
    scanner: Optional[QRScanner] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Task Tracker Dashboard",
        description="Admin and worker dashboard over the Task Tracker API",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Remote API session
    if store is None:
        store = CredentialStore(
            settings.CREDENTIALS_PATH, default_subdomain=settings.DEFAULT_SUBDOMAIN,
        )

    def _on_session_expired(login_path: str) -> None:
        invalidate_all(app.state.caches.values())

    client = ApiClient(store, transport=transport, on_session_expired=_on_session_expired)
    app.state.api_client = client
    app.state.object_storage = ObjectStorage(transport=storage_transport)
    app.state.scanner = scanner or QRScanner()
    app.state.caches = build_caches(client)
    app.state.pollers = build_pollers(app.state.caches, store)

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
            "authenticated": store.is_authenticated,
            "role": store.role,
            "subdomain": store.subdomain,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(uploads_router, prefix="/api/uploads", tags=["uploads"])
    app.include_router(public_workers_router, prefix="/api/workers", tags=["workers"])

    # Admin screens
    app.include_router(workers_router, prefix="/api/admin/workers", tags=["workers"])
    app.include_router(departments_router, prefix="/api/admin/departments", tags=["departments"])
    app.include_router(admin_leave_router, prefix="/api/admin/leaves", tags=["leave"])
    app.include_router(admin_comments_router, prefix="/api/admin/comments", tags=["comments"])
    app.include_router(admin_attendance_router, prefix="/api/admin/attendance", tags=["attendance"])
    app.include_router(salary_router, prefix="/api/admin/salary", tags=["salary"])
    app.include_router(admin_food_router, prefix="/api/admin/food-requests", tags=["food-requests"])
    app.include_router(notifications_router, prefix="/api/admin/notifications", tags=["notifications"])

    # Worker screens
    app.include_router(worker_leave_router, prefix="/api/worker/leaves", tags=["leave"])
    app.include_router(worker_comments_router, prefix="/api/worker/comments", tags=["comments"])
    app.include_router(worker_attendance_router, prefix="/api/worker/attendance", tags=["attendance"])
    app.include_router(worker_food_router, prefix="/api/worker/food-requests", tags=["food-requests"])

    return app


app = create_app()
