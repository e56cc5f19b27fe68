"""Enums and constants for the Task Tracker dashboard — matching the remote API values."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    admin = "admin"
    worker = "worker"


LOGIN_PATHS: dict[UserRole, str] = {
    UserRole.admin: "/admin/login",
    UserRole.worker: "/worker/login",
}


def login_path_for(role: str | None) -> str:
    """Login page for the last known role; anything but admin lands on the worker page."""
    if role == UserRole.admin.value:
        return LOGIN_PATHS[UserRole.admin]
    return LOGIN_PATHS[UserRole.worker]


# Remote routes only an admin may call. A request to one of these is never
# retried after a refresh that yields a non-admin role.
ADMIN_ONLY_PREFIXES: tuple[str, ...] = (
    "/leaves/status",
    "/leaves/range",
    "/leaves/mark-viewed-by-admin",
    "/leaves/new-requests-count",
    "/comments/worker",
    "/comments/cleanup",
    "/workers/generate-id",
    "/workers/reset-salary",
    "/departments",
    "/food-requests/toggle",
)


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


class LeaveType(str, enum.Enum):
    annual = "Annual Leave"
    sick = "Sick Leave"
    personal = "Personal Leave"
    maternity = "Maternity Leave"
    paternity = "Paternity Leave"
    unpaid = "Unpaid Leave"
    other = "Other"


# ── Comments ────────────────────────────────────────────────────────

class CommentStatusFilter(str, enum.Enum):
    new = "new"
    read = "read"


# ── Storage keys (same names the browser dashboard persisted) ─────

TOKEN_KEY = "token"
USER_KEY = "user"
SUBDOMAIN_KEY = "tasktracker-subdomain"

# Header carrying the tenant routing key
SUBDOMAIN_HEADER = "X-Subdomain"


# ── Formats ─────────────────────────────────────────────────────────

DATE_FORMAT = "%Y-%m-%d"
DISPLAY_DATE_FORMAT = "%b %d, %Y"
DISPLAY_DATETIME_FORMAT = "%b %d, %Y %I:%M %p"

ATTENDANCE_CSV_HEADERS: tuple[str, ...] = ("Name", "Employee ID", "Date", "Time", "Status")

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
