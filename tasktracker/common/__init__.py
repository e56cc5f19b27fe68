"""Common module — shared utilities for the Task Tracker dashboard."""

from tasktracker.common.constants import (
    DATE_FORMAT,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    CommentStatusFilter,
    LeaveStatus,
    LeaveType,
    UserRole,
)
from tasktracker.common.exceptions import (
    AdminOnlyRoute,
    ApiError,
    AppException,
    ForbiddenException,
    NetworkError,
    NotAuthenticated,
    NothingToExport,
    SessionExpired,
    ValidationException,
    register_exception_handlers,
)
from tasktracker.common.filters import apply_filters, apply_search, apply_sorting, distinct_values
from tasktracker.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)
from tasktracker.common.polling import CachedResource, Poller, PollerGroup, invalidate_all

__all__ = [
    # Constants / Enums
    "CommentStatusFilter",
    "LeaveStatus",
    "LeaveType",
    "UserRole",
    "DATE_FORMAT",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AdminOnlyRoute",
    "ApiError",
    "AppException",
    "ForbiddenException",
    "NetworkError",
    "NotAuthenticated",
    "NothingToExport",
    "SessionExpired",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_search",
    "apply_sorting",
    "distinct_values",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
    # Polling
    "CachedResource",
    "Poller",
    "PollerGroup",
    "invalidate_all",
]
