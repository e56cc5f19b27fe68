"""Custom exceptions and RFC 7807 Problem Detail error handlers."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

BASE_ERROR_URI = "https://tasktracker.app/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
        extensions: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        self.extensions = extensions or {}
        super().__init__(detail)


class ApiError(AppException):
    """Remote API answered with an error; carries its message or a fallback."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        payload: Any = None,
    ) -> None:
        self.payload = payload
        super().__init__(
            status_code=status_code if 400 <= status_code < 600 else 502,
            error_type="upstream-error",
            title="Request Failed",
            detail=detail,
        )


class NetworkError(AppException):
    """503 — the remote API could not be reached."""

    def __init__(
        self,
        detail: str = "No response from server. Please check your connection.",
    ) -> None:
        super().__init__(
            status_code=503,
            error_type="network-error",
            title="Service Unreachable",
            detail=detail,
        )


class SessionExpired(AppException):
    """401 — token refresh failed; credentials were cleared."""

    def __init__(self, login_path: str) -> None:
        self.login_path = login_path
        super().__init__(
            status_code=401,
            error_type="session-expired",
            title="Session Expired",
            detail="Your session has expired. Please log in again.",
            extensions={"login_url": login_path},
        )


class NotAuthenticated(AppException):
    """401 — no stored credentials."""

    def __init__(self, login_path: str) -> None:
        self.login_path = login_path
        super().__init__(
            status_code=401,
            error_type="not-authenticated",
            title="Not Authenticated",
            detail="Please log in to continue.",
            extensions={"login_url": login_path},
        )


class ForbiddenException(AppException):
    """403 — insufficient permissions."""

    def __init__(
        self,
        detail: str = "Access denied. Please log in with admin credentials.",
    ) -> None:
        super().__init__(
            status_code=403,
            error_type="forbidden",
            title="Forbidden",
            detail=detail,
        )


class AdminOnlyRoute(ForbiddenException):
    """403 — retried request targets an admin-only route but the refreshed role is not admin."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(detail=f"'{path}' requires admin credentials.")


class ValidationException(AppException):
    """422 — client-side validation failures, checked before submission."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        first = next(iter(errors.values()), [])
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail=first[0] if first else "One or more fields failed validation.",
            errors=errors,
        )


class NothingToExport(AppException):
    """422 — an export was requested over an empty selection."""

    def __init__(self, detail: str = "No attendance data to download") -> None:
        super().__init__(
            status_code=422,
            error_type="nothing-to-export",
            title="Nothing To Export",
            detail=detail,
            extensions={"level": "warning"},
        )


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }
    if exc.errors:
        body["errors"] = exc.errors
    body.update(exc.extensions)
    return body


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_problem_detail(exc, request),
        media_type="application/problem+json",
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{BASE_ERROR_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "Request validation failed.",
            "instance": str(request.url.path),
            "errors": field_errors,
        },
        media_type="application/problem+json",
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
