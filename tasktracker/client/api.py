"""Task Tracker API client — bearer auth with single-flight token refresh.

Every outgoing request passes through a request hook that attaches the stored
bearer token and tenant subdomain. Responses with 401/403 are recovered once:

* the first failing request refreshes the token via ``/auth/refresh-token``;
* requests failing while that refresh is in flight park on a waiter future
  and are released with the new token (or rejected) when it settles;
* a request whose 401 was produced by an already-replaced token is simply
  re-sent with the current one;
* a retried request to an admin-only route is rejected when the refreshed
  role is not admin;
* if the refresh fails, stored credentials are cleared and ``SessionExpired``
  carries the login page for the last known role.

A retried request that fails again is returned to the caller as-is.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Optional, Sequence

import httpx
from jose import JWTError, jwt

from tasktracker.client.storage import CredentialStore
from tasktracker.common.constants import (
    ADMIN_ONLY_PREFIXES,
    SUBDOMAIN_HEADER,
    UserRole,
)
from tasktracker.common.exceptions import (
    AdminOnlyRoute,
    ApiError,
    NetworkError,
    SessionExpired,
)
from tasktracker.config import settings

logger = logging.getLogger(__name__)

REFRESH_PATH = "/auth/refresh-token"
# Login, registration and refresh failures are final; never recovered
AUTH_PREFIX = "/auth/"
RECOVERABLE_STATUSES = frozenset({401, 403})

SessionExpiredCallback = Callable[[str], None]


# ── Helpers ─────────────────────────────────────────────────────────

def token_expires_within(token: str, seconds: int) -> bool:
    """True when *token* is a JWT whose ``exp`` falls within *seconds* from now.

    Opaque (non-JWT) tokens and tokens without ``exp`` are never considered
    expiring; the server's 401 is the only signal for those.
    """
    if seconds <= 0:
        return False
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return False
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return False
    return time.time() >= exp - seconds


def error_message(response: httpx.Response, fallback: str) -> str:
    """The server's ``message``/``error``/``detail`` text, else *fallback*."""
    try:
        payload = response.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


def _payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


# ── Client ──────────────────────────────────────────────────────────

class ApiClient:
    """Async wrapper over ``httpx.AsyncClient`` for the remote Task Tracker API."""

    def __init__(
        self,
        store: CredentialStore,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        refresh_leeway: Optional[int] = None,
        admin_only_prefixes: Sequence[str] = ADMIN_ONLY_PREFIXES,
        on_session_expired: Optional[SessionExpiredCallback] = None,
    ) -> None:
        self.store = store
        self._refresh_leeway = (
            settings.TOKEN_REFRESH_LEEWAY_SECONDS if refresh_leeway is None else refresh_leeway
        )
        self._admin_only_prefixes = tuple(admin_only_prefixes)
        self._on_session_expired = on_session_expired
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout or settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Accept": "application/json"},
            event_hooks={"request": [self._attach_credentials]},
        )

        # Single-flight refresh state
        self._refreshing = False
        self._waiters: list[asyncio.Future] = []

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    @property
    def parked(self) -> int:
        """Number of requests waiting on the in-flight refresh."""
        return len(self._waiters)

    # ── Request interceptor ───────────────────────────────────────────

    async def _attach_credentials(self, request: httpx.Request) -> None:
        token = self.store.token
        if token and "Authorization" not in request.headers:
            request.headers["Authorization"] = f"Bearer {token}"
        if SUBDOMAIN_HEADER not in request.headers:
            request.headers[SUBDOMAIN_HEADER] = self.store.subdomain

    # ── Public API ────────────────────────────────────────────────────

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request; a 401/403 is recovered at most once."""
        token = self.store.token
        is_auth_call = httpx.URL(url).path.startswith(AUTH_PREFIX)
        if token and not is_auth_call and token_expires_within(token, self._refresh_leeway):
            logger.info("Stored token is about to expire; refreshing before %s %s", method, url)
            await self._refresh_token()

        response = await self._send(method, url, headers=headers, **kwargs)
        if (
            response.status_code not in RECOVERABLE_STATUSES
            or is_auth_call
            or "Authorization" not in response.request.headers
        ):
            return response
        return await self._recover(method, url, response, headers=headers, **kwargs)

    async def call(
        self,
        method: str,
        url: str,
        *,
        fallback: str,
        **kwargs: Any,
    ) -> Any:
        """Send a request and return its JSON body.

        Raises ``ApiError`` with the server's message (or *fallback*) for any
        error status, ``NetworkError`` when the API is unreachable.
        """
        response = await self.request(method, url, **kwargs)
        if response.is_error:
            message = error_message(response, fallback)
            logger.warning("%s %s → %s: %s", method, url, response.status_code, message)
            raise ApiError(response.status_code, message, _payload(response))
        if not response.content:
            return None
        return _payload(response)

    async def get(self, url: str, *, fallback: str, **kwargs: Any) -> Any:
        return await self.call("GET", url, fallback=fallback, **kwargs)

    async def post(self, url: str, *, fallback: str, **kwargs: Any) -> Any:
        return await self.call("POST", url, fallback=fallback, **kwargs)

    async def put(self, url: str, *, fallback: str, **kwargs: Any) -> Any:
        return await self.call("PUT", url, fallback=fallback, **kwargs)

    async def delete(self, url: str, *, fallback: str, **kwargs: Any) -> Any:
        return await self.call("DELETE", url, fallback=fallback, **kwargs)

    async def refresh(self) -> str:
        """Explicit refresh; joins an in-flight one if there is one."""
        return await self._refresh_token()

    # ── Transport ─────────────────────────────────────────────────────

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        token: Optional[str] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        merged = dict(headers or {})
        if token:
            merged["Authorization"] = f"Bearer {token}"
        try:
            return await self._http.request(method, url, headers=merged, **kwargs)
        except httpx.RequestError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise NetworkError() from exc

    # ── Response interceptor ──────────────────────────────────────────

    async def _recover(
        self,
        method: str,
        url: str,
        response: httpx.Response,
        **kwargs: Any,
    ) -> httpx.Response:
        sent = response.request.headers.get("Authorization")
        current = self.store.token
        if current and sent != f"Bearer {current}":
            # A refresh finished while this request was in flight
            token = current
        else:
            logger.info("%s %s → %s; refreshing token", method, url, response.status_code)
            token = await self._refresh_token()

        self._guard_admin_only(url)
        return await self._send(method, url, token=token, **kwargs)

    def _guard_admin_only(self, url: str) -> None:
        path = httpx.URL(url).path
        if self.store.role == UserRole.admin.value:
            return
        if any(path.startswith(prefix) for prefix in self._admin_only_prefixes):
            logger.warning("Not retrying %s: refreshed role is not admin", path)
            raise AdminOnlyRoute(path)

    async def _refresh_token(self) -> str:
        """Return a fresh token, sharing one refresh call among all callers."""
        if self._refreshing:
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            return await waiter

        self._refreshing = True
        try:
            token = await self._request_new_token()
        except (httpx.HTTPError, ApiError, NetworkError, ValueError, KeyError) as exc:
            expired = self._expire_session()
            self._settle_waiters(error=expired)
            raise expired from exc
        finally:
            self._refreshing = False

        self._settle_waiters(token=token)
        return token

    async def _request_new_token(self) -> str:
        current = self.store.token
        if not current:
            raise ValueError("No token available")
        user = self.store.user or {}

        response = await self._http.post(
            REFRESH_PATH,
            json={"token": current, "role": user.get("role")},
        )
        if response.is_error:
            raise ApiError(
                response.status_code,
                error_message(response, "Token refresh failed"),
                _payload(response),
            )

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Refresh response is not an object")
        profile = dict(data.get("user") or data)
        token = profile.pop("token", None) or data.get("token")
        if not token:
            raise ValueError("Refresh response carried no token")

        self.store.save_session(token, {**user, **profile})
        logger.info("Token refreshed (role=%s)", self.store.role)
        return token

    def _settle_waiters(
        self,
        *,
        token: Optional[str] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if waiter.done():
                continue
            if error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(token)

    def _expire_session(self) -> SessionExpired:
        login_path = self.store.login_path
        self.store.clear()
        logger.warning("Token refresh failed; credentials cleared, redirecting to %s", login_path)
        if self._on_session_expired is not None:
            self._on_session_expired(login_path)
        return SessionExpired(login_path)
