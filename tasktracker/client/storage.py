"""Persisted credentials — the dashboard's equivalent of browser local storage.

Three keys are kept, under the same names the browser dashboard used:

* ``token``: bearer token string
* ``user``: JSON-serialized profile (includes ``role``)
* ``tasktracker-subdomain``: tenant routing key sent with requests

With no *path* the store lives only in memory.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from tasktracker.common.constants import (
    SUBDOMAIN_KEY,
    TOKEN_KEY,
    USER_KEY,
    login_path_for,
)

logger = logging.getLogger(__name__)


class CredentialStore:
    """Token, user profile, and subdomain persisted as one JSON document."""

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        *,
        default_subdomain: str = "main",
    ) -> None:
        self._path = Path(path) if path else None
        self._default_subdomain = default_subdomain
        self._data: dict[str, str] = {}
        self._load()

    # ── Persistence ───────────────────────────────────────────────────

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable credentials file %s: %s", self._path, exc)
            return
        if isinstance(data, dict):
            self._data = {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2))

    # ── Raw key access ────────────────────────────────────────────────

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()

    def remove_item(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()

    # ── Token / user ──────────────────────────────────────────────────

    @property
    def token(self) -> Optional[str]:
        return self._data.get(TOKEN_KEY) or None

    @property
    def user(self) -> Optional[dict[str, Any]]:
        """Stored profile; a corrupt value is discarded together with the token."""
        raw = self._data.get(USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except json.JSONDecodeError:
            logger.error("Stored user profile is not valid JSON; clearing credentials")
            self.clear()
            return None
        return user if isinstance(user, dict) else None

    @property
    def role(self) -> Optional[str]:
        user = self.user
        return user.get("role") if user else None

    @property
    def login_path(self) -> str:
        return login_path_for(self.role)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    def save_session(self, token: str, user: dict[str, Any]) -> None:
        """Persist a fresh token and profile in one write."""
        self._data[TOKEN_KEY] = token
        self._data[USER_KEY] = json.dumps(user)
        self._save()

    def update_user(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Merge *changes* into the stored profile and return the result."""
        merged = {**(self.user or {}), **changes}
        self._data[USER_KEY] = json.dumps(merged)
        self._save()
        return merged

    def clear(self) -> None:
        """Forget token and user. The subdomain survives a logout."""
        self._data.pop(TOKEN_KEY, None)
        self._data.pop(USER_KEY, None)
        self._save()

    # ── Subdomain ─────────────────────────────────────────────────────

    @property
    def subdomain(self) -> str:
        return self._data.get(SUBDOMAIN_KEY) or self._default_subdomain

    @subdomain.setter
    def subdomain(self, value: str) -> None:
        self.set_item(SUBDOMAIN_KEY, value.strip().lower())
