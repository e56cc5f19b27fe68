"""Auth dependencies — stored-session checks and role enforcement."""

from __future__ import annotations

from typing import Callable

from fastapi import Depends

from tasktracker.auth.schemas import UserProfile
from tasktracker.client.storage import CredentialStore
from tasktracker.common.constants import LOGIN_PATHS, UserRole, login_path_for
from tasktracker.common.exceptions import ForbiddenException, NotAuthenticated
from tasktracker.dependencies import get_store


# ── Core dependency ─────────────────────────────────────────────────

def get_current_user(store: CredentialStore = Depends(get_store)) -> UserProfile:
    """Return the stored profile or send the caller to a login page."""
    user = store.user
    if store.token is None or user is None:
        raise NotAuthenticated(login_path_for(None))
    return UserProfile.model_validate(user)


# ── Role-based dependency ───────────────────────────────────────────

def require_role(role: UserRole) -> Callable:
    """Return a FastAPI dependency that only admits the stored *role*."""

    def _check(store: CredentialStore = Depends(get_store)) -> UserProfile:
        if store.token is None or store.user is None:
            raise NotAuthenticated(LOGIN_PATHS[role])
        user = UserProfile.model_validate(store.user)
        if user.role != role.value:
            if role is UserRole.admin:
                raise ForbiddenException()
            raise ForbiddenException(detail=f"This page is only available to {role.value}s.")
        return user

    return _check


require_admin = require_role(UserRole.admin)
require_worker = require_role(UserRole.worker)
