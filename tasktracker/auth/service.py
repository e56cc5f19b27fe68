"""Auth service — login, admin registration, logout, session lifecycle."""

from __future__ import annotations

import logging
from typing import Any

from tasktracker.auth.schemas import AdminRegisterRequest, LoginRequest, UserProfile
from tasktracker.client.api import ApiClient
from tasktracker.client.storage import CredentialStore
from tasktracker.common.constants import UserRole
from tasktracker.common.exceptions import ApiError

logger = logging.getLogger(__name__)

# Fields of the login response kept in the persisted profile
PROFILE_FIELDS: tuple[str, ...] = ("_id", "username", "email", "role", "name", "department", "rfid")

HOME_PATHS: dict[UserRole, str] = {
    UserRole.admin: "/admin",
    UserRole.worker: "/worker",
}


class AuthService:
    """Session operations against the remote ``/auth`` endpoints."""

    @staticmethod
    async def login(
        client: ApiClient,
        credentials: LoginRequest,
        role: UserRole,
    ) -> UserProfile:
        """Authenticate as *role*, persist token + trimmed profile."""
        data = await client.post(
            f"/auth/{role.value}",
            json=credentials.model_dump(),
            fallback="Login failed. Please check your credentials.",
        )
        if not isinstance(data, dict) or not data.get("token"):
            raise ApiError(502, "Login failed. Please check your credentials.", data)

        profile = {k: data[k] for k in PROFILE_FIELDS if data.get(k) is not None}
        profile.setdefault("role", role.value)
        client.store.save_session(data["token"], profile)
        logger.info("Logged in %s as %s", profile.get("username"), profile["role"])
        return UserProfile.model_validate(profile)

    @staticmethod
    async def register_admin(client: ApiClient, body: AdminRegisterRequest) -> Any:
        return await client.post(
            "/auth/admin/register",
            json=body.model_dump(exclude={"confirm_password"}),
            fallback="Failed to register admin",
        )

    @staticmethod
    async def check_admin(client: ApiClient) -> Any:
        """Ask the API whether an admin account exists (initialises one if not)."""
        return await client.get("/auth/check-admin", fallback="Admin check failed")

    @staticmethod
    def logout(store: CredentialStore) -> str:
        """Clear credentials and return the login page for the role just logged out."""
        login_path = store.login_path
        store.clear()
        return login_path

    @staticmethod
    def home_path(role: str) -> str:
        try:
            return HOME_PATHS[UserRole(role)]
        except ValueError:
            return HOME_PATHS[UserRole.worker]
