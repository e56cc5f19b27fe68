"""Auth router — admin/worker login, registration, logout, current profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from tasktracker.auth.dependencies import get_current_user
from tasktracker.auth.schemas import (
    AdminRegisterRequest,
    LoginRequest,
    LogoutResponse,
    MeResponse,
    SessionResponse,
    SubdomainUpdate,
    UserProfile,
)
from tasktracker.auth.service import AuthService
from tasktracker.client.api import ApiClient
from tasktracker.client.storage import CredentialStore
from tasktracker.common.constants import UserRole
from tasktracker.common.polling import CachedResource, invalidate_all
from tasktracker.common.rate_limit import LOGIN_RATE_LIMIT, limiter
from tasktracker.dependencies import get_api_client, get_caches, get_store

router = APIRouter(prefix="", tags=["auth"])


# ── POST /{role}/login ──────────────────────────────────────────────

@router.post("/{role}/login", response_model=SessionResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    role: UserRole,
    body: LoginRequest,
    client: ApiClient = Depends(get_api_client),
    caches: dict[str, CachedResource] = Depends(get_caches),
):
    user = await AuthService.login(client, body, role)
    invalidate_all(caches.values())
    return SessionResponse(
        user=user,
        redirect_to=AuthService.home_path(user.role),
        subdomain=client.store.subdomain,
    )


# ── POST /admin/register ────────────────────────────────────────────

@router.post("/admin/register")
@limiter.limit(LOGIN_RATE_LIMIT)
async def register_admin(
    request: Request,
    body: AdminRegisterRequest,
    client: ApiClient = Depends(get_api_client),
):
    await AuthService.register_admin(client, body)
    return {"message": "Registration successful! Please login.", "redirect_to": "/admin/login"}


# ── GET /check-admin ────────────────────────────────────────────────

@router.get("/check-admin")
async def check_admin(client: ApiClient = Depends(get_api_client)):
    return await AuthService.check_admin(client)


# ── POST /refresh — force a token refresh ──────────────────────────

@router.post("/refresh", response_model=UserProfile)
async def refresh(
    _: UserProfile = Depends(get_current_user),
    client: ApiClient = Depends(get_api_client),
):
    await client.refresh()
    return get_current_user(client.store)


# ── POST /logout ────────────────────────────────────────────────────

@router.post("/logout", response_model=LogoutResponse)
async def logout(
    store: CredentialStore = Depends(get_store),
    caches: dict[str, CachedResource] = Depends(get_caches),
):
    redirect_to = AuthService.logout(store)
    invalidate_all(caches.values())
    return LogoutResponse(redirect_to=redirect_to)


# ── GET /me ─────────────────────────────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def me(
    user: UserProfile = Depends(get_current_user),
    store: CredentialStore = Depends(get_store),
):
    return MeResponse(
        user=user,
        subdomain=store.subdomain,
        is_admin=user.role == UserRole.admin.value,
        is_worker=user.role == UserRole.worker.value,
    )


# ── PUT /subdomain — tenant routing key ─────────────────────────────

@router.put("/subdomain")
async def set_subdomain(
    body: SubdomainUpdate,
    store: CredentialStore = Depends(get_store),
    caches: dict[str, CachedResource] = Depends(get_caches),
):
    store.subdomain = body.subdomain
    invalidate_all(caches.values())
    return {"subdomain": store.subdomain}
