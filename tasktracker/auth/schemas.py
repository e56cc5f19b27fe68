"""Auth Pydantic schemas for request / response validation."""


from typing import Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from tasktracker.common.models import ApiRecord, DepartmentBrief


# ── Requests ────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminRegisterRequest(BaseModel):
    username: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    confirm_password: str = Field(..., min_length=6)

    @model_validator(mode="after")
    def passwords_match(self) -> "AdminRegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class SubdomainUpdate(BaseModel):
    subdomain: str = Field(..., min_length=1, max_length=63)


# ── Embedded / Shared ──────────────────────────────────────────────

class UserProfile(ApiRecord):
    """Profile persisted next to the token."""

    username: Optional[str] = None
    email: Optional[str] = None
    role: str
    name: Optional[str] = None
    department: Optional[str | DepartmentBrief] = None
    rfid: Optional[str] = None


# ── Responses ───────────────────────────────────────────────────────

class SessionResponse(BaseModel):
    user: UserProfile
    redirect_to: str
    subdomain: str


class LogoutResponse(BaseModel):
    redirect_to: str


class MeResponse(BaseModel):
    user: UserProfile
    subdomain: str
    is_admin: bool
    is_worker: bool
