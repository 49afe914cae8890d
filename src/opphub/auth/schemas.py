"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from pydantic import EmailStr, Field, field_validator

from opphub.schemas import CamelModel

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class RegisterRequest(CamelModel):
    """Register with email + password + display name."""

    email: EmailStr
    password: str
    name: str = Field(..., min_length=2, max_length=50)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class LoginRequest(CamelModel):
    """Login with email + password."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    """Logout. The refresh token is optional."""

    refresh_token: str | None = None


class RevokeRefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class PublicUser(CamelModel):
    """Public account fields. Never includes the password hash."""

    id: str
    email: str
    name: str


class AuthResponse(CamelModel):
    """Returned by register and login."""

    access_token: str
    refresh_token: str
    user: PublicUser


class RefreshResponse(CamelModel):
    """New access token. ``refresh_token`` is only set when rotation is enabled."""

    access_token: str
    refresh_token: str | None = None
    user: PublicUser


class ValidateResponse(CamelModel):
    user: PublicUser


class LogoutResponse(CamelModel):
    message: str
    success: bool = True


class LogoutAllResponse(CamelModel):
    message: str
    revoked_count: int
