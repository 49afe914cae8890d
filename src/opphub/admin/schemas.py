"""Request/response schemas for admin endpoints."""

from __future__ import annotations

from pydantic import EmailStr, Field, field_validator

from opphub.schemas import CamelModel


class AdminCredentials(CamelModel):
    """Email + password, used by both setup and login."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class AdminTokenResponse(CamelModel):
    token: str


class AdminResponse(CamelModel):
    id: str
    email: str
    active: bool


class AdminUpdateRequest(CamelModel):
    active: bool
