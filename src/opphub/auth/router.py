"""Authentication router: all /api/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from opphub.auth.dependencies import get_current_user, get_request_token
from opphub.auth.schemas import (
    AuthResponse,
    LoginRequest,
    LogoutAllResponse,
    LogoutRequest,
    LogoutResponse,
    PublicUser,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RevokeRefreshRequest,
    ValidateResponse,
)
from opphub.auth.revocation import get_revocation_registry
from opphub.auth.service import (
    authenticate_user,
    issue_token_pair,
    logout,
    refresh_session,
    register_user,
    revoke_all_tokens,
    revoke_refresh_token,
)
from opphub.database import get_session
from opphub.db.models import User
from opphub.schemas import MessageResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def public_user(user: User) -> PublicUser:
    """Build the public id/email/name view of a user."""
    return PublicUser(id=user.id, email=user.email, name=user.name)


def _client_meta(request: Request) -> tuple[str | None, str | None]:
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> AuthResponse:
    """Register with email + password + name."""
    user = await register_user(db, email=body.email, password=body.password, name=body.name)
    tokens = await issue_token_pair(db, user, *_client_meta(request))
    await db.commit()
    return AuthResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user=public_user(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> AuthResponse:
    """Login with email + password. Earlier sessions stay valid."""
    user = await authenticate_user(db, body.email, body.password)
    tokens = await issue_token_pair(db, user, *_client_meta(request))
    await db.commit()
    return AuthResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user=public_user(user),
    )


# ---------------------------------------------------------------------------
# Token management
# ---------------------------------------------------------------------------


@router.post("/refresh", response_model=RefreshResponse, response_model_exclude_none=True)
async def refresh(
    body: RefreshRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> RefreshResponse:
    """Mint a new access token from a refresh token."""
    user, access_token, rotated = await refresh_session(db, body.refresh_token, *_client_meta(request))
    await db.commit()
    return RefreshResponse(access_token=access_token, refresh_token=rotated, user=public_user(user))


@router.post("/revoke-refresh", response_model=MessageResponse)
async def revoke_refresh(
    body: RevokeRefreshRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Revoke one of the caller's refresh tokens (log out one device)."""
    await revoke_refresh_token(db, user.id, body.refresh_token)
    await db.commit()
    return MessageResponse(message="Refresh token revoked successfully")


@router.get("/validate", response_model=ValidateResponse)
async def validate(user: User = Depends(get_current_user)) -> ValidateResponse:
    """Validate the access token and return the user."""
    return ValidateResponse(user=public_user(user))


@router.post("/logout", response_model=LogoutResponse)
async def logout_endpoint(
    request: Request,
    body: LogoutRequest | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> LogoutResponse:
    """Invalidate the presented access token and optionally a refresh token."""
    await logout(
        db,
        user.id,
        access_token=get_request_token(request),
        refresh_token=body.refresh_token if body else None,
    )
    await db.commit()
    return LogoutResponse(message="Logged out successfully", success=True)


@router.post("/logout-all", response_model=LogoutAllResponse)
async def logout_all(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> LogoutAllResponse:
    """Revoke every refresh token of the caller and end the current session."""
    count = await revoke_all_tokens(db, user.id)
    await get_revocation_registry().blacklist(get_request_token(request))
    await db.commit()
    logger.info("all_sessions_revoked", user_id=user.id, revoked_count=count)
    return LogoutAllResponse(message="All sessions revoked", revoked_count=count)
