"""
Authentication business logic.

Handles registration, login, refresh-token persistence and session revocation.
Errors are raised as ``opphub.errors`` types and rendered by the global handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select, update

from opphub.auth.jwt import create_access_token, generate_refresh_token, hash_refresh_token
from opphub.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password_async,
    validate_password_strength,
    verify_password_async,
)
from opphub.auth.revocation import get_revocation_registry
from opphub.config import get_settings
from opphub.database import flush_unique
from opphub.db.models import RefreshToken, User, default_profile
from opphub.errors import AuthError, BusinessRuleError, ValidationError
from opphub.gamification.levels import DEFAULT_LEVEL, DEFAULT_STARS
from opphub.users.service import prepare_for_save

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower().strip()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------


async def register_user(db: AsyncSession, email: str, password: str, name: str) -> User:
    """
    Create a user with default gamification state.

    Raises:
        ValidationError: If the password is too weak.
        BusinessRuleError: If the email is already registered (USER_EXISTS).
    """
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationError(
            "Password does not meet security requirements",
            "WEAK_PASSWORD",
            errors=[{"field": "password", "message": str(e)}],
        ) from e

    existing = await get_user_by_email(db, email)
    if existing is not None:
        raise BusinessRuleError("User already exists", "USER_EXISTS")

    now = datetime.now(timezone.utc)
    user = User(
        email=email,
        password_hash=await hash_password_async(password),
        name=name,
        profile=default_profile(),
        xp=0,
        level=DEFAULT_LEVEL.value,
        stars=DEFAULT_STARS,
        streak_current=0,
        streak_longest=0,
        streak_last_check_in=None,
        created_at=now,
    )
    prepare_for_save(user, now=now)
    db.add(user)
    await flush_unique(db, BusinessRuleError("User already exists", "USER_EXISTS"))
    logger.info("user_registered", user_id=user.id)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Check email + password.

    Raises:
        BusinessRuleError: INVALID_CREDENTIALS, identical for an unknown email
            and a wrong password.
    """
    user = await get_user_by_email(db, email)
    password_hash = user.password_hash if user is not None else None

    if not await verify_password_async(password, password_hash) or user is None:
        logger.info("login_failed")
        raise BusinessRuleError(INVALID_CREDENTIALS_MESSAGE, "INVALID_CREDENTIALS")

    if check_needs_rehash(user.password_hash):
        user.password_hash = await hash_password_async(password)
        await db.flush()
        logger.info("password_rehashed", user_id=user.id)

    logger.info("user_logged_in", user_id=user.id)
    return user


# ---------------------------------------------------------------------------
# Refresh tokens
# ---------------------------------------------------------------------------


async def store_refresh_token(
    db: AsyncSession,
    user_id: str,
    raw_token: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> RefreshToken:
    """Persist the hash of a freshly issued refresh token."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    token = RefreshToken(
        user_id=user_id,
        token_hash=hash_refresh_token(raw_token),
        created_at=now,
        expires_at=now + timedelta(days=settings.refresh_token_expire_days),
        is_revoked=False,
        ip_address=ip_address,
        user_agent=user_agent[:512] if user_agent else None,
    )
    db.add(token)
    await db.flush()
    return token


async def issue_token_pair(
    db: AsyncSession,
    user: User,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> TokenPair:
    """Mint an access token and a persisted refresh token for ``user``."""
    access_token = create_access_token(user.id)
    refresh_token = generate_refresh_token()
    await store_refresh_token(db, user.id, refresh_token, ip_address, user_agent)
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


async def get_active_refresh_token(db: AsyncSession, raw_token: str) -> RefreshToken | None:
    """Look up a refresh token that has not been revoked (expiry is not checked)."""
    result = await db.execute(
        select(RefreshToken)
        .where(RefreshToken.token_hash == hash_refresh_token(raw_token))
        .where(RefreshToken.is_revoked == False)  # noqa: E712
    )
    return result.scalar_one_or_none()


async def refresh_session(
    db: AsyncSession,
    raw_token: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> tuple[User, str, str | None]:
    """
    Exchange a refresh token for a new access token.

    Returns:
        Tuple of (user, access_token, rotated_refresh_token). The last item is
        None unless refresh-token rotation is enabled.

    Raises:
        AuthError: INVALID_REFRESH_TOKEN, REFRESH_TOKEN_EXPIRED or USER_NOT_FOUND.
    """
    stored = await get_active_refresh_token(db, raw_token)
    if stored is None:
        raise AuthError("Invalid refresh token", "INVALID_REFRESH_TOKEN")

    now = datetime.now(timezone.utc)
    if stored.expires_at <= now:
        raise AuthError("Refresh token expired", "REFRESH_TOKEN_EXPIRED")

    user = await get_user_by_id(db, stored.user_id)
    if user is None:
        raise AuthError("User not found", "USER_NOT_FOUND")

    rotated: str | None = None
    if get_settings().refresh_token_rotation:
        # Single use: only the request that flips is_revoked may mint a successor
        result = await db.execute(
            update(RefreshToken)
            .where(RefreshToken.id == stored.id)
            .where(RefreshToken.is_revoked == False)  # noqa: E712
            .values(is_revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise AuthError("Invalid refresh token", "INVALID_REFRESH_TOKEN")
        rotated = generate_refresh_token()
        await store_refresh_token(db, user.id, rotated, ip_address, user_agent)
        logger.info("refresh_token_rotated", user_id=user.id)

    return user, create_access_token(user.id), rotated


async def revoke_refresh_token(db: AsyncSession, user_id: str, raw_token: str) -> bool:
    """Revoke one refresh token owned by ``user_id``. Returns True if found."""
    result = await db.execute(
        select(RefreshToken)
        .where(RefreshToken.token_hash == hash_refresh_token(raw_token))
        .where(RefreshToken.user_id == user_id)
    )
    token = result.scalar_one_or_none()
    if token is None:
        return False
    if not token.is_revoked:
        token.is_revoked = True
        token.revoked_at = datetime.now(timezone.utc)
        await db.flush()
    logger.info("refresh_token_revoked", user_id=user_id, token_id=token.id)
    return True


async def revoke_all_tokens(db: AsyncSession, user_id: str) -> int:
    """Revoke all refresh tokens for a user. Returns count revoked."""
    stmt = (
        update(RefreshToken)
        .where(RefreshToken.user_id == user_id)
        .where(RefreshToken.is_revoked == False)  # noqa: E712
        .values(is_revoked=True, revoked_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    await db.flush()
    return result.rowcount  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------


async def logout(
    db: AsyncSession,
    user_id: str,
    access_token: str,
    refresh_token: str | None = None,
) -> None:
    """Blacklist the access token and, if given, revoke the refresh token."""
    await get_revocation_registry().blacklist(access_token)
    logger.info("access_token_blacklisted", user_id=user_id)
    if refresh_token:
        await revoke_refresh_token(db, user_id, refresh_token)
