"""
Token issuance and verification.

Access tokens are stateless signed JWTs so per-request authorization needs no
store round trip. Refresh tokens are opaque random strings whose validity lives
in the database, so revoking one is a flag flip rather than a crypto operation.
"""

from __future__ import annotations

import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Literal

import jwt

from opphub.config import get_settings

TokenType = Literal["access", "admin"]

REFRESH_TOKEN_BYTES = 40


class WrongTokenTypeError(jwt.InvalidTokenError):
    """A valid token presented where a different token type is required."""


def _encode(subject: str, token_type: TokenType, ttl: timedelta) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": subject,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + ttl,
        "iss": settings.jwt_issuer,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str) -> str:
    """Create a short-lived user access token (15 minutes by default)."""
    settings = get_settings()
    return _encode(user_id, "access", timedelta(minutes=settings.access_token_expire_minutes))


def create_admin_token(admin_id: str) -> str:
    """Create an admin access token (24 hours by default)."""
    settings = get_settings()
    return _encode(admin_id, "admin", timedelta(hours=settings.admin_token_expire_hours))


def generate_refresh_token() -> str:
    """Return 40 bytes of secure randomness, hex-encoded (80 characters)."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def hash_refresh_token(token: str) -> str:
    """SHA-256 digest used as the stored lookup key for a refresh token."""
    return hashlib.sha256(token.encode()).hexdigest()


def verify_token(token: str, expected_type: TokenType = "access") -> dict[str, Any]:
    """
    Verify signature, expiry and issuer, then check the token type.

    Raises:
        jwt.ExpiredSignatureError: If the ``exp`` claim has passed.
        jwt.InvalidTokenError: If the token is malformed, badly signed, of the
            wrong type (WrongTokenTypeError), or fails another claim check.
    """
    settings = get_settings()
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        issuer=settings.jwt_issuer,
        options={"require": ["exp", "iat", "sub"]},
    )

    if payload.get("type") != expected_type:
        msg = f"Expected token type '{expected_type}', got '{payload.get('type')}'"
        raise WrongTokenTypeError(msg)

    return payload


def get_token_expiration(token: str) -> datetime | None:
    """Read the ``exp`` claim without verifying the signature."""
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    exp = payload.get("exp")
    if not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


def is_token_expired(token: str) -> bool:
    """True if the token has no readable expiry or it is in the past."""
    expiration = get_token_expiration(token)
    if expiration is None:
        return True
    return expiration < datetime.now(timezone.utc)
