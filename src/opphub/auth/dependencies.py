"""FastAPI authentication dependencies.

User and admin gates are kept separate: users are checked against the
revocation registry, admins against their ``active`` flag.
"""

from __future__ import annotations

from datetime import datetime, timezone

import jwt
import structlog
from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from opphub.auth.jwt import TokenType, WrongTokenTypeError, get_token_expiration, verify_token
from opphub.auth.revocation import get_revocation_registry
from opphub.auth.service import get_user_by_id
from opphub.config import get_settings
from opphub.database import get_session
from opphub.db.models import Admin, User
from opphub.errors import AuthError

logger = structlog.get_logger()


def get_request_token(request: Request) -> str:
    """Read the access token from the configured header. Raises NO_TOKEN."""
    token = request.headers.get(get_settings().auth_header_name)
    if not token:
        raise AuthError("No token, authorization denied", "NO_TOKEN")
    return token


def _verify(token: str, expected_type: TokenType) -> dict:
    """Verify and translate PyJWT failures into coded auth errors."""
    try:
        return verify_token(token, expected_type=expected_type)
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Token expired", "TOKEN_EXPIRED") from e
    except (jwt.DecodeError, jwt.InvalidAlgorithmError, WrongTokenTypeError) as e:
        raise AuthError("Token is not valid", "INVALID_TOKEN") from e
    except jwt.InvalidTokenError as e:
        logger.warning("token_verification_failed", error=str(e))
        raise AuthError("Token is not valid", "TOKEN_ERROR") from e


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Authorize the request as a user.

    Order: token present, not blacklisted, not expired (unverified pre-check),
    signature and claims, then user still exists.
    """
    token = get_request_token(request)

    if await get_revocation_registry().is_blacklisted(token):
        raise AuthError("Token has been invalidated", "TOKEN_INVALIDATED")

    expiration = get_token_expiration(token)
    if expiration is not None and expiration <= datetime.now(timezone.utc):
        raise AuthError("Token expired", "TOKEN_EXPIRED")

    payload = _verify(token, "access")

    user = await get_user_by_id(db, payload["sub"])
    if user is None:
        raise AuthError("User not found", "USER_NOT_FOUND")

    request.state.user_id = user.id
    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user


async def get_current_admin(
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> Admin:
    """Authorize the request as an active admin. No blacklist check."""
    token = get_request_token(request)
    payload = _verify(token, "admin")

    result = await db.execute(select(Admin).where(Admin.id == payload["sub"]))
    admin = result.scalar_one_or_none()
    if admin is None or not admin.active:
        raise AuthError("Admin not found or inactive", "ADMIN_NOT_FOUND")

    request.state.admin_id = admin.id
    structlog.contextvars.bind_contextvars(admin_id=admin.id)
    return admin

