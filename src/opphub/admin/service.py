"""Admin principal: one-time setup, login and activation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from opphub.auth.jwt import create_admin_token
from opphub.auth.password import (
    PasswordStrengthError,
    hash_password_async,
    validate_password_strength,
    verify_password_async,
)
from opphub.auth.service import INVALID_CREDENTIALS_MESSAGE
from opphub.database import flush_unique
from opphub.db.models import Admin
from opphub.errors import BusinessRuleError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_admin_by_id(db: AsyncSession, admin_id: str) -> Admin | None:
    result = await db.execute(select(Admin).where(Admin.id == admin_id))
    return result.scalar_one_or_none()


async def get_admin_by_email(db: AsyncSession, email: str) -> Admin | None:
    result = await db.execute(select(Admin).where(func.lower(Admin.email) == email.strip().lower()))
    return result.scalar_one_or_none()


async def _create_admin(db: AsyncSession, email: str, password: str, conflict: BusinessRuleError) -> Admin:
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationError(
            "Password does not meet security requirements",
            "WEAK_PASSWORD",
            errors=[{"field": "password", "message": str(e)}],
        ) from e

    admin = Admin(
        email=email.strip().lower(),
        password_hash=await hash_password_async(password),
        active=True,
        created_at=datetime.now(timezone.utc),
    )
    db.add(admin)
    await flush_unique(db, conflict)
    logger.info("admin_created", admin_id=admin.id)
    return admin


async def setup_admin(db: AsyncSession, email: str, password: str) -> Admin:
    """
    Create the first admin account.

    Raises:
        BusinessRuleError: ADMIN_EXISTS once any admin has been created.
        ValidationError: WEAK_PASSWORD.
    """
    count = (await db.execute(select(func.count()).select_from(Admin))).scalar_one()
    admin_exists = BusinessRuleError("Admin account already exists", "ADMIN_EXISTS")
    if count > 0:
        raise admin_exists
    return await _create_admin(db, email, password, admin_exists)


async def create_admin(db: AsyncSession, email: str, password: str) -> Admin:
    """Add another admin (called by an authenticated admin). Raises EMAIL_IN_USE."""
    email_in_use = BusinessRuleError("Email already in use", "EMAIL_IN_USE")
    if await get_admin_by_email(db, email) is not None:
        raise email_in_use
    return await _create_admin(db, email, password, email_in_use)


async def login_admin(db: AsyncSession, email: str, password: str) -> str:
    """
    Check admin credentials and return an admin token.

    Unknown email, wrong password and inactive admin all raise the same
    INVALID_CREDENTIALS error.
    """
    admin = await get_admin_by_email(db, email)
    password_hash = admin.password_hash if admin is not None else None

    if not await verify_password_async(password, password_hash) or admin is None or not admin.active:
        logger.info("admin_login_failed")
        raise BusinessRuleError(INVALID_CREDENTIALS_MESSAGE, "INVALID_CREDENTIALS")

    logger.info("admin_logged_in", admin_id=admin.id)
    return create_admin_token(admin.id)


async def set_admin_active(db: AsyncSession, acting: Admin, admin_id: str, active: bool) -> Admin:
    """
    Activate or deactivate an admin. Deactivation ends all of that admin's sessions.

    Raises:
        NotFoundError: No admin with ``admin_id``.
        BusinessRuleError: CANNOT_DEACTIVATE_SELF.
    """
    if admin_id == acting.id and not active:
        raise BusinessRuleError("Admins cannot deactivate themselves", "CANNOT_DEACTIVATE_SELF")

    admin = await get_admin_by_id(db, admin_id)
    if admin is None:
        raise NotFoundError("Admin not found")

    admin.active = active
    await db.flush()
    logger.info("admin_activation_changed", admin_id=admin.id, active=active, changed_by=acting.id)
    return admin
