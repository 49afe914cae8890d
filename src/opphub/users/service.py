"""User management business logic."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import func, select, update

from opphub.config import get_settings
from opphub.database import flush_unique
from opphub.db.models import User, default_profile
from opphub.errors import BusinessRuleError
from opphub.gamification.checkin import (
    ALREADY_CHECKED_IN,
    CheckInResult,
    GamificationState,
    handle_daily_check_in,
)
from opphub.gamification.levels import Level
from opphub.utils.avatar import generate_avatar_data

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

PROFILE_SECTIONS = frozenset({"skills", "projects", "achievements", "education", "workExperience"})


def prepare_for_save(user: User, now: datetime | None = None) -> User:
    """
    Derived-field transform applied by every user write path.

    Normalizes email and name, re-derives the avatar from the name and stamps
    ``updated_at``. Returns the same (mutated) object.
    """
    user.email = user.email.strip().lower()
    user.name = user.name.strip()
    user.avatar = generate_avatar_data(user.name)
    user.updated_at = now or datetime.now(timezone.utc)
    return user


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


async def email_taken(db: AsyncSession, email: str, exclude_user_id: str | None = None) -> bool:
    """True if a user other than ``exclude_user_id`` has this email."""
    stmt = select(User.id).where(func.lower(User.email) == email.strip().lower())
    if exclude_user_id is not None:
        stmt = stmt.where(User.id != exclude_user_id)
    return (await db.execute(stmt)).first() is not None


async def update_account(
    db: AsyncSession,
    user: User,
    name: str | None = None,
    email: str | None = None,
) -> User:
    """
    Update name and/or email.

    Raises:
        BusinessRuleError: EMAIL_IN_USE if another user already has the email.
    """
    email_in_use = BusinessRuleError("Email already in use", "EMAIL_IN_USE")
    if email is not None and email.strip().lower() != user.email:
        if await email_taken(db, email, exclude_user_id=user.id):
            raise email_in_use
        user.email = email

    if name is not None:
        user.name = name

    prepare_for_save(user)
    await flush_unique(db, email_in_use)
    return user


# ---------------------------------------------------------------------------
# Profile document
# ---------------------------------------------------------------------------


def _profile_of(user: User) -> dict[str, Any]:
    return {**default_profile(), **(user.profile or {})}


async def update_basic_info(db: AsyncSession, user: User, fields: dict[str, str | None]) -> User:
    """Replace bio/location/website/github/linkedin on the profile document."""
    user.profile = {**_profile_of(user), **fields}
    prepare_for_save(user)
    await db.flush()
    return user


async def replace_profile_section(
    db: AsyncSession,
    user: User,
    section: str,
    items: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Replace one list section (skills, projects, ...) and return it."""
    if section not in PROFILE_SECTIONS:
        msg = f"Unknown profile section: {section}"
        raise ValueError(msg)
    user.profile = {**_profile_of(user), section: items}
    prepare_for_save(user)
    await db.flush()
    return user.profile[section]


# ---------------------------------------------------------------------------
# Daily check-in
# ---------------------------------------------------------------------------


def gamification_state(user: User) -> GamificationState:
    return GamificationState(
        xp=user.xp,
        level=Level(user.level),
        stars=user.stars,
        streak_current=user.streak_current,
        streak_longest=user.streak_longest,
        last_check_in=user.streak_last_check_in,
    )


async def check_in_user(db: AsyncSession, user: User, now: datetime | None = None) -> CheckInResult:
    """
    Record today's check-in for ``user``.

    The write is conditional on ``streak_last_check_in`` still holding the value
    the transition was computed from, so concurrent check-ins award XP once.

    Raises:
        BusinessRuleError: ALREADY_CHECKED_IN for a repeat on the same UTC day.
    """
    now = now or datetime.now(timezone.utc)
    previous = gamification_state(user)
    result = handle_daily_check_in(previous, now, get_settings().check_in_xp)
    if not result.success:
        raise BusinessRuleError(result.message, "ALREADY_CHECKED_IN")

    state = result.state
    stmt = update(User).where(User.id == user.id)
    if previous.last_check_in is None:
        stmt = stmt.where(User.streak_last_check_in.is_(None))
    else:
        stmt = stmt.where(User.streak_last_check_in == previous.last_check_in)
    stmt = stmt.values(
        xp=state.xp,
        level=state.level.value,
        stars=state.stars,
        streak_current=state.streak_current,
        streak_longest=state.streak_longest,
        streak_last_check_in=state.last_check_in,
        updated_at=now,
    ).execution_options(synchronize_session=False)

    updated = await db.execute(stmt)
    if updated.rowcount == 0:
        raise BusinessRuleError(ALREADY_CHECKED_IN, "ALREADY_CHECKED_IN")
    await db.flush()
    await db.refresh(user)

    logger.info(
        "daily_check_in",
        user_id=user.id,
        xp=state.xp,
        level=state.level.value,
        streak=state.streak_current,
    )
    return result

