"""Community leaderboard and public profiles."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from opphub.db.models import User
from opphub.errors import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class LeaderboardPage:
    users: list[User]
    current_page: int
    total_pages: int
    total_users: int
    has_more: bool


async def get_leaderboard(db: AsyncSession, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> LeaderboardPage:
    """Users ranked by stars then XP, both descending."""
    page = max(1, page)
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = (page - 1) * limit

    total = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    result = await db.execute(
        select(User)
        .order_by(User.stars.desc(), User.xp.desc(), User.created_at.asc())
        .offset(offset)
        .limit(limit)
    )
    users = list(result.scalars().all())

    return LeaderboardPage(
        users=users,
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_users=total,
        has_more=offset + len(users) < total,
    )


async def get_public_profile(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user
