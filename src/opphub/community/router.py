"""Community router: leaderboard and public profiles."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from opphub.community.service import DEFAULT_PAGE_SIZE, get_leaderboard, get_public_profile
from opphub.database import get_session
from opphub.db.models import User
from opphub.schemas import CamelModel
from opphub.users.schemas import Avatar, PublicProfileResponse

router = APIRouter(prefix="/api/community", tags=["Community"])

# Profile keys shown on the leaderboard
_LEADERBOARD_PROFILE_KEYS = ("bio", "location", "skills", "github", "linkedin")


class LeaderboardEntry(CamelModel):
    id: str
    name: str
    avatar: Avatar | None = None
    level: str
    stars: int
    xp: int
    profile: dict[str, Any]


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_users: int
    has_more: bool


class LeaderboardResponse(CamelModel):
    users: list[LeaderboardEntry]
    pagination: Pagination


def _entry(user: User) -> LeaderboardEntry:
    profile = user.profile or {}
    return LeaderboardEntry(
        id=user.id,
        name=user.name,
        avatar=Avatar(**user.avatar) if user.avatar else None,
        level=user.level,
        stars=user.stars,
        xp=user.xp,
        profile={key: profile.get(key) for key in _LEADERBOARD_PROFILE_KEYS},
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    db: AsyncSession = Depends(get_session),
) -> LeaderboardResponse:
    result = await get_leaderboard(db, page=page, limit=limit)
    return LeaderboardResponse(
        users=[_entry(u) for u in result.users],
        pagination=Pagination(
            current_page=result.current_page,
            total_pages=result.total_pages,
            total_users=result.total_users,
            has_more=result.has_more,
        ),
    )


@router.get("/profile/{user_id}", response_model=PublicProfileResponse)
async def public_profile(user_id: str, db: AsyncSession = Depends(get_session)) -> PublicProfileResponse:
    return PublicProfileResponse.from_user(await get_public_profile(db, user_id))
