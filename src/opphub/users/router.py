"""User account routes (/api/users) and profile document routes (/api/profile)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from opphub.auth.dependencies import get_current_user
from opphub.database import get_session
from opphub.gamification.levels import next_threshold
from opphub.db.models import User
from opphub.users.schemas import (
    AchievementsRequest,
    BasicInfoRequest,
    CheckInResponse,
    EducationRequest,
    ProjectsRequest,
    SkillsRequest,
    Streak,
    UpdateAccountRequest,
    UserResponse,
    WorkExperienceRequest,
)
from opphub.users.service import check_in_user, replace_profile_section, update_account, update_basic_info

router = APIRouter(prefix="/api/users", tags=["Users"])
profile_router = APIRouter(prefix="/api/profile", tags=["Profile"])


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_user(user)


@router.put("/profile", response_model=UserResponse)
async def update_me(
    body: UpdateAccountRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Update name and/or email."""
    await update_account(db, user, name=body.name, email=body.email)
    await db.commit()
    return UserResponse.from_user(user)


@router.post("/check-in", response_model=CheckInResponse)
async def daily_check_in(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CheckInResponse:
    """Record today's check-in: +XP, streak update, level re-derived."""
    result = await check_in_user(db, user)
    await db.commit()
    state = result.state
    return CheckInResponse(
        message=result.message,
        xp=state.xp,
        level=state.level.value,
        stars=state.stars,
        streak=Streak(
            current=state.streak_current,
            longest=state.streak_longest,
            last_check_in=state.last_check_in,
        ),
        next_level_xp=next_threshold(state.xp),
    )


# ---------------------------------------------------------------------------
# Profile document
# ---------------------------------------------------------------------------


def _dump_items(items: list[BaseModel]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]


@profile_router.get("", response_model=UserResponse)
async def get_profile(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_user(user)


@profile_router.put("/basic", response_model=UserResponse)
async def update_basic(
    body: BasicInfoRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Replace bio, location, website, github and linkedin."""
    await update_basic_info(db, user, body.model_dump())
    await db.commit()
    return UserResponse.from_user(user)


@profile_router.put("/skills")
async def update_skills(
    body: SkillsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[dict[str, Any]]:
    skills = await replace_profile_section(db, user, "skills", _dump_items(body.skills))
    await db.commit()
    return skills


@profile_router.put("/projects")
async def update_projects(
    body: ProjectsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[dict[str, Any]]:
    projects = await replace_profile_section(db, user, "projects", _dump_items(body.projects))
    await db.commit()
    return projects


@profile_router.put("/achievements")
async def update_achievements(
    body: AchievementsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[dict[str, Any]]:
    achievements = await replace_profile_section(db, user, "achievements", _dump_items(body.achievements))
    await db.commit()
    return achievements


@profile_router.put("/education")
async def update_education(
    body: EducationRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[dict[str, Any]]:
    education = await replace_profile_section(db, user, "education", _dump_items(body.education))
    await db.commit()
    return education


@profile_router.put("/work-experience")
async def update_work_experience(
    body: WorkExperienceRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[dict[str, Any]]:
    work_experience = await replace_profile_section(db, user, "workExperience", _dump_items(body.work_experience))
    await db.commit()
    return work_experience
