"""Schemas for account, profile and check-in endpoints."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import EmailStr, Field, field_validator

from opphub.db.models import User
from opphub.schemas import CamelModel

# ---------------------------------------------------------------------------
# User views
# ---------------------------------------------------------------------------


class Avatar(CamelModel):
    initials: str
    background_color: str


class Streak(CamelModel):
    current: int
    longest: int
    last_check_in: datetime | None = None


class PublicProfileResponse(CamelModel):
    """What other users may see. No email, no credentials."""

    id: str
    name: str
    avatar: Avatar | None = None
    profile: dict[str, Any]
    xp: int
    level: str
    stars: int
    streak: Streak
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> PublicProfileResponse:
        return cls(**_common_fields(user))


class UserResponse(PublicProfileResponse):
    """The account owner's own view."""

    email: str
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(**_common_fields(user), email=user.email, updated_at=user.updated_at)


def _common_fields(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "avatar": Avatar(**user.avatar) if user.avatar else None,
        "profile": user.profile or {},
        "xp": user.xp,
        "level": user.level,
        "stars": user.stars,
        "streak": Streak(
            current=user.streak_current,
            longest=user.streak_longest,
            last_check_in=user.streak_last_check_in,
        ),
        "created_at": user.created_at,
    }


class UpdateAccountRequest(CamelModel):
    name: str | None = Field(None, min_length=2, max_length=50)
    email: EmailStr | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.lower().strip() if v else v


class CheckInResponse(CamelModel):
    message: str
    xp: int
    level: str
    stars: int
    streak: Streak
    # XP at which the next level starts; null at Legend
    next_level_xp: int | None = None


# ---------------------------------------------------------------------------
# Profile sections
# ---------------------------------------------------------------------------


class SkillLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


class BasicInfoRequest(CamelModel):
    bio: str | None = Field(None, max_length=500)
    location: str | None = Field(None, max_length=100)
    website: str | None = Field(None, max_length=2048)
    github: str | None = Field(None, max_length=2048)
    linkedin: str | None = Field(None, max_length=2048)

    @field_validator("bio", "location", "website", "github", "linkedin", mode="before")
    @classmethod
    def strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class Skill(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    level: SkillLevel
    years_of_experience: float = Field(0, ge=0)


class Project(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    technologies: list[str] = []
    url: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    is_ongoing: bool = False


class Achievement(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    achieved_on: date = Field(..., alias="date")
    issuer: str | None = None
    url: str | None = None


class Education(CamelModel):
    institution: str = Field(..., min_length=1, max_length=200)
    degree: str = Field(..., min_length=1, max_length=200)
    field_of_study: str | None = None
    start_date: date
    end_date: date | None = None
    is_ongoing: bool = False
    description: str | None = None


class WorkExperience(CamelModel):
    company: str = Field(..., min_length=1, max_length=200)
    position: str = Field(..., min_length=1, max_length=200)
    start_date: date
    end_date: date | None = None
    is_ongoing: bool = False
    description: str | None = None


class SkillsRequest(CamelModel):
    skills: list[Skill]


class ProjectsRequest(CamelModel):
    projects: list[Project]


class AchievementsRequest(CamelModel):
    achievements: list[Achievement]


class EducationRequest(CamelModel):
    education: list[Education]


class WorkExperienceRequest(CamelModel):
    work_experience: list[WorkExperience]
