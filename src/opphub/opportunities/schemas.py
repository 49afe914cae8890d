"""Schemas for the opportunities catalogue."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import AnyHttpUrl, Field, field_validator

from opphub.db.models import Opportunity
from opphub.schemas import CamelModel


class Category(str, Enum):
    SCHOLARSHIP = "scholarship"
    INTERNSHIP = "internship"
    JOB = "job"
    FELLOWSHIP = "fellowship"
    COMPETITION = "competition"


class Status(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class OpportunityCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: Category
    organization: str = Field(..., min_length=1, max_length=200)
    location: str = Field(..., min_length=1, max_length=200)
    deadline: datetime
    requirements: list[str] = []
    benefits: list[str] = []
    application_url: AnyHttpUrl
    is_featured: bool = False
    status: Status = Status.ACTIVE

    @field_validator("title", "description", "organization", "location", mode="before")
    @classmethod
    def strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class OpportunityUpdate(CamelModel):
    """Partial update. Only the fields sent are changed."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1)
    category: Category | None = None
    organization: str | None = Field(None, min_length=1, max_length=200)
    location: str | None = Field(None, min_length=1, max_length=200)
    deadline: datetime | None = None
    requirements: list[str] | None = None
    benefits: list[str] | None = None
    application_url: AnyHttpUrl | None = None
    is_featured: bool | None = None
    status: Status | None = None

    @field_validator("title", "description", "organization", "location", mode="before")
    @classmethod
    def strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class OpportunityResponse(CamelModel):
    id: str
    title: str
    description: str
    category: str
    organization: str
    location: str
    deadline: datetime
    requirements: list[str]
    benefits: list[str]
    application_url: str
    is_featured: bool
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, opportunity: Opportunity) -> OpportunityResponse:
        return cls(
            id=opportunity.id,
            title=opportunity.title,
            description=opportunity.description,
            category=opportunity.category,
            organization=opportunity.organization,
            location=opportunity.location,
            deadline=opportunity.deadline,
            requirements=opportunity.requirements or [],
            benefits=opportunity.benefits or [],
            application_url=opportunity.application_url,
            is_featured=opportunity.is_featured,
            status=opportunity.status,
            created_at=opportunity.created_at,
            updated_at=opportunity.updated_at,
        )
