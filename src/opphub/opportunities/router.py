"""Opportunities router: public reads, admin writes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from opphub.auth.dependencies import get_current_admin
from opphub.database import get_session
from opphub.db.models import Admin
from opphub.opportunities.schemas import Category, OpportunityCreate, OpportunityResponse, OpportunityUpdate
from opphub.opportunities.service import (
    DEFAULT_LIST_LIMIT,
    create_opportunity,
    delete_opportunity,
    get_opportunity,
    list_opportunities,
    update_opportunity,
)
from opphub.schemas import CamelModel, MessageResponse

router = APIRouter(prefix="/api/opportunities", tags=["Opportunities"])


def _column_values(body: CamelModel, *, exclude_unset: bool = False) -> dict[str, Any]:
    """Plain column values: enums as strings, URLs as text. Explicit nulls are dropped."""
    fields = {
        key: value
        for key, value in body.model_dump(mode="json", exclude_unset=exclude_unset).items()
        if value is not None
    }
    # mode="json" turns datetimes into strings; keep the parsed value
    if "deadline" in fields:
        fields["deadline"] = body.deadline  # type: ignore[attr-defined]
    return fields


@router.get("", response_model=list[OpportunityResponse])
async def list_all(
    category: Category | None = None,
    search: str | None = Query(None, max_length=200),
    featured: bool = False,
    limit: int = DEFAULT_LIST_LIMIT,
    db: AsyncSession = Depends(get_session),
) -> list[OpportunityResponse]:
    opportunities = await list_opportunities(
        db,
        category=category.value if category else None,
        search=search,
        featured=featured,
        limit=limit,
    )
    return [OpportunityResponse.from_model(o) for o in opportunities]


@router.get("/{opportunity_id}", response_model=OpportunityResponse)
async def get_one(opportunity_id: str, db: AsyncSession = Depends(get_session)) -> OpportunityResponse:
    return OpportunityResponse.from_model(await get_opportunity(db, opportunity_id))


@router.post("", response_model=OpportunityResponse, status_code=201)
async def create(
    body: OpportunityCreate,
    _admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> OpportunityResponse:
    opportunity = await create_opportunity(db, _column_values(body))
    await db.commit()
    return OpportunityResponse.from_model(opportunity)


@router.put("/{opportunity_id}", response_model=OpportunityResponse)
async def update(
    opportunity_id: str,
    body: OpportunityUpdate,
    _admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> OpportunityResponse:
    opportunity = await update_opportunity(db, opportunity_id, _column_values(body, exclude_unset=True))
    await db.commit()
    return OpportunityResponse.from_model(opportunity)


@router.delete("/{opportunity_id}", response_model=MessageResponse)
async def delete(
    opportunity_id: str,
    _admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await delete_opportunity(db, opportunity_id)
    await db.commit()
    return MessageResponse(message="Opportunity deleted")
