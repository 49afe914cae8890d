"""Opportunities catalogue queries and admin writes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import or_, select

from opphub.db.models import Opportunity
from opphub.errors import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 100


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def list_opportunities(
    db: AsyncSession,
    category: str | None = None,
    search: str | None = None,
    featured: bool = False,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[Opportunity]:
    """Newest first, filtered by category, featured flag and a substring search."""
    stmt = select(Opportunity)
    if category:
        stmt = stmt.where(Opportunity.category == category)
    if featured:
        stmt = stmt.where(Opportunity.is_featured.is_(True))
    if search:
        pattern = f"%{_escape_like(search.strip())}%"
        stmt = stmt.where(
            or_(
                Opportunity.title.ilike(pattern, escape="\\"),
                Opportunity.description.ilike(pattern, escape="\\"),
                Opportunity.organization.ilike(pattern, escape="\\"),
            )
        )
    limit = max(1, min(limit, MAX_LIST_LIMIT))
    stmt = stmt.order_by(Opportunity.created_at.desc()).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_opportunity(db: AsyncSession, opportunity_id: str) -> Opportunity:
    """Raises NotFoundError if missing."""
    result = await db.execute(select(Opportunity).where(Opportunity.id == opportunity_id))
    opportunity = result.scalar_one_or_none()
    if opportunity is None:
        raise NotFoundError("Opportunity not found")
    return opportunity


async def create_opportunity(db: AsyncSession, fields: dict[str, Any]) -> Opportunity:
    now = datetime.now(timezone.utc)
    opportunity = Opportunity(**fields, created_at=now, updated_at=now)
    db.add(opportunity)
    await db.flush()
    logger.info("opportunity_created", opportunity_id=opportunity.id, category=opportunity.category)
    return opportunity


async def update_opportunity(db: AsyncSession, opportunity_id: str, fields: dict[str, Any]) -> Opportunity:
    opportunity = await get_opportunity(db, opportunity_id)
    for key, value in fields.items():
        setattr(opportunity, key, value)
    opportunity.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("opportunity_updated", opportunity_id=opportunity.id, fields=sorted(fields))
    return opportunity


async def delete_opportunity(db: AsyncSession, opportunity_id: str) -> None:
    opportunity = await get_opportunity(db, opportunity_id)
    await db.delete(opportunity)
    await db.flush()
    logger.info("opportunity_deleted", opportunity_id=opportunity_id)
