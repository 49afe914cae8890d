"""Admin router: /api/admin/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from opphub.admin.schemas import AdminCredentials, AdminResponse, AdminTokenResponse, AdminUpdateRequest
from opphub.admin.service import create_admin, login_admin, set_admin_active, setup_admin
from opphub.auth.dependencies import get_current_admin
from opphub.database import get_session
from opphub.db.models import Admin
from opphub.schemas import MessageResponse

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.post("/setup", response_model=MessageResponse, status_code=201)
async def setup(body: AdminCredentials, db: AsyncSession = Depends(get_session)) -> MessageResponse:
    """Create the initial admin account. Only works while no admin exists."""
    await setup_admin(db, body.email, body.password)
    await db.commit()
    return MessageResponse(message="Admin account created successfully")


@router.post("/login", response_model=AdminTokenResponse)
async def login(body: AdminCredentials, db: AsyncSession = Depends(get_session)) -> AdminTokenResponse:
    token = await login_admin(db, body.email, body.password)
    return AdminTokenResponse(token=token)


@router.get("/me", response_model=AdminResponse)
async def me(admin: Admin = Depends(get_current_admin)) -> AdminResponse:
    return AdminResponse(id=admin.id, email=admin.email, active=admin.active)


@router.post("/admins", response_model=AdminResponse, status_code=201)
async def add_admin(
    body: AdminCredentials,
    _admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> AdminResponse:
    """Create an additional admin account."""
    created = await create_admin(db, body.email, body.password)
    await db.commit()
    return AdminResponse(id=created.id, email=created.email, active=created.active)


@router.patch("/admins/{admin_id}", response_model=AdminResponse)
async def update_admin(
    admin_id: str,
    body: AdminUpdateRequest,
    admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> AdminResponse:
    """Activate or deactivate another admin."""
    target = await set_admin_active(db, admin, admin_id, body.active)
    await db.commit()
    return AdminResponse(id=target.id, email=target.email, active=target.active)
