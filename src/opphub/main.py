"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from opphub.admin.router import router as admin_router
from opphub.auth.revocation import reset_revocation_registry
from opphub.auth.router import router as auth_router
from opphub.community.router import router as community_router
from opphub.config import get_settings
from opphub.database import close_db, create_tables, init_db
from opphub.health.router import router as health_router
from opphub.middleware import setup_middleware
from opphub.opportunities.router import router as opportunities_router
from opphub.redis_client import close_redis, init_redis
from opphub.users.router import profile_router
from opphub.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.create_tables_on_startup:
        await create_tables()
    if settings.revocation_backend == "redis":
        await init_redis(settings.redis_url)
    logger.info("app_started", environment=settings.environment, version=settings.app_version)

    yield

    reset_revocation_registry()
    await close_db()
    if settings.revocation_backend == "redis":
        await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Opportunity Hub API",
        description="Accounts, opportunities catalogue and gamified engagement for Opportunity Hub",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(users_router)
    app.include_router(profile_router)
    app.include_router(opportunities_router)
    app.include_router(community_router)

    return app


app = create_app()
