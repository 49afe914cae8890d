"""Middleware registration."""

from fastapi import FastAPI

from opphub.config import Settings
from opphub.middleware.cors import setup_cors
from opphub.middleware.error_handler import setup_error_handlers
from opphub.middleware.logging import setup_logging
from opphub.middleware.rate_limit import RateLimitMiddleware, build_rate_limit_rules
from opphub.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette runs middleware in reverse-add order (last added = outermost).
    CORS is added last so it also wraps 429 responses from the rate limiter.
    """
    setup_logging(settings)
    setup_error_handlers(app, settings)
    app.add_middleware(RateLimitMiddleware, rules=build_rate_limit_rules(settings))
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
