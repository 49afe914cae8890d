"""CORS for the browser client."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from opphub.config import Settings

# Headers set by the request-id and rate-limit middleware that the client reads
EXPOSED_HEADERS = ["X-Request-Id", "X-RateLimit-Limit", "X-RateLimit-Remaining", "Retry-After"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """
    Register CORSMiddleware as the outermost layer so preflight requests are
    answered before rate limiting. The token travels in ``auth_header_name``
    rather than a cookie, so credentials are only allowed for explicit origins.
    """
    wildcard = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=not wildcard,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-Id", settings.auth_header_name],
        expose_headers=EXPOSED_HEADERS,
    )
