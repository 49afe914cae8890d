"""In-process fixed-window rate limiting, one budget per route class and client IP.

Counters live in a ``limits`` MemoryStorage owned by the middleware instance.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any

import structlog
from limits import RateLimitItem, RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from opphub.config import Settings
from opphub.errors import RateLimitError
from opphub.middleware.error_handler import error_response

logger = structlog.get_logger()

# Paths exempt from rate limiting
_EXEMPT_PATHS = frozenset({"/health", "/ready"})


@dataclass(frozen=True)
class RateLimitRule:
    name: str
    requests: int
    window_seconds: int
    message: str
    code: str
    paths: frozenset[str] = frozenset()

    @property
    def item(self) -> RateLimitItem:
        return RateLimitItemPerSecond(self.requests, self.window_seconds)


def build_rate_limit_rules(settings: Settings) -> list[RateLimitRule]:
    """Route classes, most specific first. The last rule is the catch-all."""
    return [
        RateLimitRule(
            name="registration",
            requests=settings.rate_limit_registration_requests,
            window_seconds=settings.rate_limit_registration_window_seconds,
            message="Too many registration attempts, please try again later.",
            code="REGISTRATION_RATE_LIMIT_EXCEEDED",
            paths=frozenset({"/api/auth/register"}),
        ),
        RateLimitRule(
            name="auth",
            requests=settings.rate_limit_auth_requests,
            window_seconds=settings.rate_limit_auth_window_seconds,
            message="Too many authentication attempts, please try again later.",
            code="AUTH_RATE_LIMIT_EXCEEDED",
            paths=frozenset({"/api/auth/login", "/api/admin/login"}),
        ),
        RateLimitRule(
            name="general",
            requests=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
            message="Too many requests from this IP, please try again later.",
            code="RATE_LIMIT_EXCEEDED",
        ),
    ]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Count requests per (route class, client IP) in fixed windows; 429 when over budget."""

    def __init__(
        self,
        app: Any,  # noqa: ANN401
        rules: list[RateLimitRule],
        storage: MemoryStorage | None = None,
    ) -> None:
        super().__init__(app)
        self.rules = rules
        self.storage = storage if storage is not None else MemoryStorage()
        self.limiter = FixedWindowRateLimiter(self.storage)
        self._items = {rule.name: rule.item for rule in rules}

    def rule_for(self, path: str) -> RateLimitRule:
        """Pick the route class for a request path."""
        for rule in self.rules:
            if path in rule.paths:
                return rule
        return self.rules[-1]

    def _hit(self, rule: RateLimitRule, client_ip: str) -> tuple[bool, int, int]:
        """Record one request. Returns (allowed, remaining, seconds until the window resets)."""
        item = self._items[rule.name]
        allowed = self.limiter.hit(item, rule.name, client_ip)
        stats = self.limiter.get_window_stats(item, rule.name, client_ip)
        reset_in = math.ceil(stats.reset_time - time.time())
        return allowed, stats.remaining, max(1, reset_in)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Check the route class budget, return 429 if exceeded."""
        path = request.url.path
        if path in _EXEMPT_PATHS:
            return await call_next(request)

        rule = self.rule_for(path)
        client_ip = request.client.host if request.client else "unknown"
        allowed, remaining, reset_in = self._hit(rule, client_ip)
        limit_headers = {
            "X-RateLimit-Limit": str(rule.requests),
            "X-RateLimit-Remaining": str(remaining),
        }

        if not allowed:
            logger.warning("rate_limit_exceeded", route_class=rule.name, client_ip=client_ip, path=path)
            return error_response(RateLimitError(rule.message, rule.code, retry_after=reset_in), limit_headers)

        response = await call_next(request)
        response.headers.update(limit_headers)
        return response
