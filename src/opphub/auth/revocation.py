"""
Session revocation registry: access tokens invalidated before natural expiry.

An entry only needs to outlive the token it blocks, so each one is kept until
the token's own ``exp`` claim and then evicted. Two backends:

- ``InMemoryRevocationRegistry``: process-local, lock-guarded. Correct for a
  single instance only.
- ``RedisRevocationRegistry``: keys with a TTL in a shared Redis, so every
  instance observes the same revocations.
"""

from __future__ import annotations

import hashlib
import heapq
import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Protocol

import structlog

from opphub.auth.jwt import get_token_expiration
from opphub.config import get_settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = structlog.get_logger()


class RevocationRegistry(Protocol):
    async def blacklist(self, token: str) -> None: ...

    async def is_blacklisted(self, token: str) -> bool: ...


def _remaining_seconds(token: str) -> float:
    """Seconds until the token expires on its own. Falls back to the access TTL."""
    expiration = get_token_expiration(token)
    if expiration is None:
        return get_settings().access_token_expire_minutes * 60
    return max(0.0, (expiration - datetime.now(timezone.utc)).total_seconds())


class InMemoryRevocationRegistry:
    """Token set with TTL eviction, safe for concurrent readers and writers."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, float] = {}
        self._expiry_heap: list[tuple[float, str]] = []

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    async def blacklist(self, token: str) -> None:
        """Insert a token until its natural expiry. Re-inserting is a no-op."""
        # Already-expired tokens are held for at least one second
        expires_at = self._clock() + max(_remaining_seconds(token), 1.0)
        with self._lock:
            self._purge_expired()
            if token in self._entries:
                return
            self._entries[token] = expires_at
            heapq.heappush(self._expiry_heap, (expires_at, token))

    async def is_blacklisted(self, token: str) -> bool:
        with self._lock:
            expires_at = self._entries.get(token)
        if expires_at is None:
            return False
        return expires_at > self._clock()

    def _purge_expired(self) -> None:
        """Drop entries whose token has expired. Caller holds the lock."""
        now = self._clock()
        while self._expiry_heap and self._expiry_heap[0][0] <= now:
            _, token = heapq.heappop(self._expiry_heap)
            self._entries.pop(token, None)


class RedisRevocationRegistry:
    """Revocations stored as ``revoked:<sha256>`` keys expiring with the token."""

    key_prefix = "revoked:"

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    def _key(self, token: str) -> str:
        return self.key_prefix + hashlib.sha256(token.encode()).hexdigest()

    async def blacklist(self, token: str) -> None:
        ttl = max(int(_remaining_seconds(token)) + 1, 1)
        await self._redis.set(self._key(token), "1", ex=ttl)

    async def is_blacklisted(self, token: str) -> bool:
        return bool(await self._redis.exists(self._key(token)))


_registry: RevocationRegistry | None = None


def get_revocation_registry() -> RevocationRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _registry  # noqa: PLW0603
    if _registry is None:
        settings = get_settings()
        if settings.revocation_backend == "redis":
            from opphub.redis_client import get_redis

            _registry = RedisRevocationRegistry(get_redis())
        else:
            _registry = InMemoryRevocationRegistry()
        logger.info("revocation_registry_initialized", backend=settings.revocation_backend)
    return _registry


def reset_revocation_registry() -> None:
    """Drop the current registry (useful for testing)."""
    global _registry  # noqa: PLW0603
    _registry = None
