"""Shared Redis client, only opened when ``revocation_backend == "redis"``."""

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()

_client: redis.Redis | None = None


async def init_redis(url: str, *, max_connections: int = 20) -> redis.Redis:
    """Open the client and fail fast if the server is unreachable."""
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )
    await _client.ping()
    logger.info("redis_connected")
    return _client


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis() -> redis.Redis:
    if _client is None:
        raise RuntimeError("Redis backend selected but init_redis() has not run")
    return _client


async def redis_ready() -> str:
    """Readiness probe result: "ok" or an error description."""
    try:
        await get_redis().ping()
    except (RuntimeError, redis.RedisError) as exc:
        return f"error: {exc}"
    return "ok"
