import redis.asyncio as redis

from core.config import settings

_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Get the shared Redis client, connecting on first use."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


async def acquire_cooldown(client: redis.Redis, key: str, seconds: int) -> bool:
    """
    Claim a cooldown slot.

    Returns:
        True if the key was free and is now held for `seconds`,
        False if a previous claim is still active.
    """
    if not await client.setnx(key, "1"):
        return False
    await client.expire(key, seconds)
    return True


async def within_rate_limit(client: redis.Redis, key: str, limit: int, window_seconds: int) -> bool:
    """
    Count one hit against a fixed window.

    The window starts with the first hit and lasts `window_seconds`.

    Returns:
        True while the hit count in the current window is at most `limit`.
    """
    hits = await client.incr(key)
    if hits == 1:
        await client.expire(key, window_seconds)
    return hits <= limit
