"""
Redis client initialization.

A single async client backs the per-tenant cash balance cache.
"""

import redis.asyncio as redis
from treasury_backend.app.core.config import settings


redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def ping_redis() -> bool:
    """
    Test Redis connection for the health check.
    
    Returns:
        True if connection successful, False otherwise
    """
    try:
        return bool(await redis_client.ping())
    except (redis.ConnectionError, redis.TimeoutError):
        return False
