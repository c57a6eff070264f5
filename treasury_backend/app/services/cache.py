"""
Cash Balance Cache.

Caches the theoretical cash balance per tenant in Redis with a short TTL.
Every write path that creates a CASH movement invalidates the tenant's entry.

The cache is fail-open: a Redis error is logged and treated as a miss, so
reads fall back to the database and committed writes still succeed.
"""

import logging
from decimal import Decimal
from typing import Optional

from redis import RedisError

from treasury_backend.app.core import redis_client as redis_client_module
from treasury_backend.app.core.config import settings

logger = logging.getLogger("treasury.cache")


def _key(tenant_id: int) -> str:
    return f"cash_balance:{tenant_id}"


class CashBalanceCache:
    
    @staticmethod
    async def get(tenant_id: int) -> Optional[Decimal]:
        try:
            raw = await redis_client_module.redis_client.get(_key(tenant_id))
        except RedisError as e:
            logger.warning("Cash balance cache read failed", extra={"tenant_id": tenant_id, "error": str(e)})
            return None
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        return Decimal(raw)

    @staticmethod
    async def set(tenant_id: int, balance: Decimal, ttl_seconds: int = None):
        try:
            await redis_client_module.redis_client.set(
                _key(tenant_id),
                str(balance),
                ex=ttl_seconds or settings.cash_balance_cache_ttl_seconds,
            )
        except RedisError as e:
            logger.warning("Cash balance cache write failed", extra={"tenant_id": tenant_id, "error": str(e)})

    @staticmethod
    async def invalidate(tenant_id: int):
        try:
            await redis_client_module.redis_client.delete(_key(tenant_id))
        except RedisError as e:
            # The stale entry expires with its TTL
            logger.warning("Cash balance cache clear failed", extra={"tenant_id": tenant_id, "error": str(e)})
            return
        logger.debug("Cash balance cache cleared", extra={"tenant_id": tenant_id})
