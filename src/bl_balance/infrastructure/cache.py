"""Unpaid balance cache — cache-aside over PostgreSQL.

  - Cache key: f"balance:unpaid_cents:{user_id}"
  - Write path: DB commit first, then invalidate
  - Read path: cache → DB on miss → populate with TTL
"""

import redis.asyncio as aioredis

from config.settings import settings


def unpaid_cents_key(user_id: str) -> str:
    return f"balance:unpaid_cents:{user_id}"


class UnpaidBalanceCache:
    def __init__(
        self,
        redis: aioredis.Redis | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        # from_url only builds the pool; connections open on first command
        self._redis = redis or aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        self._ttl = ttl_seconds or settings.UNPAID_BALANCE_CACHE_TTL_SECONDS

    async def get(self, user_id: str) -> int | None:
        value = await self._redis.get(unpaid_cents_key(user_id))
        return int(value) if value is not None else None

    async def set(self, user_id: str, cents: int) -> None:
        await self._redis.set(unpaid_cents_key(user_id), cents, ex=self._ttl)

    async def invalidate(self, user_id: str) -> None:
        await self._redis.delete(unpaid_cents_key(user_id))
