import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class IdempotencyStore:
    """Claims ``(device_id, timestamp)`` keys with ``SET NX EX``.

    Fails open: when redis is unreachable the event is processed without a
    claim rather than rejected.
    """

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int = 86400):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    async def claim(self, key: str) -> bool:
        try:
            claimed = await self.redis.set(key, b"1", nx=True, ex=self.ttl_seconds)
        except RedisError as e:
            logger.error(f"Idempotency claim for {key} skipped: {e}")
            return True
        return bool(claimed)

    async def release(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except RedisError as e:
            logger.error(f"Failed to release idempotency claim {key}: {e}")
