import redis.asyncio as redis

from app.config.settings import Settings


def create_redis_client(settings: Settings) -> redis.Redis:
    return redis.Redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
        decode_responses=False,
    )


async def close_redis_client(client: redis.Redis) -> None:
    await client.aclose()
