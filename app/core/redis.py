import redis.asyncio as redis


async def create_redis(redis_url: str) -> redis.Redis:
    return redis.from_url(
        redis_url,
        encoding="utf-8",
        decode_responses=True,
        health_check_interval=30,
        retry_on_timeout=True,
        socket_connect_timeout=10,
        socket_timeout=None,
        socket_keepalive=True
    )
