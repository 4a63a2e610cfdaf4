import logging
from typing import Optional
from redis.asyncio import Redis
from toro_mx.core.config import settings

logger = logging.getLogger(__name__)

redis: Optional[Redis] = None


async def init_redis(url: str | None = None) -> Redis:
    global redis
    client = Redis.from_url(url or settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {e}")
        await client.aclose()
        raise
    redis = client
    logger.info("Connected to Redis")
    return redis


async def close_redis():
    global redis
    if redis:
        await redis.aclose()
        redis = None


def set_redis(client: Optional[Redis]) -> None:
    """Install an already-built client (workers and tests)."""
    global redis
    redis = client


def get_redis() -> Optional[Redis]:
    """Current client, or None when Redis never came up; callers degrade."""
    return redis
