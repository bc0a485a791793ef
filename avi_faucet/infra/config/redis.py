import redis.asyncio as redis
from functools import lru_cache
from avi_faucet.infra.config.settings import settings
from avi_faucet.core.logger.logger import logger

@lru_cache()
def get_redis_pool():
    """Get Redis connection pool (cached)"""
    return redis.ConnectionPool.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        max_connections=settings.REDIS_MAX_CONNECTIONS
    )

def get_redis() -> redis.Redis:
    """Get a Redis client on the shared pool. Connects lazily on first command."""
    pool = get_redis_pool()
    logger.info("Using Redis for rate-limit claims", extra={"redis_url": settings.REDIS_URL.split("@")[-1]})
    return redis.Redis(connection_pool=pool)
