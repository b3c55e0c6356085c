# shopmuse/db/redis.py
import logging
import redis.asyncio as redis

logger = logging.getLogger(__name__)


async def connect(url: str) -> redis.Redis:
    """
    Connect to Redis and ping it once.
    Unlike a cache, the store holds user state, so an unreachable server is fatal at startup.
    """
    if not url:
        raise ValueError("STORAGE_BACKEND=redis requires REDIS_URL")

    logger.info("Connecting to Redis at %s", url)
    client = redis.from_url(url, decode_responses=True)
    try:
        await client.ping()
    except Exception:
        await client.aclose()
        raise
    logger.info("Redis connection successful")
    return client


async def disconnect(client: redis.Redis | None) -> None:
    """Close the Redis connection if it exists."""
    if client is not None:
        await client.aclose()
        logger.info("Redis disconnected")
