import time
import redis
from glownexa.core.config import settings
import logging

logger = logging.getLogger(__name__)

# Redis client instance
redis_client = None
# No reconnect attempts before this monotonic time
_retry_at = 0.0
RECONNECT_INTERVAL = 30

def get_redis():
    """
    Get Redis client instance, or None when Redis is disabled or unreachable.

    A blank REDIS_URL disables Redis. After a failed connect the next attempt
    waits RECONNECT_INTERVAL seconds, so requests are not held up by connect
    timeouts while Redis is down.
    """
    global redis_client, _retry_at

    if redis_client is None:
        if not settings.REDIS_URL:
            return None
        if time.monotonic() < _retry_at:
            return None

        try:
            client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
            client.ping()
            redis_client = client
            logger.info("Connected to Redis successfully")
        except (redis.RedisError, ValueError) as e:
            _retry_at = time.monotonic() + RECONNECT_INTERVAL
            logger.warning(f"Failed to connect to Redis: {e}. Using in-memory rate limiting.")

    return redis_client

def close_redis():
    """Close Redis connection"""
    global redis_client
    if redis_client:
        redis_client.close()
        redis_client = None
        logger.info("Disconnected from Redis")
