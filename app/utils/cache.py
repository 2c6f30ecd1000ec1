"""
Redis client wrapper shared by rate limiting and health checks
"""
import redis
import logging
from typing import Optional
from app.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """Redis-backed counters; every method degrades to a no-op when Redis is down"""

    def __init__(self, url: str = settings.REDIS_URL):
        try:
            self.redis_client = redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=2
            )
            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed: {str(e)}. Falling back to in-process state.")
            self.redis_client = None

    @property
    def available(self) -> bool:
        return self.redis_client is not None

    def increment(self, key: str, ttl: int) -> Optional[int]:
        """
        Increment a counter that expires `ttl` seconds after its last hit

        Returns:
            New count, or None when Redis is unavailable
        """
        if not self.redis_client:
            return None

        try:
            pipe = self.redis_client.pipeline()
            pipe.incr(key)
            pipe.expire(key, ttl)
            count, _ = pipe.execute()
            return int(count)
        except Exception as e:
            logger.error(f"Cache increment error: {str(e)}")
            return None

    def ping(self) -> bool:
        if not self.redis_client:
            return False

        try:
            return bool(self.redis_client.ping())
        except Exception as e:
            logger.error(f"Cache ping error: {str(e)}")
            return False

    def close(self) -> None:
        if self.redis_client:
            self.redis_client.close()
            self.redis_client = None


# Global instance
cache_service = CacheService()
