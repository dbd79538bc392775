"""
Redis caching for reference data (venues, categories, musicians, pay rates)
Writes invalidate the matching keys so readers never see stale lookups
"""

import json
import logging
import os
from typing import Any, Optional

import redis

from .config import CACHE_ENABLED, CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

# Redis connection
redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client
    Uses REDIS_URL when set, otherwise individual host/port settings
    """
    global redis_client

    if redis_client is None:
        redis_url = os.getenv("REDIS_URL")
        if redis_url:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
        else:
            client = redis.Redis(
                host=os.getenv("REDIS_HOST", "localhost"),
                port=int(os.getenv("REDIS_PORT", "6379")),
                password=os.getenv("REDIS_PASSWORD", None),
                db=int(os.getenv("REDIS_DB", "0")),
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        client.ping()
        logger.info("Redis connected successfully")
        redis_client = client

    return redis_client


class Cache:
    """Redis cache wrapper with automatic serialization; fails open when Redis is down"""

    def __init__(self, enabled: bool = CACHE_ENABLED):
        self.enabled = enabled
        self.redis_client = None

    def _get_client(self):
        """Lazy load Redis client"""
        if not self.enabled:
            return None
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except redis.RedisError as e:
                logger.warning(f"⚠️ Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except redis.RedisError as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = CACHE_TTL_SECONDS) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value, default=str))
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except redis.RedisError as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except redis.RedisError as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern (e.g., 'musicians:*')"""
        client = self._get_client()
        if not client:
            return 0

        try:
            keys = list(client.scan_iter(match=pattern))
            if keys:
                deleted = client.delete(*keys)
                logger.debug(f"✅ Cache DELETE pattern: {pattern} ({deleted} keys)")
                return deleted
            return 0
        except redis.RedisError as e:
            logger.error(f"❌ Cache delete pattern error for {pattern}: {e}")
            return 0


# Global cache instance
cache = Cache()


def reference_key(resource: str, *parts: Any) -> str:
    """Build a cache key such as 'musicians:list' or 'pay_rates:musician:3'"""
    suffix = ":".join(str(p) for p in parts) if parts else "list"
    return f"{resource}:{suffix}"


def invalidate_reference(resource: str) -> int:
    """Drop every cached entry for a reference resource after a write"""
    return cache.delete_pattern(f"{resource}:*")
