"""Redis connection and the profile cache built on it."""

import json
from typing import Any, cast

import redis
import structlog

from app.config import settings

logger = structlog.get_logger(__name__)

# Global Redis client instance
_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """
    Get or create the shared Redis client.

    Connecting is lazy: building the client never touches the network, so an
    absent Redis only shows up as cache misses.
    """
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password,
            decode_responses=settings.redis_decode_responses,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )

    return _redis_client


async def check_redis_connection() -> bool:
    """Whether the profile cache answers a PING."""
    try:
        get_redis_client().ping()
    except redis.RedisError as e:
        logger.warning("profile_cache_unreachable", error=str(e))
        return False
    return True


def close_redis_connection() -> None:
    """Close the shared client; the next `get_redis_client()` reconnects."""
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class CacheManager:
    """
    JSON cache for sanitized account profiles.

    Every Redis failure is logged and reported as a miss, or as False for
    writes. The account store stays the source of truth.
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    def delete(self, key: str) -> bool:
        """Drop a cached entry."""
        try:
            self.redis.delete(key)
        except Exception as e:
            logger.warning("cache_delete_failed", key=key, error=str(e))
            return False
        return True

    def get_json(self, key: str) -> Any | None:
        """
        Read and decode a cached entry.

        Returns:
            The decoded value, or None on a miss, an unreadable entry or a
            Redis failure
        """
        try:
            raw = cast(str | None, self.redis.get(key))
        except Exception as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("cache_entry_unreadable", key=key)
            return None

    def set_json(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Encode and store an entry; UUIDs and datetimes are written as strings."""
        try:
            payload = json.dumps(value, default=str)
            if ttl:
                self.redis.setex(key, ttl, payload)
            else:
                self.redis.set(key, payload)
        except Exception as e:
            logger.warning("cache_write_failed", key=key, error=str(e))
            return False
        return True
