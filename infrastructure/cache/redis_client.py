"""
Redis cache client configuration
"""
from django.conf import settings
from django.core.cache import cache
from typing import Any, Iterable, Optional
import logging

from apps.core.utils.constants import CACHE_KEY_AVAILABLE_SLOTS

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Wrapper for Redis cache operations.

    Cache failures are logged and never raised: the cache only ever holds
    derived data, so callers fall back to computing it.
    """

    @staticmethod
    def get(key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        try:
            return cache.get(key)
        except Exception as e:
            logger.error(f"Error getting from cache: {str(e)}")
            return None

    @staticmethod
    def set(key: str, value: Any, timeout: int = 300) -> bool:
        """
        Set value in cache

        Args:
            key: Cache key
            value: Value to cache
            timeout: Timeout in seconds (default 5 minutes)

        Returns:
            True if successful, False otherwise
        """
        try:
            cache.set(key, value, timeout)
            return True
        except Exception as e:
            logger.error(f"Error setting cache: {str(e)}")
            return False

    @staticmethod
    def delete_many(keys: Iterable[str]) -> bool:
        """
        Delete several keys in one round trip

        Returns:
            True if successful, False otherwise
        """
        keys = list(keys)
        if not keys:
            return True
        try:
            cache.delete_many(keys)
            return True
        except Exception as e:
            logger.error(f"Error deleting keys from cache: {str(e)}")
            return False


def available_slots_key(date, service_id) -> str:
    """Cache key for the slot list of one service on one date"""
    return f"{CACHE_KEY_AVAILABLE_SLOTS}:{date.isoformat()}:{service_id}"


def invalidate_available_slots(dates, service_ids) -> bool:
    """
    Drop cached slot lists for every service on the given dates.

    Slots are shared across services, so a booking change on a date
    affects the cached list of each of them.
    """
    keys = [
        available_slots_key(date, service_id)
        for date in set(dates)
        for service_id in service_ids
    ]
    logger.debug(f"Invalidating {len(keys)} slot cache keys")
    return RedisClient.delete_many(keys)


def available_slots_ttl() -> int:
    return getattr(settings, 'AVAILABLE_SLOTS_CACHE_TTL', 30)


# Singleton instance
redis_client = RedisClient()
