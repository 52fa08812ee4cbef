"""
Redis client for the shared cart slot.

Provides a singleton Upstash Redis client (sync, since cart writes are
write-through from synchronous mutations) and key naming helpers.
Credentials come from StorefrontSettings.
"""

from typing import Optional

from upstash_redis import Redis

from storefront.config import get_settings
from storefront.logging import get_logger

logger = get_logger(__name__)

_sync_redis_client: Optional[Redis] = None


def get_redis_sync() -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    Uses the standard Upstash env var names via settings:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _sync_redis_client

    if _sync_redis_client is None:
        settings = get_settings()
        if not settings.redis_enabled:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _sync_redis_client = Redis(url=settings.redis_url, token=settings.redis_token)
        logger.debug("Upstash Redis client created")

    return _sync_redis_client


class RedisKeys:
    """Redis key prefixes for storefront data."""

    CART = "cart:"  # cart:{slot}

    @staticmethod
    def cart_key(slot: str) -> str:
        return f"{RedisKeys.CART}{slot}"
