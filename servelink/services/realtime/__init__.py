"""
Change Feed Factory

Provides a single entry point for obtaining the change feed.

Usage:
    from servelink.services.realtime import get_change_feed

    feed = get_change_feed()
    await feed.publish(ChangeEvent("orders", ChangeType.UPDATE, order.id))

Environment Switching:
    - ENV_MODE=development → MemoryChangeFeed (single process)
    - ENV_MODE=staging / production → RedisChangeFeed (shared by all workers)
"""

import logging
from functools import lru_cache

from servelink.core.config import get_settings
from servelink.services.realtime.base import (
    FEED_TABLES,
    BaseChangeFeed,
    ChangeEvent,
    ChangeType,
    Subscription,
)
from servelink.services.realtime.memory import MemoryChangeFeed
from servelink.services.realtime.redis import RedisChangeFeed

logger = logging.getLogger(__name__)


@lru_cache()
def get_change_feed() -> BaseChangeFeed:
    """
    Get the configured change feed instance.

    The instance is cached so that publishers and subscribers in one
    process share it.
    """
    settings = get_settings()

    if settings.use_redis_feed:
        logger.info(f"Change Feed: Using RedisChangeFeed ({settings.env_mode.value} mode)")
        return RedisChangeFeed()

    logger.info("Change Feed: Using MemoryChangeFeed (development mode)")
    return MemoryChangeFeed()


def reset_change_feed() -> None:
    """
    Clear the cached change feed instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_change_feed.cache_clear()
    logger.debug("Change feed cache cleared")


__all__ = [
    "get_change_feed",
    "reset_change_feed",
    "FEED_TABLES",
    "BaseChangeFeed",
    "ChangeEvent",
    "ChangeType",
    "Subscription",
    "MemoryChangeFeed",
    "RedisChangeFeed",
]
