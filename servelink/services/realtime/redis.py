"""
Redis Change Feed

Publishes every change on a Redis pub/sub channel per table
(`{prefix}:{table}`), so that every API worker process, and every
websocket connected to any of them, sees the same feed.

Used in staging and production (ENV_MODE != development).
"""

import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from servelink.core.config import get_settings
from servelink.services.realtime.base import BaseChangeFeed, ChangeEvent, Subscription

logger = logging.getLogger(__name__)


class PubSubSubscription(Subscription):
    """Subscription bound to one Redis pub/sub connection."""

    def __init__(self, table: str, pubsub):
        super().__init__(table)
        self._pubsub = pubsub
        self.closed = False

    async def next_event(self) -> ChangeEvent:
        while not self.closed:
            message = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            if message is None or message.get("type") != "message":
                continue
            try:
                return ChangeEvent.from_json(message["data"])
            except (ValueError, KeyError) as e:
                logger.warning(f"Skipping malformed change event on {self.table}: {e}")
        raise StopAsyncIteration

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self._pubsub.unsubscribe()
        except RedisError as e:
            logger.warning(f"Redis unsubscribe failed for {self.table}: {e}")
        finally:
            await self._pubsub.aclose()


class RedisChangeFeed(BaseChangeFeed):
    """
    Change feed backed by Redis pub/sub.

    Attributes:
        redis_url: Redis connection URL
        channel_prefix: Prefix of the per-table channels
    """

    def __init__(self, redis_url: Optional[str] = None, channel_prefix: Optional[str] = None):
        settings = get_settings()
        self.redis_url = redis_url or settings.redis_url
        self.channel_prefix = channel_prefix or settings.realtime_channel_prefix
        self._client = aioredis.from_url(self.redis_url, decode_responses=True)
        logger.info(f"RedisChangeFeed initialized (prefix={self.channel_prefix})")

    @property
    def provider_name(self) -> str:
        return "redis"

    def channel_for(self, table: str) -> str:
        return f"{self.channel_prefix}:{table}"

    async def publish(self, event: ChangeEvent) -> None:
        try:
            receivers = await self._client.publish(self.channel_for(event.table), event.to_json())
            logger.debug(
                f"Published {event.event.value} on {event.table} ({event.id}) "
                f"to {receivers} receiver(s)"
            )
        except RedisError as e:
            logger.error(f"Change event for {event.table}/{event.id} not delivered: {e}")

    async def subscribe(self, table: str) -> PubSubSubscription:
        pubsub = self._client.pubsub()
        await pubsub.subscribe(self.channel_for(table))
        logger.debug(f"Subscribed to {self.channel_for(table)}")
        return PubSubSubscription(table, pubsub)

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
