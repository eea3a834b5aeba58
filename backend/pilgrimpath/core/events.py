"""
Real-time fan-out of write events.

Handlers publish through an ``EventBus`` obtained from the ``get_event_bus``
dependency. Delivery is best effort: there is no acknowledgement, no queue and
no replay for subscribers that connect later.
"""

import asyncio
import json
import logging
from typing import Any, Dict

import redis.asyncio as redis

from .config import settings
from .websocket import ConnectionManager, manager

logger = logging.getLogger(__name__)

NEW_INCIDENT = "new-incident"
INCIDENT_UPDATED = "incident-updated"
INCIDENT_NOTE_ADDED = "incident-note-added"
NEW_NOTIFICATION = "new-notification"


def envelope(event: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"event": event, "data": payload}


class EventBus:
    async def publish(self, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError


class LocalEventBus(EventBus):
    """Broadcasts straight to the sockets connected to this process."""

    def __init__(self, connections: ConnectionManager):
        self.connections = connections

    async def publish(self, event: str, payload: Dict[str, Any]) -> None:
        await self.connections.broadcast(envelope(event, payload))


class RedisEventBus(EventBus):
    """Publishes to a Redis channel; every process relays it to its sockets."""

    def __init__(self, client: redis.Redis, channel: str):
        self.client = client
        self.channel = channel

    async def publish(self, event: str, payload: Dict[str, Any]) -> None:
        try:
            await self.client.publish(self.channel, json.dumps(envelope(event, payload)))
        except redis.RedisError as e:
            logger.warning("Could not publish %s to %s: %s", event, self.channel, e)


RELAY_RETRY_SECONDS = 5.0


async def relay_events(
    client: redis.Redis,
    channel: str,
    connections: ConnectionManager,
    retry_delay: float = RELAY_RETRY_SECONDS,
):
    """Forward envelopes from ``channel`` to local sockets until cancelled.

    Malformed messages are logged and skipped. A lost Redis connection is
    logged and the subscription is re-established after ``retry_delay``.
    """
    while True:
        pubsub = client.pubsub()
        try:
            await pubsub.subscribe(channel)
            logger.info("Relaying events from Redis channel %s", channel)
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    event = json.loads(message["data"])
                except (TypeError, ValueError) as e:
                    logger.warning("Dropping malformed message on %s: %s", channel, e)
                    continue
                if not isinstance(event, dict) or "event" not in event:
                    logger.warning("Dropping message without an event name on %s", channel)
                    continue
                await connections.broadcast(event)
        except redis.RedisError as e:
            logger.warning("Lost Redis channel %s, retrying in %ss: %s", channel, retry_delay, e)
        finally:
            await _close_pubsub(pubsub)
        await asyncio.sleep(retry_delay)


async def _close_pubsub(pubsub) -> None:
    try:
        await pubsub.reset()
    except redis.RedisError as e:
        logger.debug("Could not reset pubsub: %s", e)


redis_client = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)

if settings.EVENT_BACKEND == "redis":
    event_bus: EventBus = RedisEventBus(redis_client, settings.EVENT_CHANNEL)
else:
    event_bus = LocalEventBus(manager)


def get_event_bus() -> EventBus:
    return event_bus
