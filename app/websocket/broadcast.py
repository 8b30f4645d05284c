# =============================================================================
# app/websocket/broadcast.py - Cross-Process Broadcasting
# =============================================================================
# Any process (API or Celery worker) publishes thread events to Redis; the
# API's pub/sub listener hands them to the WebSocket manager.
#
# Events:
#   - message_created: A message was posted to a client's thread
#   - messages_read: One side read the other side's messages
# =============================================================================

import json
import logging
from typing import Any

import redis

from app.config import settings

logger = logging.getLogger(__name__)

# Redis channel for WebSocket events
WEBSOCKET_CHANNEL = "rdrportal:websocket:events"


def get_redis_client() -> redis.Redis:
    return redis.from_url(settings.REDIS_URL)


def publish_event(client_id: str, event_type: str, data: dict[str, Any]) -> bool:
    """
    Publish an event for the sockets watching a client's thread.

    Realtime delivery is best-effort: a Redis failure is logged and
    reported as False, the message itself is already stored.

    Returns:
        bool: True if published successfully
    """
    try:
        message = json.dumps({
            "client_id": str(client_id),
            "type": event_type,
            **data
        }, default=str)

        get_redis_client().publish(WEBSOCKET_CHANNEL, message)

        logger.debug(f"Published {event_type} event for client {client_id}")
        return True

    except redis.RedisError as e:
        logger.error(f"Failed to publish event: {e}")
        return False


def publish_new_message(record: dict[str, Any]) -> bool:
    """Publish a message_created event carrying the stored message row."""
    return publish_event(
        client_id=record["client_id"],
        event_type="message_created",
        data={"message": record},
    )


def publish_messages_read(client_id: str, reader_type: str, count: int) -> bool:
    return publish_event(
        client_id=client_id,
        event_type="messages_read",
        data={"reader_type": reader_type, "count": count},
    )
