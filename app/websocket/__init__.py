# =============================================================================
# app/websocket/__init__.py - WebSocket Module
# =============================================================================
# Realtime message-thread updates.
#
# Usage:
#   # Broadcast to sockets in this process (from FastAPI)
#   from app.websocket import websocket_manager
#   await websocket_manager.broadcast(client_id, {"type": "message_created", ...})
#
#   # Publish from any process (API or Celery worker)
#   from app.websocket.broadcast import publish_new_message
#   publish_new_message(message_row)
# =============================================================================

from app.websocket.manager import websocket_manager
from app.websocket.broadcast import (
    publish_event,
    publish_messages_read,
    publish_new_message,
    WEBSOCKET_CHANNEL,
)

__all__ = [
    "websocket_manager",
    "publish_event",
    "publish_messages_read",
    "publish_new_message",
    "WEBSOCKET_CHANNEL",
]
