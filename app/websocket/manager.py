# =============================================================================
# app/websocket/manager.py - WebSocket Connection Manager
# =============================================================================
# Tracks open message-thread sockets per client and fans events out to them.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   await websocket_manager.connect(client_id, websocket)
#   await websocket_manager.broadcast(client_id, {"type": "message_created", ...})
#   websocket_manager.disconnect(client_id, websocket)
# =============================================================================

import logging
from typing import Dict, Optional, Set
from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    WebSocket connections grouped by client ID.

    A thread can be open in several places at once (the client's portal and
    one or more admin tabs); every one of them receives each event.
    """

    def __init__(self):
        # client_id -> set of WebSocket connections
        self.connections: Dict[str, Set[WebSocket]] = {}
        self._total_connections = 0

    async def connect(self, client_id: str, websocket: WebSocket) -> None:
        await websocket.accept()

        self.connections.setdefault(client_id, set()).add(websocket)
        self._total_connections += 1

        logger.info(
            f"WebSocket connected to client {client_id}. "
            f"Total connections: {self._total_connections}"
        )

    def disconnect(self, client_id: str, websocket: WebSocket) -> None:
        sockets = self.connections.get(client_id)
        if sockets and websocket in sockets:
            sockets.discard(websocket)
            self._total_connections -= 1

            if not sockets:
                del self.connections[client_id]

        logger.info(
            f"WebSocket disconnected from client {client_id}. "
            f"Total connections: {self._total_connections}"
        )

    async def broadcast(self, client_id: str, message: dict) -> int:
        """
        Send a message to every socket watching a client's thread.

        Sockets that fail to send are dropped.

        Returns:
            Number of sockets the message reached
        """
        if client_id not in self.connections:
            logger.debug(f"No connections for client {client_id}, skipping broadcast")
            return 0

        dead_connections: Set[WebSocket] = set()
        sent_count = 0

        for websocket in self.connections[client_id]:
            try:
                await websocket.send_json(message)
                sent_count += 1
            except Exception as e:
                logger.warning(f"Failed to send to WebSocket: {e}")
                dead_connections.add(websocket)

        for ws in dead_connections:
            self.connections[client_id].discard(ws)
            self._total_connections -= 1

        if dead_connections:
            logger.info(f"Cleaned up {len(dead_connections)} dead connections")

        if client_id in self.connections and not self.connections[client_id]:
            del self.connections[client_id]

        logger.debug(
            f"Broadcast to client {client_id}: "
            f"type={message.get('type')}, sent to {sent_count} sockets"
        )
        return sent_count

    def get_connection_count(self, client_id: Optional[str] = None) -> int:
        if client_id:
            return len(self.connections.get(client_id, set()))
        return self._total_connections

    def get_active_clients(self) -> list[str]:
        return list(self.connections.keys())


# Global singleton instance
websocket_manager = ConnectionManager()
