# =============================================================================
# app/websocket/routes.py - WebSocket Routes
# =============================================================================
# Realtime feed of one client's message thread.
#
# Connect: ws://host/ws/clients/{client_id}/messages?token={jwt}
#
# Events:
#   - {"type": "connected", "client_id": "..."}
#   - {"type": "message_created", "message": {...}}
#   - {"type": "messages_read", "reader_type": "client", "count": 2}
# =============================================================================

import logging
from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, Query

from app.auth.dependencies import authenticate_token, require_client_access
from app.exceptions import PortalException
from app.websocket.manager import websocket_manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/clients/{client_id}/messages")
async def client_messages_websocket(
    websocket: WebSocket,
    client_id: str,
    token: str = Query(..., description="JWT token for authentication")
):
    """
    Stream new messages for a client's thread.

    The caller must be an admin or the client who owns the thread.
    Sending the text "ping" gets "pong" back.

    Close codes: 4001 invalid token, 4003 access denied, 4004 client not found.
    """
    try:
        user = authenticate_token(token)
    except HTTPException as e:
        logger.warning(f"WebSocket auth failed: {e.detail}")
        await websocket.close(code=4001, reason="Invalid token")
        return

    try:
        require_client_access(client_id, user)
    except PortalException as e:
        logger.warning(f"WebSocket rejected for client {client_id}: {e.message}")
        await websocket.close(code=4004 if e.status_code == 404 else 4003, reason=e.message)
        return

    await websocket_manager.connect(client_id, websocket)

    try:
        await websocket.send_json({
            "type": "connected",
            "client_id": client_id,
            "message": "Connected to message updates"
        })

        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
            else:
                logger.debug(f"WebSocket received: {data[:100]}")

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected from client {client_id}")
    finally:
        websocket_manager.disconnect(client_id, websocket)


@router.get("/ws/status")
async def websocket_status():
    """Connection counts per process."""
    active = websocket_manager.get_active_clients()
    return {
        "total_connections": websocket_manager.get_connection_count(),
        "active_clients": active,
        "client_count": len(active),
    }
