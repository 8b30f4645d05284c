# =============================================================================
# app/routers/messages.py - Client Message Thread Endpoints
# =============================================================================
# One thread per client between the client and the admins. New messages are
# pushed to open WebSockets through Redis and emailed by a Celery task.
# =============================================================================

import logging
from typing import Any

from fastapi import APIRouter, Depends, status

from app.auth import AuthUser, get_accessible_client, get_current_user
from app.exceptions import AdminRequiredError
from app.websocket.broadcast import publish_messages_read, publish_new_message
from core.models.message import MessageCreate, SenderType
from core.services.message_service import MessageService
from workers.tasks import send_message_notification

logger = logging.getLogger(__name__)

router = APIRouter()


def _reader_type(user: AuthUser) -> SenderType:
    return SenderType.ADMIN if user.is_admin else SenderType.CLIENT


@router.get("/clients/{client_id}/messages")
async def list_messages(client: dict[str, Any] = Depends(get_accessible_client)):
    """The thread, oldest first."""
    messages = MessageService.list_messages(client["id"])
    return {"messages": messages, "total": len(messages)}


@router.post("/clients/{client_id}/messages", status_code=status.HTTP_201_CREATED)
async def send_message(
    request: MessageCreate,
    client: dict[str, Any] = Depends(get_accessible_client),
    user: AuthUser = Depends(get_current_user),
):
    """
    Post a message.

    Only admins may post as `admin`. The stored row is returned; realtime
    delivery and the email notification happen afterwards.
    """
    if request.sender_type == SenderType.ADMIN and not user.is_admin:
        raise AdminRequiredError()

    record = MessageService.send_message(
        client["id"],
        str(user.id),
        request.sender_type,
        request.message,
        request.message_type,
    )

    publish_new_message(record)
    try:
        task = send_message_notification.delay(record)
        logger.info(f"Queued message notification {task.id} for message {record.get('id')}")
    except Exception as e:
        # Message is already stored and published
        logger.error(f"Failed to queue notification for message {record.get('id')}: {e}")

    return record


@router.post("/clients/{client_id}/messages/read")
async def mark_messages_read(
    client: dict[str, Any] = Depends(get_accessible_client),
    user: AuthUser = Depends(get_current_user),
):
    """Mark the other side's unread messages as read."""
    reader = _reader_type(user)
    count = MessageService.mark_read(client["id"], reader)
    if count:
        publish_messages_read(client["id"], reader.value, count)
    return {"marked_read": count}
