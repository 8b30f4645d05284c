# =============================================================================
# core/models/message.py - Messaging & Notification Schemas
# =============================================================================
# Messages are a per-client thread between the client and the admin team.
# Notifications are in-app alerts (delivery ready, revision complete) plus
# the static notification rule rows admins can toggle.
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SenderType(str, Enum):
    """Who wrote a message."""
    ADMIN = "admin"
    CLIENT = "client"


class NotificationType(str, Enum):
    """
    Delivery notification kinds.

    - delivery_ready: A new document is waiting for review
    - revision_complete: A requested revision has been delivered
    """
    DELIVERY_READY = "delivery_ready"
    REVISION_COMPLETE = "revision_complete"


class MessageCreate(BaseModel):
    """
    Schema for sending a message in a client thread.

    Example:
        {"message": "Your draft is ready!", "sender_type": "admin"}
    """

    message: str = Field(..., description="Message text (must not be blank)")

    sender_type: SenderType = Field(
        ...,
        description="admin or client"
    )

    message_type: str = Field(
        default="text",
        description="Message kind; only plain text is sent today"
    )


class DeliveryNotificationRequest(BaseModel):
    delivery_id: str
    client_id: str
    document_title: str
    notification_type: NotificationType


class NotificationRuleUpdate(BaseModel):
    """Partial update of a notification rule row. No rule evaluation exists."""

    is_enabled: bool | None = None
    priority: int | None = None
    conditions: dict[str, Any] | None = None
    actions: dict[str, Any] | None = None
