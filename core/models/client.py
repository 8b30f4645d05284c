# =============================================================================
# core/models/client.py - Client Schemas
# =============================================================================
# These models define the API contract for client records:
# - ClientCreate: Admin creates a client for a purchased service
# - ClientUpdate: Partial edit of contact/status fields
# - ServiceChange / RushToggle: Targeted admin actions
# - CommandCenterRow / CommandCenterSummary: Dashboard overview
#
# A client is one person buying resume-writing services. Deliveries,
# messages, progress steps and history rows all hang off a client.
# =============================================================================

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ClientStatus(str, Enum):
    """Lifecycle of a client engagement."""
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class Urgency(str, Enum):
    """
    Urgency label shown in the command center.

    Evaluated in this order, first match wins:
        rush -> overdue -> due-today -> due-tomorrow -> on-track
    """
    RUSH = "rush"
    OVERDUE = "overdue"
    DUE_TODAY = "due-today"
    DUE_TOMORROW = "due-tomorrow"
    ON_TRACK = "on-track"


class HistoryAction(str, Enum):
    """Action types written to client_history."""
    ONBOARDING_TRIGGERED = "onboarding_triggered"
    SERVICE_CHANGED = "service_changed"
    RUSH_ENABLED = "rush_enabled"
    RUSH_DISABLED = "rush_disabled"
    INTAKE_FORM_COMPLETED = "intake_form_completed"
    FILE_UPLOADED = "file_uploaded"
    MESSAGE_RECEIVED = "message_received"
    CLIENT_CREATED_VIA_UPLOAD = "client_created_via_upload"
    DELIVERY_APPROVED = "delivery_approved"
    REMINDER_SENT = "reminder_sent"


class ClientCreate(BaseModel):
    """
    Schema for creating a client.

    The estimated delivery date is computed from the service type's
    default timeline, so it is not accepted here.

    Example:
        {
            "name": "Jane Doe",
            "email": "jane@example.com",
            "service_type_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """

    name: str = Field(..., min_length=1, max_length=255)
    email: str
    service_type_id: str = Field(..., min_length=1)
    phone: str | None = None
    user_id: str | None = Field(
        default=None,
        description="Auth user linked to this client (for portal access)"
    )
    is_rush: bool = False


class ClientUpdate(BaseModel):
    """Partial update. Only provided fields are written."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = None
    phone: str | None = None
    status: ClientStatus | None = None
    payment_status: PaymentStatus | None = None
    estimated_delivery_date: date | None = None
    user_id: str | None = None


class ServiceChange(BaseModel):
    service_type_id: str = Field(..., min_length=1)


class RushToggle(BaseModel):
    """Enable or disable rush delivery. The deadline is kept only when enabling."""

    is_rush: bool
    rush_deadline: date | None = None


class CommandCenterRow(BaseModel):
    """One client as shown on the admin command center."""

    id: str
    name: str
    email: str
    phone: str | None = None
    status: str
    payment_status: str | None = None
    service_name: str | None = None
    estimated_delivery_date: str | None = None
    is_rush: bool = False
    days_until_due: int
    urgency: Urgency
    next_action: str
    files_count: int = 0
    last_activity: str


class CommandCenterSummary(BaseModel):
    """Counts shown above the command center table."""

    rush: int = 0
    due_today: int = 0
    overdue: int = 0
    active: int = 0
    action_needed: int = 0
    total: int = 0


class CommandCenterResponse(BaseModel):
    clients: list[CommandCenterRow] = Field(default_factory=list)
    summary: CommandCenterSummary = Field(default_factory=CommandCenterSummary)


class HistoryEntry(BaseModel):
    """A client_history row."""

    id: str | None = None
    client_id: str
    action_type: str
    description: str
    metadata: dict[str, Any] | None = None
    created_by: str | None = None
    created_at: str | None = None
