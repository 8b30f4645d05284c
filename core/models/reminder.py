# =============================================================================
# core/models/reminder.py - Reminder & Digest Schemas
# =============================================================================
# Reminder templates are subject/body strings with {{placeholders}}.
# Scheduled reminders are rows that the worker sends once due.
# Digest preferences control which sections the daily digest includes.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ReminderStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    CANCELLED = "cancelled"


class ReminderTemplateCreate(BaseModel):
    """
    Schema for a reminder template.

    Placeholders replaced at send time: {{client_name}}, {{client_email}},
    {{delivery_date}}, {{service_name}}, {{project_status}},
    {{days_remaining}}.
    """

    name: str = Field(..., min_length=1, max_length=255)

    trigger_type: str = Field(
        default="manual",
        description="When the template fires, e.g. manual or client_created"
    )

    subject_template: str = Field(..., min_length=1)
    message_template: str = Field(..., min_length=1)

    delay_hours: int = Field(
        default=0,
        ge=0,
        description="Hours after the trigger before the reminder is sent"
    )

    is_active: bool = True


class ReminderTemplateUpdate(BaseModel):
    name: str | None = None
    trigger_type: str | None = None
    subject_template: str | None = None
    message_template: str | None = None
    delay_hours: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class SendReminderRequest(BaseModel):
    """
    Send one reminder email now.

    Either give custom_subject/custom_message, or a template_id whose
    template is active. When both client_id and template_id are given, any
    pending scheduled reminder for that pair is marked sent.
    """

    client_email: str
    client_name: str
    client_id: str | None = None
    template_id: str | None = None
    custom_subject: str | None = None
    custom_message: str | None = None
    custom_data: dict[str, Any] = Field(default_factory=dict)


class ScheduleReminderRequest(BaseModel):
    client_id: str
    template_id: str
    scheduled_for: datetime
    reminder_data: dict[str, Any] = Field(default_factory=dict)


class DigestPreferences(BaseModel):
    """Daily digest preferences. Defaults mean every section is included."""

    enabled: bool = True
    include_due_today: bool = True
    include_due_tomorrow: bool = True
    include_overdue: bool = True
    include_new_uploads: bool = True
    send_time: str = "08:00"
    timezone: str = "UTC"


class SendDigestRequest(BaseModel):
    force: bool = False
    recipient: str | None = None
