# =============================================================================
# core/services/reminder_service.py - Reminder Templates & Scheduled Sends
# =============================================================================
# Templates are subject/body strings with {{placeholders}}. A reminder can
# be sent immediately (custom text or a template) or scheduled; the worker
# calls dispatch_due_reminders() periodically to send the scheduled ones.
#
# Usage:
#   ReminderService.send_reminder(
#       client_email="jane@example.com",
#       client_name="Jane Doe",
#       template_id=template_id,
#       client_id=client_id,
#   )
# =============================================================================

import logging
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from lib.email_client import get_email_client
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, parse_date, utc_now, utc_now_iso
from core import email_templates
from core.models.reminder import ReminderStatus
from core.services.history_service import HistoryService
from app.config import settings
from app.exceptions import TemplateNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Reminder from Results Driven Resumes"
DEFAULT_MESSAGE = "This is a reminder message."

# Placeholder -> fallback when custom_data lacks the value
PLACEHOLDER_DEFAULTS = {
    "delivery_date": "TBD",
    "service_name": "Service",
    "project_status": "In Progress",
    "days_remaining": "N/A",
}


def render_template(
    text: str,
    client_name: str,
    client_email: str,
    custom_data: dict[str, Any] | None = None,
) -> str:
    """
    Replace every {{placeholder}} occurrence in a template string.

    Example:
        >>> render_template("Hi {{client_name}}, due {{delivery_date}}", "Jane", "j@x.com")
        'Hi Jane, due TBD'
    """
    data = custom_data or {}
    result = text.replace("{{client_name}}", client_name)
    result = result.replace("{{client_email}}", client_email)
    for key, default in PLACEHOLDER_DEFAULTS.items():
        value = data.get(key)
        result = result.replace("{{" + key + "}}", str(value) if value not in (None, "") else default)
    return result


class ReminderService:
    """Service for reminder templates and scheduled reminders."""

    # -------------------------------------------------------------------------
    # Templates
    # -------------------------------------------------------------------------

    @staticmethod
    def list_templates(active_only: bool = False) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()

        try:
            query = client.table("reminder_templates").select("*")
            if active_only:
                query = query.eq("is_active", True)
            response = query.order("created_at", desc=True).execute()
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch reminder templates: {e}")
            raise

    @staticmethod
    def get_template(template_id: str | UUID, active_only: bool = False) -> dict[str, Any]:
        """
        Raises:
            TemplateNotFoundError: Missing, or inactive when active_only
        """
        template = SupabaseClient._fetch_one("reminder_templates", "id", template_id)
        if not template or (active_only and not template.get("is_active")):
            raise TemplateNotFoundError(normalize_uuid(template_id))
        return template

    @staticmethod
    def create_template(data: dict[str, Any]) -> dict[str, Any]:
        client = SupabaseClient.get_client()

        try:
            response = client.table("reminder_templates").insert(data).execute()
            template = response.data[0]
            logger.info(f"Created reminder template: {template.get('id')}")
            return template

        except Exception as e:
            logger.error(f"Failed to create reminder template: {e}")
            raise

    @staticmethod
    def update_template(template_id: str | UUID, updates: dict[str, Any]) -> dict[str, Any]:
        template = ReminderService.get_template(template_id)
        if not updates:
            return template

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("reminder_templates")
                .update(updates)
                .eq("id", normalize_uuid(template_id))
                .execute()
            )
            return response.data[0] if response.data else {**template, **updates}

        except Exception as e:
            logger.error(f"Failed to update reminder template {template_id}: {e}")
            raise

    @staticmethod
    def delete_template(template_id: str | UUID) -> None:
        ReminderService.get_template(template_id)
        client = SupabaseClient.get_client()

        try:
            client.table("reminder_templates").delete().eq("id", normalize_uuid(template_id)).execute()
            logger.info(f"Deleted reminder template: {template_id}")

        except Exception as e:
            logger.error(f"Failed to delete reminder template {template_id}: {e}")
            raise

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    @staticmethod
    def send_reminder(
        client_email: str,
        client_name: str,
        client_id: str | UUID | None = None,
        template_id: str | UUID | None = None,
        custom_subject: str | None = None,
        custom_message: str | None = None,
        custom_data: dict[str, Any] | None = None,
        reminder_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Email one reminder now.

        With a template_id, the active template's subject and message are
        rendered (overriding any custom text). When client_id is given too,
        a reminder_sent history row is written and scheduled reminders are
        marked sent: only `reminder_id` when given, otherwise every pending
        reminder for that client/template pair.

        Returns:
            The email provider's response

        Raises:
            TemplateNotFoundError: If the template is missing or inactive
            EmailError: If the email cannot be sent
        """
        custom_data = custom_data or {}
        subject = custom_subject or DEFAULT_SUBJECT
        message = custom_message or DEFAULT_MESSAGE

        if template_id:
            template = ReminderService.get_template(template_id, active_only=True)
            subject = render_template(template["subject_template"], client_name, client_email, custom_data)
            message = render_template(template["message_template"], client_name, client_email, custom_data)

        logger.info(f"Sending reminder email to {client_email}: {subject!r}")
        email_response = get_email_client().send(
            to=client_email,
            subject=subject,
            html=email_templates.reminder(message),
            sender=settings.EMAIL_FROM_REMINDERS,
        )

        if client_id and template_id:
            ReminderService._mark_sent(client_id, template_id, custom_data, email_response, reminder_id)
            HistoryService.record(
                client_id,
                "reminder_sent",
                f"Automated reminder sent: {subject}",
                metadata={
                    "template_id": normalize_uuid(template_id),
                    "email_id": email_response.get("id"),
                    "subject": subject,
                },
            )

        return email_response

    @staticmethod
    def _mark_sent(
        client_id: str | UUID,
        template_id: str | UUID,
        custom_data: dict[str, Any],
        email_response: dict[str, Any],
        reminder_id: str | UUID | None = None,
    ) -> None:
        client = SupabaseClient.get_client()

        try:
            query = (
                client.table("scheduled_reminders")
                .update({
                    "status": ReminderStatus.SENT.value,
                    "sent_at": utc_now_iso(),
                    "reminder_data": {**custom_data, "email_response": email_response},
                })
            )
            if reminder_id:
                query = query.eq("id", normalize_uuid(reminder_id))
            else:
                query = (
                    query.eq("client_id", normalize_uuid(client_id))
                    .eq("template_id", normalize_uuid(template_id))
                    .eq("status", ReminderStatus.PENDING.value)
                )
            query.execute()
        except Exception as e:
            # The email already went out; keep going and log.
            logger.error(f"Error updating reminder status: {e}")

    # -------------------------------------------------------------------------
    # Scheduled reminders
    # -------------------------------------------------------------------------

    @staticmethod
    def list_scheduled(limit: int = 50) -> list[dict[str, Any]]:
        """Scheduled reminders ordered by send time, with client and template names."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("scheduled_reminders")
                .select("*")
                .order("scheduled_for")
                .limit(limit)
                .execute()
            )
            reminders = response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch scheduled reminders: {e}")
            raise

        names = {c["id"]: c.get("name") for c in SupabaseClient.fetch_clients(columns="id, name")}
        templates = {t["id"]: t.get("name") for t in ReminderService.list_templates()}
        return [
            {
                **r,
                "client_name": names.get(r.get("client_id")),
                "template_name": templates.get(r.get("template_id")),
            }
            for r in reminders
        ]

    @staticmethod
    def schedule(
        client_id: str | UUID,
        template_id: str | UUID,
        scheduled_for: datetime,
        reminder_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        client = SupabaseClient.get_client()

        data = {
            "client_id": normalize_uuid(client_id),
            "template_id": normalize_uuid(template_id),
            "scheduled_for": scheduled_for.isoformat(),
            "status": ReminderStatus.PENDING.value,
            "reminder_data": reminder_data or {},
        }

        try:
            response = client.table("scheduled_reminders").insert(data).execute()
            reminder = response.data[0] if response.data else data
            logger.info(
                f"Scheduled reminder {data['template_id']} for client "
                f"{data['client_id']} at {data['scheduled_for']}"
            )
            return reminder

        except Exception as e:
            logger.error(f"Failed to schedule reminder: {e}")
            raise

    @staticmethod
    def schedule_for_trigger(
        client_id: str | UUID,
        trigger_type: str,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Schedule every active template with this trigger after its delay_hours."""
        now = now or utc_now()
        scheduled = []
        for template in ReminderService.list_templates(active_only=True):
            if template.get("trigger_type") != trigger_type:
                continue
            send_at = now + timedelta(hours=template.get("delay_hours") or 0)
            scheduled.append(ReminderService.schedule(client_id, template["id"], send_at))
        return scheduled

    @staticmethod
    def cancel(reminder_id: str | UUID) -> dict[str, Any]:
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("scheduled_reminders")
                .update({"status": ReminderStatus.CANCELLED.value})
                .eq("id", normalize_uuid(reminder_id))
                .execute()
            )
            logger.info(f"Cancelled scheduled reminder {reminder_id}")
            return response.data[0] if response.data else {"id": normalize_uuid(reminder_id)}

        except Exception as e:
            logger.error(f"Failed to cancel reminder {reminder_id}: {e}")
            raise

    @staticmethod
    def dispatch_due_reminders(now: datetime | None = None) -> dict[str, int]:
        """
        Send every pending reminder whose scheduled_for has passed.

        Each reminder is independent: a failure is logged and the rest are
        still sent. A reminder whose template is gone or inactive is
        cancelled so later polls skip it.

        Returns:
            {"sent": n, "failed": m, "cancelled": c}
        """
        now = now or utc_now()
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("scheduled_reminders")
                .select("*")
                .eq("status", ReminderStatus.PENDING.value)
                .lte("scheduled_for", now.isoformat())
                .order("scheduled_for")
                .execute()
            )
            due = response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch due reminders: {e}")
            raise

        service_types = SupabaseClient.fetch_service_types() if due else {}

        sent = failed = cancelled = 0
        for reminder in due:
            try:
                client_row = SupabaseClient.fetch_client(reminder["client_id"])
                if not client_row:
                    raise ValueError(f"client {reminder['client_id']} no longer exists")

                ReminderService.send_reminder(
                    client_email=client_row["email"],
                    client_name=client_row["name"],
                    client_id=reminder["client_id"],
                    template_id=reminder["template_id"],
                    custom_data={
                        **_client_placeholders(client_row, service_types, now),
                        **(reminder.get("reminder_data") or {}),
                    },
                    reminder_id=reminder["id"],
                )
                sent += 1

            except TemplateNotFoundError as e:
                logger.warning(f"Cancelling scheduled reminder {reminder['id']}: {e.message}")
                try:
                    ReminderService.cancel(reminder["id"])
                    cancelled += 1
                except Exception as cancel_error:
                    failed += 1
                    logger.error(f"Reminder {reminder['id']} left pending: {cancel_error}")

            except Exception as e:
                failed += 1
                logger.error(f"Failed to send scheduled reminder {reminder.get('id')}: {e}")

        logger.info(f"Dispatched due reminders: {sent} sent, {failed} failed, {cancelled} cancelled")
        return {"sent": sent, "failed": failed, "cancelled": cancelled}


def _client_placeholders(
    client_row: dict[str, Any],
    service_types: dict[str, dict[str, Any]],
    now: datetime,
) -> dict[str, Any]:
    """Placeholder values derived from the client row itself."""
    data: dict[str, Any] = {}
    due = parse_date(client_row.get("estimated_delivery_date"))
    if due:
        data["delivery_date"] = due.isoformat()
        data["days_remaining"] = str((due - now.date()).days)
    service = service_types.get(client_row.get("service_type_id"))
    if service:
        data["service_name"] = service.get("name")
    return data
