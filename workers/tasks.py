# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Thin wrappers around the services; each returns a JSON-serialisable dict
# so the result backend can store it.
#
# Tasks:
# - send_daily_digest: Email the admin digest (beat, daily)
# - dispatch_due_reminders: Send scheduled reminders that are due (beat)
# - send_delivery_notification: In-app + email + SMS for a delivery
# - send_message_notification: Email the other side of a message thread
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from core.services.digest_service import DigestService
from core.services.message_service import MessageService
from core.services.notification_service import NotificationService
from core.services.reminder_service import ReminderService

logger = logging.getLogger(__name__)


@shared_task(name="workers.tasks.send_daily_digest")
def send_daily_digest(force: bool = False, recipient: str | None = None) -> dict[str, Any]:
    """Build and email the daily digest (skipped when disabled, unless forced)."""
    logger.info("Sending daily digest")
    return DigestService.send_digest(force=force, recipient=recipient)


@shared_task(name="workers.tasks.dispatch_due_reminders")
def dispatch_due_reminders() -> dict[str, int]:
    """Send every pending scheduled reminder whose time has come."""
    result = ReminderService.dispatch_due_reminders()
    if result["sent"] or result["failed"]:
        logger.info(f"Reminders dispatched: {result['sent']} sent, {result['failed']} failed")
    return result


@shared_task(name="workers.tasks.send_delivery_notification")
def send_delivery_notification(
    delivery_id: str,
    client_id: str,
    document_title: str,
    notification_type: str = "delivery_ready",
) -> dict[str, Any]:
    """
    Notify a client that a document is ready (or a revision is done).

    Returns:
        Dict with success, email_sent, sms_sent and the notification row
    """
    logger.info(f"Sending {notification_type} notification for delivery {delivery_id}")
    return NotificationService.send_delivery_notification(
        delivery_id, client_id, document_title, notification_type
    )


@shared_task(name="workers.tasks.send_message_notification")
def send_message_notification(record: dict[str, Any]) -> dict[str, Any]:
    """
    Email the other party about a new message.

    Args:
        record: The stored messages row

    Returns:
        {"success": True, "sent": n, "failed": m}
    """
    logger.info(f"Sending notification for message {record.get('id')}")
    return MessageService.notify(record)
