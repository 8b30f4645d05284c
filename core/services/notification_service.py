# =============================================================================
# core/services/notification_service.py - In-App, Email & SMS Notifications
# =============================================================================
# Delivery notifications fan out to three channels:
#
#   1. notifications row (in-app)   - required, failure propagates
#   2. email via Resend             - only when configured, best-effort
#   3. SMS via Twilio               - only when configured and the client
#                                     has a phone number, best-effort
#
# Also covers listing / marking notifications read and the notification
# rule rows admins can toggle (no rule evaluation happens anywhere).
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.email_client import get_email_client
from lib.sms_client import get_sms_client
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso
from core import email_templates
from core.models.message import NotificationType
from app.config import settings
from app.exceptions import ClientNotFoundError, InvalidStatusError

logger = logging.getLogger(__name__)


def notification_content(notification_type: str, document_title: str) -> tuple[str, str]:
    """(title, message) of the in-app notification."""
    if notification_type == NotificationType.DELIVERY_READY.value:
        return (
            f"Your {document_title} is ready!",
            f"Your new {document_title.lower()} is ready for review. "
            "Click to view, approve, or request revisions.",
        )
    return (
        f"Your {document_title} revisions are complete!",
        f"Your {document_title.lower()} has been updated based on your feedback. "
        "Please review the changes.",
    )


class NotificationService:
    """Service for notifications and notification rules."""

    @staticmethod
    def send_delivery_notification(
        delivery_id: str | UUID,
        client_id: str | UUID,
        document_title: str,
        notification_type: NotificationType | str,
    ) -> dict[str, Any]:
        """
        Notify a client that a document is ready or a revision is done.

        Returns:
            {"success": True, "notification": row, "email_sent": bool, "sms_sent": bool}

        Raises:
            ClientNotFoundError: If the client doesn't exist
            InvalidStatusError: For an unknown notification type
        """
        type_value = (
            notification_type.value
            if isinstance(notification_type, NotificationType)
            else notification_type
        )
        allowed = [t.value for t in NotificationType]
        if type_value not in allowed:
            raise InvalidStatusError(type_value, allowed)

        client_row = SupabaseClient.fetch_client(client_id)
        if not client_row:
            raise ClientNotFoundError(normalize_uuid(client_id))

        portal_url = f"{settings.PORTAL_URL}/client-portal"
        title, message = notification_content(type_value, document_title)

        notification = {
            "user_id": client_row.get("user_id"),
            "client_id": normalize_uuid(client_id),
            "delivery_id": normalize_uuid(delivery_id),
            "type": type_value,
            "title": title,
            "message": message,
            "metadata": {
                "document_title": document_title,
                "client_name": client_row.get("name"),
                "delivery_url": portal_url,
            },
        }

        db = SupabaseClient.get_client()

        try:
            response = db.table("notifications").insert(notification).execute()
            row = response.data[0] if response.data else notification
            logger.info(f"In-app notification created for client {notification['client_id']}")

        except Exception as e:
            logger.error(f"Error creating notification: {e}")
            raise

        email_sent = NotificationService._email_client(
            client_row, type_value, document_title, portal_url
        )
        sms_sent = NotificationService._sms_client(client_row, type_value, document_title)

        return {
            "success": True,
            "message": "Notification sent successfully",
            "notification": row,
            "email_sent": email_sent,
            "sms_sent": sms_sent,
        }

    @staticmethod
    def _email_client(
        client_row: dict[str, Any],
        notification_type: str,
        document_title: str,
        portal_url: str,
    ) -> bool:
        if not settings.email_configured:
            logger.info("Resend API key not configured, skipping email")
            return False

        subject, html = email_templates.delivery_notification(
            notification_type, client_row.get("name") or "", document_title, portal_url
        )
        try:
            get_email_client().send(to=client_row["email"], subject=subject, html=html)
            return True
        except Exception as e:
            logger.error(f"Error sending email (continuing anyway): {e}")
            return False

    @staticmethod
    def _sms_client(client_row: dict[str, Any], notification_type: str, document_title: str) -> bool:
        sms = get_sms_client()
        if sms is None or not client_row.get("phone"):
            logger.info("Twilio not configured or client has no phone number, skipping SMS")
            return False

        body = email_templates.delivery_sms(notification_type, client_row.get("name") or "", document_title)
        try:
            sms.send(client_row["phone"], body)
            return True
        except Exception as e:
            logger.error(f"Error sending SMS (continuing anyway): {e}")
            return False

    # -------------------------------------------------------------------------
    # In-app notifications
    # -------------------------------------------------------------------------

    @staticmethod
    def list_for_user(user_id: str | UUID, unread_only: bool = False, limit: int = 50) -> list[dict[str, Any]]:
        db = SupabaseClient.get_client()

        try:
            query = db.table("notifications").select("*").eq("user_id", normalize_uuid(user_id))
            if unread_only:
                query = query.is_("read_at", "null")
            response = query.order("created_at", desc=True).limit(limit).execute()
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch notifications for user {user_id}: {e}")
            raise

    @staticmethod
    def mark_read(notification_id: str | UUID, user_id: str | UUID) -> dict[str, Any] | None:
        """Mark one of the user's notifications read. None if it isn't theirs."""
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("notifications")
                .update({"read_at": utc_now_iso()})
                .eq("id", normalize_uuid(notification_id))
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
            return response.data[0] if response.data else None

        except Exception as e:
            logger.error(f"Failed to mark notification {notification_id} read: {e}")
            raise

    # -------------------------------------------------------------------------
    # Notification rules
    # -------------------------------------------------------------------------

    @staticmethod
    def list_rules(user_id: str | UUID | None = None) -> list[dict[str, Any]]:
        db = SupabaseClient.get_client()

        try:
            query = db.table("notification_rules").select("*")
            if user_id:
                query = query.eq("user_id", normalize_uuid(user_id))
            response = query.order("priority", desc=True).execute()
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch notification rules: {e}")
            raise

    @staticmethod
    def update_rule(rule_id: str | UUID, updates: dict[str, Any]) -> dict[str, Any] | None:
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("notification_rules")
                .update(updates)
                .eq("id", normalize_uuid(rule_id))
                .execute()
            )
            logger.info(f"Updated notification rule {rule_id}: {updates}")
            return response.data[0] if response.data else None

        except Exception as e:
            logger.error(f"Failed to update notification rule {rule_id}: {e}")
            raise

    @staticmethod
    def toggle_rule(rule_id: str | UUID) -> dict[str, Any] | None:
        """Flip is_enabled. None if the rule doesn't exist."""
        rule = SupabaseClient._fetch_one("notification_rules", "id", rule_id)
        if not rule:
            return None
        return NotificationService.update_rule(rule_id, {"is_enabled": not rule.get("is_enabled")})
