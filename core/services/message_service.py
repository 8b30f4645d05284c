# =============================================================================
# core/services/message_service.py - Client Messaging
# =============================================================================
# One message thread per client, between the client and the admin team.
#
# Flow of a sent message:
# 1. Row inserted into messages
# 2. Client-sent messages also log message_received history
# 3. Caller publishes it to the realtime feed and queues the email
#    notification (see app/routers/messages.py and workers/tasks.py)
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.email_client import get_email_client
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso
from core import email_templates
from core.models.message import SenderType
from core.services.history_service import HistoryService
from app.config import settings
from app.exceptions import ClientNotFoundError, MissingFieldsError

logger = logging.getLogger(__name__)


class MessageService:

    @staticmethod
    def list_messages(client_id: str | UUID) -> list[dict[str, Any]]:
        """A client's thread, oldest first."""
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("messages")
                .select("*")
                .eq("client_id", normalize_uuid(client_id))
                .order("created_at")
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch messages for client {client_id}: {e}")
            raise

    @staticmethod
    def send_message(
        client_id: str | UUID,
        sender_id: str,
        sender_type: SenderType | str,
        message: str,
        message_type: str = "text",
    ) -> dict[str, Any]:
        """
        Post a message to a client's thread.

        Raises:
            MissingFieldsError: If the text is blank
        """
        if not message or not message.strip():
            raise MissingFieldsError("Message cannot be empty", ["message"])

        sender_value = sender_type.value if isinstance(sender_type, SenderType) else sender_type
        client_id_str = normalize_uuid(client_id)

        data = {
            "client_id": client_id_str,
            "sender_id": sender_id,
            "sender_type": sender_value,
            "message": message.strip(),
            "message_type": message_type,
        }

        db = SupabaseClient.get_client()

        try:
            response = db.table("messages").insert(data).execute()
            row = response.data[0] if response.data else data
            logger.info(f"Message from {sender_value} in thread {client_id_str}")

        except Exception as e:
            logger.error(f"Failed to send message: {e}")
            raise

        if sender_value == SenderType.CLIENT.value:
            HistoryService.record(
                client_id_str,
                "message_received",
                f"New message: {email_templates.message_preview(data['message'], 50)}",
                metadata={"message_id": row.get("id")},
                created_by=sender_id,
            )

        return row

    @staticmethod
    def mark_read(client_id: str | UUID, reader_type: SenderType | str) -> int:
        """
        Mark the other party's unread messages as read.

        Returns:
            Number of messages marked
        """
        reader_value = reader_type.value if isinstance(reader_type, SenderType) else reader_type
        other = SenderType.CLIENT.value if reader_value == SenderType.ADMIN.value else SenderType.ADMIN.value

        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("messages")
                .update({"read_at": utc_now_iso()})
                .eq("client_id", normalize_uuid(client_id))
                .eq("sender_type", other)
                .is_("read_at", "null")
                .execute()
            )
            return len(response.data or [])

        except Exception as e:
            logger.error(f"Failed to mark messages read for client {client_id}: {e}")
            raise

    @staticmethod
    def notify(record: dict[str, Any]) -> dict[str, Any]:
        """
        Email the other party about a new message.

        admin -> the client's email; client -> every admin. Each email is
        sent independently; one failure doesn't stop the rest.

        Returns:
            {"success": True, "sent": n, "failed": m}
        """
        client_row = SupabaseClient.fetch_client(record["client_id"])
        if not client_row:
            raise ClientNotFoundError(record["client_id"])

        sender = SupabaseClient.fetch_profile(record["sender_id"]) if record.get("sender_id") else None
        is_from_admin = record.get("sender_type") == SenderType.ADMIN.value
        sender_name = (sender or {}).get("display_name") or ("Admin" if is_from_admin else client_row.get("name"))
        sent_at = record.get("created_at") or utc_now_iso()

        emails: list[tuple[str, str, str]] = []
        if is_from_admin and client_row.get("email"):
            subject, html = email_templates.message_to_client(
                client_row.get("name") or "", sender_name, record["message"], sent_at
            )
            emails.append((client_row["email"], subject, html))
        elif not is_from_admin:
            for admin in SupabaseClient.fetch_admin_contacts():
                subject, html = email_templates.message_to_admin(
                    admin["name"], client_row, record["message"], sent_at
                )
                emails.append((admin["email"], subject, html))

        sent = failed = 0
        if emails:
            email_client = get_email_client()
            for to, subject, html in emails:
                try:
                    email_client.send(to=to, subject=subject, html=html, sender=settings.EMAIL_FROM_NOTIFICATIONS)
                    sent += 1
                except Exception as e:
                    failed += 1
                    logger.error(f"Failed to send message notification to {to}: {e}")

        logger.info(f"Message notification for {record.get('id')}: {sent} sent, {failed} failed")
        return {"success": True, "sent": sent, "failed": failed}
