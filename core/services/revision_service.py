# =============================================================================
# core/services/revision_service.py - Revision Request Workflow (Admin)
# =============================================================================
# Clients create revision requests through DeliveryService.request_revision.
# Admins work them here: pending -> in_progress -> completed. Completing a
# request puts the delivery back to delivered and tells the client.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso
from core.models.delivery import DeliveryStatus, RevisionStatus
from core.models.message import NotificationType
from core.services.delivery_service import DeliveryService
from core.services.notification_service import NotificationService
from app.exceptions import InvalidStatusError, RevisionRequestNotFoundError

logger = logging.getLogger(__name__)


class RevisionService:

    @staticmethod
    def list_all() -> list[dict[str, Any]]:
        """Every revision request, newest first, with client name and document title."""
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("revision_requests")
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
            revisions = response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch revision requests: {e}")
            raise

        if not revisions:
            return []

        clients = {c["id"]: c.get("name") for c in SupabaseClient.fetch_clients(columns="id, name")}
        delivery_ids = list({r["delivery_id"] for r in revisions if r.get("delivery_id")})
        titles: dict[str, str] = {}
        if delivery_ids:
            try:
                response = (
                    db.table("deliveries")
                    .select("id, document_title")
                    .in_("id", delivery_ids)
                    .execute()
                )
                titles = {d["id"]: d.get("document_title") for d in (response.data or [])}
            except Exception as e:
                logger.error(f"Failed to fetch delivery titles: {e}")
                raise

        return [
            {
                **r,
                "client_name": clients.get(r.get("client_id")),
                "document_title": titles.get(r.get("delivery_id")),
            }
            for r in revisions
        ]

    @staticmethod
    def list_for_client(client_id: str | UUID) -> list[dict[str, Any]]:
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("revision_requests")
                .select("*")
                .eq("client_id", normalize_uuid(client_id))
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch revision requests for client {client_id}: {e}")
            raise

    @staticmethod
    def update_status(revision_id: str | UUID, status: RevisionStatus | str) -> dict[str, Any]:
        """
        Move a revision request to a new status.

        Completing it sets the delivery back to delivered and sends a
        revision_complete notification.

        Raises:
            InvalidStatusError: Unknown status
            RevisionRequestNotFoundError: Unknown revision request
        """
        status_value = status.value if isinstance(status, RevisionStatus) else status
        allowed = [s.value for s in RevisionStatus]
        if status_value not in allowed:
            raise InvalidStatusError(status_value, allowed)

        revision = SupabaseClient._fetch_one("revision_requests", "id", revision_id)
        if not revision:
            raise RevisionRequestNotFoundError(normalize_uuid(revision_id))

        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("revision_requests")
                .update({"status": status_value, "updated_at": utc_now_iso()})
                .eq("id", normalize_uuid(revision_id))
                .execute()
            )
            updated = response.data[0] if response.data else {**revision, "status": status_value}
            logger.info(f"Revision request {revision_id} -> {status_value}")

        except Exception as e:
            logger.error(f"Failed to update revision request {revision_id}: {e}")
            raise

        if status_value == RevisionStatus.COMPLETED.value and revision.get("delivery_id"):
            delivery = DeliveryService.set_status(revision["delivery_id"], DeliveryStatus.DELIVERED)
            NotificationService.send_delivery_notification(
                delivery_id=revision["delivery_id"],
                client_id=revision["client_id"],
                document_title=delivery.get("document_title") or "document",
                notification_type=NotificationType.REVISION_COMPLETE,
            )

        return updated
