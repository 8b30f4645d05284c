# =============================================================================
# core/services/delivery_service.py - Delivery Business Logic
# =============================================================================
# Handles deliveries (finished documents) and everything a client does with
# them: approve, request a revision, comment.
#
# Status changes are plain writes; the only check is that the target
# status is a known value.
# =============================================================================

import logging
import os
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now, utc_now_iso
from core.models.delivery import DeliveryStatus, RevisionReason, RevisionStatus
from core.services.history_service import HistoryService
from core.services.storage_service import (
    ATTACHMENTS_BUCKET,
    RESUMES_BUCKET,
    StorageService,
)
from app.config import settings
from app.exceptions import (
    AttachmentTooLargeError,
    DeliveryNotFoundError,
    InvalidStatusError,
    MissingFieldsError,
)

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """A file received from a multipart request."""
    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lstrip(".").lower()


def timestamp_ms() -> int:
    return int(utc_now().timestamp() * 1000)


class DeliveryService:
    """Service for deliveries, revision requests and delivery comments."""

    # -------------------------------------------------------------------------
    # Deliveries
    # -------------------------------------------------------------------------

    @staticmethod
    def get_delivery(delivery_id: str | UUID) -> dict[str, Any]:
        """
        Raises:
            DeliveryNotFoundError: If delivery doesn't exist
        """
        delivery = SupabaseClient.fetch_delivery(delivery_id)
        if not delivery:
            raise DeliveryNotFoundError(normalize_uuid(delivery_id))
        return delivery

    @staticmethod
    def list_all() -> list[dict[str, Any]]:
        """Every delivery (admin view), newest delivered first, with client names."""
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("deliveries")
                .select("*")
                .order("delivered_at", desc=True)
                .execute()
            )
            deliveries = response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch deliveries: {e}")
            raise

        clients = {c["id"]: c for c in SupabaseClient.fetch_clients(columns="id, name, email")}
        return [
            {
                **d,
                "client_name": (clients.get(d.get("client_id")) or {}).get("name"),
                "client_email": (clients.get(d.get("client_id")) or {}).get("email"),
            }
            for d in deliveries
        ]

    @staticmethod
    def list_for_client(client_id: str | UUID) -> list[dict[str, Any]]:
        """A client's deliveries, newest created first."""
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("deliveries")
                .select("*")
                .eq("client_id", normalize_uuid(client_id))
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch deliveries for client {client_id}: {e}")
            raise

    @staticmethod
    def create_delivery(
        client_id: str | None,
        document_title: str | None,
        file: UploadedFile | None,
        document_type: str | None = None,
    ) -> dict[str, Any]:
        """
        Upload a document and deliver it to a client.

        The file goes to the resumes bucket under deliveries/<ms>.<ext> and
        the delivery row starts as delivered.

        Raises:
            MissingFieldsError: If client, title or file is missing
        """
        missing = []
        if not client_id:
            missing.append("client_id")
        if not document_title or not document_title.strip():
            missing.append("document_title")
        if file is None:
            missing.append("file")
        if missing:
            raise MissingFieldsError("Please fill in all required fields and select a file.", missing)

        path = f"deliveries/{timestamp_ms()}.{file.extension or 'bin'}"
        StorageService.upload_bytes(RESUMES_BUCKET, path, file.content, file.content_type)
        file_url = StorageService.get_public_url(RESUMES_BUCKET, path)

        data = {
            "client_id": client_id,
            "document_type": document_type or "document",
            "document_title": document_title.strip(),
            "file_path": path,
            "file_url": file_url,
            "file_size": file.size,
            "mime_type": file.content_type,
            "status": DeliveryStatus.DELIVERED.value,
            "delivered_at": utc_now_iso(),
        }

        db = SupabaseClient.get_client()

        try:
            response = db.table("deliveries").insert(data).execute()
            delivery = response.data[0] if response.data else data
            logger.info(f"Delivered {data['document_title']!r} to client {client_id}")
            return delivery

        except Exception as e:
            logger.error(f"Failed to create delivery: {e}")
            raise

    @staticmethod
    def set_status(delivery_id: str | UUID, status: DeliveryStatus | str) -> dict[str, Any]:
        """
        Write a delivery status.

        Raises:
            InvalidStatusError: If status isn't a known delivery status
            DeliveryNotFoundError: If delivery doesn't exist
        """
        status_value = status.value if isinstance(status, DeliveryStatus) else status
        allowed = [s.value for s in DeliveryStatus]
        if status_value not in allowed:
            raise InvalidStatusError(status_value, allowed)

        delivery = DeliveryService.get_delivery(delivery_id)
        data: dict[str, Any] = {"status": status_value, "updated_at": utc_now_iso()}
        if status_value == DeliveryStatus.APPROVED.value:
            data["approved_at"] = data["updated_at"]
        elif status_value == DeliveryStatus.DELIVERED.value:
            data["delivered_at"] = data["updated_at"]

        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("deliveries")
                .update(data)
                .eq("id", normalize_uuid(delivery_id))
                .execute()
            )
            logger.info(f"Delivery {delivery_id} -> {status_value}")
            return response.data[0] if response.data else {**delivery, **data}

        except Exception as e:
            logger.error(f"Failed to update delivery {delivery_id}: {e}")
            raise

    @staticmethod
    def approve(delivery_id: str | UUID, approved_by: str | None = None) -> dict[str, Any]:
        """Client approves a document; recorded as delivery_approved."""
        delivery = DeliveryService.set_status(delivery_id, DeliveryStatus.APPROVED)
        HistoryService.record(
            delivery["client_id"],
            "delivery_approved",
            f"Client approved {delivery.get('document_title') or 'document'}",
            metadata={"delivery_id": normalize_uuid(delivery_id)},
            created_by=approved_by,
        )
        return delivery

    @staticmethod
    def checklist(client_id: str | UUID) -> dict[str, Any]:
        """
        Portal summary of a client's documents.

        Returns:
            pending_review: deliveries awaiting the client (status delivered)
            approved: approved deliveries
            resume: first delivered resume, or None
            deliveries: all deliveries, oldest first
        """
        deliveries = list(reversed(DeliveryService.list_for_client(client_id)))

        resume = next(
            (
                d for d in deliveries
                if d.get("document_type") == "resume"
                and d.get("status") in (DeliveryStatus.DELIVERED.value, DeliveryStatus.APPROVED.value)
            ),
            None,
        )
        return {
            "pending_review": sum(1 for d in deliveries if d.get("status") == DeliveryStatus.DELIVERED.value),
            "approved": sum(1 for d in deliveries if d.get("status") == DeliveryStatus.APPROVED.value),
            "resume": resume,
            "deliveries": deliveries,
        }

    # -------------------------------------------------------------------------
    # Revision requests
    # -------------------------------------------------------------------------

    @staticmethod
    def request_revision(
        delivery_id: str | UUID,
        reasons: list[str],
        description: str | None,
        custom_reason: str | None = None,
        attachments: list[UploadedFile] | None = None,
    ) -> dict[str, Any]:
        """
        Client asks for changes to a delivered document.

        Args:
            delivery_id: Delivery being revised
            reasons: One or more RevisionReason values
            description: What should change (required, non-blank)
            custom_reason: Free text, kept only when reasons include "other"
            attachments: Supporting files (each <= MAX_ATTACHMENT_SIZE_MB)

        Returns:
            The inserted revision request row

        Raises:
            MissingFieldsError: No reason, or blank description
            AttachmentTooLargeError: An attachment exceeds the size limit
        """
        if not reasons:
            raise MissingFieldsError(
                "Please select at least one reason for your revision request.",
                ["reasons"],
            )
        if not description or not description.strip():
            raise MissingFieldsError(
                "Please describe what changes you'd like us to make.",
                ["description"],
            )

        attachments = attachments or []
        for attachment in attachments:
            if attachment.size > settings.max_attachment_size_bytes:
                raise AttachmentTooLargeError(
                    attachment.filename,
                    attachment.size / (1024 * 1024),
                    settings.MAX_ATTACHMENT_SIZE_MB,
                )

        delivery = DeliveryService.get_delivery(delivery_id)
        delivery_id_str = normalize_uuid(delivery_id)

        attachment_urls = []
        for attachment in attachments:
            path = f"revisions/revision-{delivery_id_str}-{timestamp_ms()}.{attachment.extension or 'bin'}"
            StorageService.upload_bytes(ATTACHMENTS_BUCKET, path, attachment.content, attachment.content_type)
            attachment_urls.append(StorageService.get_public_url(ATTACHMENTS_BUCKET, path))

        data = {
            "delivery_id": delivery_id_str,
            "client_id": delivery["client_id"],
            "reasons": reasons,
            "custom_reason": custom_reason if RevisionReason.OTHER.value in reasons else None,
            "description": description.strip(),
            "attachment_urls": attachment_urls,
            "status": RevisionStatus.PENDING.value,
        }

        db = SupabaseClient.get_client()

        try:
            response = db.table("revision_requests").insert(data).execute()
            revision = response.data[0] if response.data else data

        except Exception as e:
            logger.error(f"Error submitting revision request: {e}")
            raise

        DeliveryService.set_status(delivery_id_str, DeliveryStatus.REVISION_REQUESTED)
        logger.info(f"Revision requested for delivery {delivery_id_str} ({', '.join(reasons)})")
        return revision

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    @staticmethod
    def list_comments(delivery_id: str | UUID) -> list[dict[str, Any]]:
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("delivery_comments")
                .select("*")
                .eq("delivery_id", normalize_uuid(delivery_id))
                .order("created_at")
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch comments for delivery {delivery_id}: {e}")
            raise

    @staticmethod
    def add_comment(
        delivery_id: str | UUID,
        user_id: str,
        content: str,
        is_admin: bool,
    ) -> dict[str, Any]:
        """
        Raises:
            MissingFieldsError: If content is blank
        """
        if not content or not content.strip():
            raise MissingFieldsError("Comment cannot be empty", ["content"])

        delivery = DeliveryService.get_delivery(delivery_id)
        data = {
            "delivery_id": normalize_uuid(delivery_id),
            "client_id": delivery["client_id"],
            "user_id": user_id,
            "content": content.strip(),
            "is_admin": is_admin,
        }

        db = SupabaseClient.get_client()

        try:
            response = db.table("delivery_comments").insert(data).execute()
            return response.data[0] if response.data else data

        except Exception as e:
            logger.error(f"Failed to add comment to delivery {delivery_id}: {e}")
            raise
