# =============================================================================
# core/services/client_service.py - Client Business Logic
# =============================================================================
# Handles client CRUD operations and the admin actions around them
# (service change, rush toggle). Separates HTTP concerns from
# database/business logic.
#
# Creating a client also "onboards" it:
#   1. onboarding_triggered history row
#   2. the five progress steps
#   3. scheduled reminders for active client_created templates
# =============================================================================

import logging
from datetime import date, timedelta
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso, utc_today
from core.models.client import ClientStatus, PaymentStatus
from core.services.account_service import AccountService
from core.services.history_service import HistoryService
from core.services.progress_service import ProgressService
from core.services.reminder_service import ReminderService
from core.services.storage_service import DOCUMENTS_BUCKET, StorageService
from app.config import settings
from app.exceptions import (
    AccessDeniedError,
    ClientNotFoundError,
    MissingFieldsError,
    ServiceTypeNotFoundError,
)

logger = logging.getLogger(__name__)


def estimate_delivery_date(service_type: dict[str, Any] | None, today: date) -> date:
    """today + the service's default timeline (DEFAULT_TIMELINE_DAYS when unset)."""
    days = (service_type or {}).get("default_timeline_days") or settings.DEFAULT_TIMELINE_DAYS
    return today + timedelta(days=days)


class ClientService:
    """
    Service for client management operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def list_clients() -> list[dict[str, Any]]:
        """All clients, newest first, each with its `service_type` attached."""
        clients = SupabaseClient.fetch_clients()
        service_types = SupabaseClient.fetch_service_types()
        return [
            {**c, "service_type": service_types.get(c.get("service_type_id"))}
            for c in clients
        ]

    @staticmethod
    def get_client(client_id: str | UUID) -> dict[str, Any]:
        """
        Get a client by ID.

        Raises:
            ClientNotFoundError: If client doesn't exist
        """
        client_row = SupabaseClient.fetch_client(client_id)
        if not client_row:
            raise ClientNotFoundError(normalize_uuid(client_id))
        return client_row

    @staticmethod
    def check_access(client_id: str | UUID, user_id: str, role: str | None) -> dict[str, Any]:
        """
        Verify a caller may see a client's records.

        Admins see every client; anyone else only the client whose
        user_id is theirs.

        Returns:
            The client row

        Raises:
            ClientNotFoundError: If client doesn't exist
            AccessDeniedError: If the caller is neither admin nor the client
        """
        client_row = ClientService.get_client(client_id)
        if role != "admin" and str(client_row.get("user_id")) != str(user_id):
            raise AccessDeniedError(normalize_uuid(client_id))
        return client_row

    @staticmethod
    def create_client(
        name: str,
        email: str,
        service_type_id: str,
        phone: str | None = None,
        user_id: str | None = None,
        is_rush: bool = False,
        created_by: str | None = None,
        today: date | None = None,
    ) -> dict[str, Any]:
        """
        Create and onboard a client.

        Args:
            name: Client full name
            email: Client email
            service_type_id: Purchased service type
            phone: Optional phone (enables SMS notifications)
            user_id: Auth user linked for portal access
            is_rush: Start as a rush order
            created_by: Admin creating the client
            today: Reference date for the delivery estimate

        Returns:
            Created client dict

        Raises:
            MissingFieldsError: If name, email or service type is blank
            ServiceTypeNotFoundError: If the service type doesn't exist
        """
        missing = [
            field for field, value in
            (("name", name), ("email", email), ("service_type_id", service_type_id))
            if not value or not str(value).strip()
        ]
        if missing:
            raise MissingFieldsError("Please fill in all required fields", missing)

        service_type = SupabaseClient.fetch_service_type(service_type_id)
        if not service_type:
            raise ServiceTypeNotFoundError(service_type_id)

        delivery_date = estimate_delivery_date(service_type, today or utc_today())

        data: dict[str, Any] = {
            "name": name.strip(),
            "email": email.strip(),
            "phone": phone,
            "service_type_id": service_type_id,
            "status": ClientStatus.ACTIVE.value,
            "payment_status": PaymentStatus.PENDING.value,
            "estimated_delivery_date": delivery_date.isoformat(),
            "is_rush": is_rush,
        }
        if user_id:
            data["user_id"] = user_id

        db = SupabaseClient.get_client()

        try:
            response = db.table("clients").insert(data).execute()
            if not response.data:
                raise Exception("Insert returned no data")
            client_row = response.data[0]
            logger.info(f"Created client: {client_row['id']} ({client_row['email']})")

        except Exception as e:
            logger.error(f"Failed to create client: {e}")
            raise

        ClientService._trigger_onboarding(client_row["id"], service_type_id, created_by)
        ProgressService.seed_steps(client_row["id"])
        ReminderService.schedule_for_trigger(client_row["id"], "client_created")

        return client_row

    @staticmethod
    def _trigger_onboarding(client_id: str, service_type_id: str, created_by: str | None) -> None:
        HistoryService.record(
            client_id,
            "onboarding_triggered",
            "Automatic onboarding initiated based on service type",
            metadata={"service_type_id": service_type_id},
            created_by=created_by,
        )

    @staticmethod
    def update_client(client_id: str | UUID, updates: dict[str, Any]) -> dict[str, Any]:
        """
        Update client fields. Only provided fields are written.

        Raises:
            ClientNotFoundError: If client doesn't exist
        """
        client_row = ClientService.get_client(client_id)
        if not updates:
            return client_row

        data = {
            key: (value.isoformat() if isinstance(value, date) else value)
            for key, value in updates.items()
        }
        data["updated_at"] = utc_now_iso()

        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("clients")
                .update(data)
                .eq("id", normalize_uuid(client_id))
                .execute()
            )
            logger.info(f"Updated client: {client_id} ({', '.join(updates)})")
            return response.data[0] if response.data else {**client_row, **data}

        except Exception as e:
            logger.error(f"Failed to update client {client_id}: {e}")
            raise

    @staticmethod
    def change_service(
        client_id: str | UUID,
        service_type_id: str,
        changed_by: str | None = None,
        today: date | None = None,
    ) -> dict[str, Any]:
        """
        Move a client to another service and re-onboard them.

        The delivery date is recomputed from today using the new service's
        timeline.
        """
        client_row = ClientService.get_client(client_id)
        service_type = SupabaseClient.fetch_service_type(service_type_id)
        if not service_type:
            raise ServiceTypeNotFoundError(service_type_id)

        delivery_date = estimate_delivery_date(service_type, today or utc_today())
        updated = ClientService.update_client(client_id, {
            "service_type_id": service_type_id,
            "estimated_delivery_date": delivery_date,
        })

        ClientService._trigger_onboarding(normalize_uuid(client_id), service_type_id, changed_by)
        HistoryService.record(
            client_id,
            "service_changed",
            f"Service type changed to {service_type.get('name')}",
            metadata={
                "old_service_type_id": client_row.get("service_type_id"),
                "new_service_type_id": service_type_id,
            },
            created_by=changed_by,
        )
        return updated

    @staticmethod
    def set_rush(
        client_id: str | UUID,
        is_rush: bool,
        rush_deadline: date | None = None,
        changed_by: str | None = None,
    ) -> dict[str, Any]:
        """Turn rush delivery on (with optional deadline) or off."""
        updated = ClientService.update_client(client_id, {
            "is_rush": is_rush,
            "rush_deadline": rush_deadline if is_rush else None,
        })

        if is_rush:
            description = "Rush delivery enabled"
            if rush_deadline:
                description += f" (deadline {rush_deadline.isoformat()})"
        else:
            description = "Rush delivery disabled"

        HistoryService.record(
            client_id,
            "rush_enabled" if is_rush else "rush_disabled",
            description,
            created_by=changed_by,
        )
        return updated

    @staticmethod
    def delete_client(client_id: str | UUID, delete_auth_user: bool = False) -> None:
        """
        Delete a client row, optionally removing the linked auth user too.

        The client's uploaded documents are removed from storage.
        """
        client_row = ClientService.get_client(client_id)
        db = SupabaseClient.get_client()

        try:
            db.table("clients").delete().eq("id", normalize_uuid(client_id)).execute()
            logger.info(f"Deleted client: {client_id}")

        except Exception as e:
            logger.error(f"Failed to delete client {client_id}: {e}")
            raise

        StorageService.delete_folder(DOCUMENTS_BUCKET, normalize_uuid(client_id))

        if delete_auth_user and client_row.get("user_id"):
            AccountService.delete_auth_user(client_row["user_id"])

    @staticmethod
    def get_history(client_id: str | UUID) -> list[dict[str, Any]]:
        """Latest 50 history entries for one client."""
        ClientService.get_client(client_id)
        return HistoryService.list_for_client(client_id, limit=50)
