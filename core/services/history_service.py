# =============================================================================
# core/services/history_service.py - Client Activity Log
# =============================================================================
# Every notable client event (onboarding, uploads, messages, approvals) is
# one row in client_history. Other services write through record(); the
# admin dashboard reads the recent-activity feed.
# =============================================================================

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, parse_datetime, utc_now

logger = logging.getLogger(__name__)

# Action types shown in the admin recent-activity feed
ACTIVITY_ACTION_TYPES = [
    "file_uploaded",
    "message_received",
    "client_created_via_upload",
    "onboarding_triggered",
]


class HistoryService:
    """Service for client_history rows."""

    @staticmethod
    def record(
        client_id: str | UUID,
        action_type: str,
        description: str,
        metadata: dict[str, Any] | None = None,
        created_by: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Insert one history row.

        Args:
            client_id: Client the event belongs to
            action_type: Machine-readable event name (see HistoryAction)
            description: Human-readable summary
            metadata: Optional JSON payload (intake answers, file info, ...)
            created_by: Auth user who caused the event

        Returns:
            Inserted row
        """
        client = SupabaseClient.get_client()

        data: dict[str, Any] = {
            "client_id": normalize_uuid(client_id),
            "action_type": action_type,
            "description": description,
        }
        if metadata is not None:
            data["metadata"] = metadata
        if created_by is not None:
            data["created_by"] = normalize_uuid(created_by)

        try:
            response = client.table("client_history").insert(data).execute()
            row = response.data[0] if response.data else data
            logger.info(f"Recorded {action_type} for client {data['client_id']}")
            return row

        except Exception as e:
            logger.error(f"Failed to record history ({action_type}): {e}")
            raise

    @staticmethod
    def list_for_client(client_id: str | UUID, limit: int = 50) -> list[dict[str, Any]]:
        """Latest history rows for one client, newest first."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("client_history")
                .select("*")
                .eq("client_id", normalize_uuid(client_id))
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch history for client {client_id}: {e}")
            raise

    @staticmethod
    def list_all_for_client(client_id: str | UUID) -> list[dict[str, Any]]:
        """Complete history of one client, newest first."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("client_history")
                .select("*")
                .eq("client_id", normalize_uuid(client_id))
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch history for client {client_id}: {e}")
            raise

    @staticmethod
    def list_all(action_types: list[str] | None = None) -> list[dict[str, Any]]:
        """Every history row (optionally filtered by action type), newest first."""
        client = SupabaseClient.get_client()

        try:
            query = client.table("client_history").select("*")
            if action_types:
                query = query.in_("action_type", action_types)
            response = query.order("created_at", desc=True).execute()
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch client history: {e}")
            raise

    @staticmethod
    def recent_activity(limit: int = 20) -> list[dict[str, Any]]:
        """
        Admin activity feed.

        Returns the newest `limit` rows of ACTIVITY_ACTION_TYPES, each with
        the client's name and an `unread` flag (created in the last 24h).
        """
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("client_history")
                .select("*")
                .in_("action_type", ACTIVITY_ACTION_TYPES)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            rows = response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch recent activity: {e}")
            raise

        names = {
            c["id"]: c.get("name")
            for c in SupabaseClient.fetch_clients(columns="id, name")
        }
        cutoff = utc_now() - timedelta(hours=24)

        activity = []
        for row in rows:
            created = parse_datetime(row.get("created_at"))
            activity.append({
                **row,
                "client_name": names.get(row.get("client_id"), "Unknown Client"),
                "unread": bool(created and created > cutoff),
            })
        return activity
