# =============================================================================
# core/services/digest_service.py - Daily Digest
# =============================================================================
# A once-a-day email to the admin summarizing:
#   - active clients due today / tomorrow / overdue
#   - files uploaded in the last 24 hours
#
# Sections are switched on/off by the single daily_digest_preferences row.
# The worker calls send_digest() on its beat schedule; admins can also
# trigger it by hand (force=True ignores the enabled flag).
# =============================================================================

import logging
from datetime import date, datetime, timedelta
from typing import Any

from lib.email_client import get_email_client
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now
from core import email_templates
from core.models.reminder import DigestPreferences
from app.config import settings

logger = logging.getLogger(__name__)


class DigestService:

    # -------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------

    @staticmethod
    def get_preferences() -> dict[str, Any]:
        """The stored preferences row, or defaults (everything on) if none."""
        db = SupabaseClient.get_client()

        try:
            response = db.table("daily_digest_preferences").select("*").limit(1).execute()

        except Exception as e:
            logger.error(f"Could not fetch digest preferences: {e}")
            raise

        rows = response.data or []
        if rows:
            return rows[0]
        return DigestPreferences().model_dump()

    @staticmethod
    def save_preferences(preferences: DigestPreferences, user_id: str | None = None) -> dict[str, Any]:
        """Insert or update the preferences row."""
        db = SupabaseClient.get_client()
        existing = DigestService.get_preferences()

        data = preferences.model_dump()
        if existing.get("id"):
            data["id"] = existing["id"]
        if user_id:
            data["user_id"] = user_id

        try:
            response = db.table("daily_digest_preferences").upsert(data).execute()
            logger.info("Saved daily digest preferences")
            return response.data[0] if response.data else data

        except Exception as e:
            logger.error(f"Failed to save digest preferences: {e}")
            raise

    # -------------------------------------------------------------------------
    # Building & sending
    # -------------------------------------------------------------------------

    @staticmethod
    def _active_clients_where(column_filter: str, value: str) -> list[dict[str, Any]]:
        db = SupabaseClient.get_client()
        query = (
            db.table("clients")
            .select("id, name, email, estimated_delivery_date, service_type_id")
            .eq("status", "active")
        )
        query = query.eq("estimated_delivery_date", value) if column_filter == "eq" else query.lt("estimated_delivery_date", value)
        return query.execute().data or []

    @staticmethod
    def build_digest(
        preferences: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Collect the digest sections.

        Returns:
            {"date", "due_today", "due_tomorrow", "overdue", "new_uploads"}
            where disabled sections are empty lists.
        """
        preferences = preferences or DigestService.get_preferences()
        now = now or utc_now()
        today: date = now.date()
        today_str = today.isoformat()
        tomorrow_str = (today + timedelta(days=1)).isoformat()

        try:
            due_today = (
                DigestService._active_clients_where("eq", today_str)
                if preferences.get("include_due_today", True) else []
            )
            due_tomorrow = (
                DigestService._active_clients_where("eq", tomorrow_str)
                if preferences.get("include_due_tomorrow", True) else []
            )
            overdue = (
                DigestService._active_clients_where("lt", today_str)
                if preferences.get("include_overdue", True) else []
            )

            new_uploads: list[dict[str, Any]] = []
            if preferences.get("include_new_uploads", True):
                response = (
                    SupabaseClient.get_client()
                    .table("client_history")
                    .select("id, client_id, action_type, description, created_at")
                    .eq("action_type", "file_uploaded")
                    .gte("created_at", (now - timedelta(days=1)).isoformat())
                    .execute()
                )
                new_uploads = response.data or []

        except Exception as e:
            logger.error(f"Failed to collect digest data: {e}")
            raise

        service_types = SupabaseClient.fetch_service_types()
        for row in due_today + due_tomorrow + overdue:
            row["service_name"] = (service_types.get(row.get("service_type_id")) or {}).get("name")

        if new_uploads:
            clients = {c["id"]: c for c in SupabaseClient.fetch_clients(columns="id, name, email")}
            for upload in new_uploads:
                upload["client_name"] = (clients.get(upload.get("client_id")) or {}).get("name")

        return {
            "date": today_str,
            "due_today": due_today,
            "due_tomorrow": due_tomorrow,
            "overdue": overdue,
            "new_uploads": new_uploads,
        }

    @staticmethod
    def send_digest(
        force: bool = False,
        recipient: str | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Build and email the digest.

        Args:
            force: Send even when the digest is disabled
            recipient: Override DIGEST_DEFAULT_RECIPIENT
            now: Reference time

        Returns:
            {"message": "Daily digest is disabled"} when skipped, otherwise
            {"success", "counts", "email_response"}
        """
        preferences = DigestService.get_preferences()
        if not preferences.get("enabled", True) and not force:
            logger.info("Daily digest is disabled, skipping")
            return {"message": "Daily digest is disabled"}

        digest = DigestService.build_digest(preferences, now=now)
        subject, html = email_templates.daily_digest(digest)
        to = recipient or settings.DIGEST_DEFAULT_RECIPIENT

        email_response = get_email_client().send(
            to=to,
            subject=subject,
            html=html,
            sender=settings.EMAIL_FROM_DIGEST,
        )

        counts = {
            "due_today": len(digest["due_today"]),
            "due_tomorrow": len(digest["due_tomorrow"]),
            "overdue": len(digest["overdue"]),
            "new_uploads": len(digest["new_uploads"]),
        }
        logger.info(f"Daily digest sent to {to}: {counts}")

        return {"success": True, "counts": counts, "email_response": email_response}
