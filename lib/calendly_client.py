# =============================================================================
# lib/calendly_client.py - Appointment Lookup (Calendly)
# =============================================================================
# Reads upcoming scheduled events for the account that owns the access
# token and shapes them into a flat appointment list:
#
#   1. GET /users/me                -> user URI
#   2. GET /scheduled_events        -> active events in the lookahead window
#   3. GET /event_types             -> friendly event names (optional)
#   4. GET /scheduled_events/{id}/invitees for each event
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from app.config import settings
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

CALENDLY_API_URL = "https://api.calendly.com"


class CalendlyError(ApplicationError):
    """Raised when Calendly authentication or event listing fails."""

    def __init__(self, message: str, status_code: int = 502, **kwargs):
        super().__init__(message, code="CALENDLY_ERROR", **kwargs)
        self.status_code = status_code


class CalendlyClient:
    """Read-only Calendly API client."""

    def __init__(self, access_token: str, http_client: httpx.Client | None = None):
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        self._http = http_client or httpx.Client(base_url=CALENDLY_API_URL, timeout=15)

    def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        try:
            return self._http.get(path, params=params, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error(f"Calendly request to {path} failed: {e}")
            raise CalendlyError(f"Calendly unreachable: {e}")

    def get_user_uri(self) -> str:
        response = self._get("/users/me")
        if response.status_code >= 400:
            logger.error(
                f"Failed to fetch Calendly user profile: {response.status_code} {response.text}"
            )
            raise CalendlyError(
                "Failed to authenticate with Calendly API",
                status_code=response.status_code,
            )
        return response.json()["resource"]["uri"]

    def list_upcoming_appointments(
        self,
        days: int | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """
        List active appointments starting within the next `days` days.

        Args:
            days: Lookahead window (default CALENDLY_LOOKAHEAD_DAYS)
            now: Window start, defaults to the current UTC time

        Returns:
            {"appointments": [...], "total": <count reported by Calendly>}

        Raises:
            CalendlyError: If authentication or the event listing fails.
                Event-type and invitee lookups degrade to empty values.
        """
        days = days or settings.CALENDLY_LOOKAHEAD_DAYS
        start = now or datetime.now(timezone.utc)
        end = start + timedelta(days=days)

        user_uri = self.get_user_uri()

        events_response = self._get(
            "/scheduled_events",
            params={
                "user": user_uri,
                "min_start_time": start.isoformat(),
                "max_start_time": end.isoformat(),
                "status": "active",
                "sort": "start_time:asc",
            },
        )
        if events_response.status_code >= 400:
            logger.error(
                f"Failed to fetch Calendly events: {events_response.status_code} {events_response.text}"
            )
            raise CalendlyError(
                "Failed to fetch events from Calendly",
                status_code=events_response.status_code,
            )
        events_data = events_response.json()
        events = events_data.get("collection", [])
        logger.info(f"Found {len(events)} Calendly events")

        types_response = self._get("/event_types", params={"user": user_uri})
        event_types = {}
        if types_response.status_code < 400:
            event_types = {et["uri"]: et for et in types_response.json().get("collection", [])}

        appointments = [self._shape_event(event, event_types) for event in events]

        return {
            "appointments": appointments,
            "total": events_data.get("pagination", {}).get("count", len(appointments)),
        }

    def _shape_event(self, event: dict[str, Any], event_types: dict[str, dict]) -> dict[str, Any]:
        event_id = event["uri"].rstrip("/").split("/")[-1]

        invitees: list[dict[str, Any]] = []
        invitees_response = self._get(f"/scheduled_events/{event_id}/invitees")
        if invitees_response.status_code < 400:
            invitees = invitees_response.json().get("collection", []) or []

        event_type = event_types.get(event.get("event_type"))
        type_name = event_type.get("name") if event_type else None

        return {
            "id": event_id,
            "name": type_name or event.get("name") or "Meeting",
            "status": event.get("status"),
            "start_time": event.get("start_time"),
            "end_time": event.get("end_time"),
            "event_type": type_name or "Meeting",
            "location": event.get("location") or {"type": "online"},
            "invitees": [
                {
                    "name": invitee.get("name"),
                    "email": invitee.get("email"),
                    "status": invitee.get("status"),
                }
                for invitee in invitees
            ],
        }


def get_calendly_client() -> CalendlyClient | None:
    """Build a CalendlyClient from settings, or None when no token is set."""
    if not settings.calendly_configured:
        return None
    return CalendlyClient(settings.CALENDLY_ACCESS_TOKEN)
