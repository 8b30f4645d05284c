# =============================================================================
# core/services/command_center.py - Admin Command Center
# =============================================================================
# Builds the admin overview: every client with its urgency, next action,
# file count and last activity, plus filters and summary counts.
#
# The computations are pure functions over client and history rows so they
# can be tested without a database:
#
#   days_until_due()  -> calendar days from today to the due date
#   classify_urgency() -> rush | overdue | due-today | due-tomorrow | on-track
#   next_action()     -> first matching suggestion
#   filter_rows()     -> AND of every active filter
# =============================================================================

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Any

from core.models.client import (
    CommandCenterResponse,
    CommandCenterRow,
    CommandCenterSummary,
    Urgency,
)
from core.services.history_service import HistoryService
from lib.supabase_client import SupabaseClient
from lib.utils import parse_date, utc_today

logger = logging.getLogger(__name__)

DUE_DATE_FILTERS = ("today", "tomorrow", "overdue", "this-week")


def days_until_due(client: dict[str, Any], today: date) -> int:
    """
    Calendar days between today and the client's due date.

    The due date is estimated_delivery_date, falling back to created_at.
    Negative means overdue. A client with neither date is due today.
    """
    due = parse_date(client.get("estimated_delivery_date")) or parse_date(client.get("created_at"))
    if due is None:
        return 0
    return (due - today).days


def classify_urgency(is_rush: bool, days: int) -> Urgency:
    if is_rush:
        return Urgency.RUSH
    if days < 0:
        return Urgency.OVERDUE
    if days == 0:
        return Urgency.DUE_TODAY
    if days == 1:
        return Urgency.DUE_TOMORROW
    return Urgency.ON_TRACK


def next_action(
    client: dict[str, Any],
    urgency: Urgency,
    history: list[dict[str, Any]],
) -> str:
    """
    Suggest what the admin should do next for a client.

    First match wins:
        1. active + payment pending   -> "Follow up on payment"
        2. active + no intake history -> "Send intake form"
        3. overdue                    -> "Urgent: Deliver project"
        4. due today                  -> "Complete and deliver today"
        5. rush                       -> "Rush delivery required"
        6. otherwise                  -> "Review client status"
    """
    is_active = client.get("status") == "active"

    if is_active and client.get("payment_status") == "pending":
        return "Follow up on payment"
    if is_active and not any(h.get("action_type") == "intake_form_completed" for h in history):
        return "Send intake form"
    if urgency == Urgency.OVERDUE:
        return "Urgent: Deliver project"
    if urgency == Urgency.DUE_TODAY:
        return "Complete and deliver today"
    if urgency == Urgency.RUSH:
        return "Rush delivery required"
    return "Review client status"


def needs_action(row: CommandCenterRow) -> bool:
    return (
        row.urgency in (Urgency.OVERDUE, Urgency.DUE_TODAY, Urgency.RUSH)
        or row.payment_status == "pending"
    )


def build_row(
    client: dict[str, Any],
    history: list[dict[str, Any]],
    service_name: str | None,
    today: date,
) -> CommandCenterRow:
    """
    Build one command center row.

    Args:
        client: clients row
        history: This client's history rows, newest first
        service_name: Name of the client's service type
        today: Reference date
    """
    days = days_until_due(client, today)
    urgency = classify_urgency(bool(client.get("is_rush")), days)

    return CommandCenterRow(
        id=client["id"],
        name=client.get("name") or "",
        email=client.get("email") or "",
        phone=client.get("phone"),
        status=client.get("status") or "active",
        payment_status=client.get("payment_status"),
        service_name=service_name,
        estimated_delivery_date=client.get("estimated_delivery_date"),
        is_rush=bool(client.get("is_rush")),
        days_until_due=days,
        urgency=urgency,
        next_action=next_action(client, urgency, history),
        files_count=sum(1 for h in history if h.get("action_type") == "file_uploaded"),
        last_activity=(history[0].get("description") if history else None) or "No recent activity",
    )


@dataclass
class CommandCenterFilters:
    """
    Filter settings. None (or False for action_needed) disables a filter.

    Attributes:
        search: Case-insensitive substring of name, email or service name
        status: Exact client status
        due_date: today | tomorrow | overdue | this-week (0..7 days)
        package: Case-insensitive substring of the service name
        urgency: Exact urgency label
        action_needed: Only overdue, due today, payment pending or rush
    """
    search: str | None = None
    status: str | None = None
    due_date: str | None = None
    package: str | None = None
    urgency: str | None = None
    action_needed: bool = False


def _matches_due_date(row: CommandCenterRow, due_date: str) -> bool:
    if due_date == "today":
        return row.urgency == Urgency.DUE_TODAY
    if due_date == "tomorrow":
        return row.urgency == Urgency.DUE_TOMORROW
    if due_date == "overdue":
        return row.urgency == Urgency.OVERDUE
    if due_date == "this-week":
        return 0 <= row.days_until_due <= 7
    return True


def filter_rows(
    rows: list[CommandCenterRow],
    filters: CommandCenterFilters,
) -> list[CommandCenterRow]:
    """Apply every enabled filter; a row must pass all of them."""
    search = (filters.search or "").lower()
    package = (filters.package or "").lower()

    result = []
    for row in rows:
        service = (row.service_name or "").lower()

        if search and not (
            search in row.name.lower()
            or search in row.email.lower()
            or search in service
        ):
            continue
        if filters.status and row.status != filters.status:
            continue
        if filters.due_date and not _matches_due_date(row, filters.due_date):
            continue
        if package and package not in service:
            continue
        if filters.urgency and row.urgency.value != filters.urgency:
            continue
        if filters.action_needed and not needs_action(row):
            continue
        result.append(row)

    return result


def summarize(rows: list[CommandCenterRow]) -> CommandCenterSummary:
    """Counts over all clients (not just the filtered ones)."""
    return CommandCenterSummary(
        rush=sum(1 for r in rows if r.urgency == Urgency.RUSH),
        due_today=sum(1 for r in rows if r.urgency == Urgency.DUE_TODAY),
        overdue=sum(1 for r in rows if r.urgency == Urgency.OVERDUE),
        active=sum(1 for r in rows if r.status == "active"),
        action_needed=sum(1 for r in rows if needs_action(r)),
        total=len(rows),
    )


class CommandCenterService:
    """Loads clients and history and assembles the overview."""

    @staticmethod
    def build_overview(
        filters: CommandCenterFilters | None = None,
        today: date | None = None,
    ) -> CommandCenterResponse:
        today = today or utc_today()

        clients = SupabaseClient.fetch_clients()
        service_types = SupabaseClient.fetch_service_types()

        history_by_client: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for entry in HistoryService.list_all():
            history_by_client[entry.get("client_id")].append(entry)

        rows = []
        for client in clients:
            service = service_types.get(client.get("service_type_id")) or {}
            rows.append(build_row(
                client,
                history_by_client.get(client["id"], []),
                service.get("name"),
                today,
            ))

        logger.info(f"Command center built for {len(rows)} clients")

        return CommandCenterResponse(
            clients=filter_rows(rows, filters or CommandCenterFilters()),
            summary=summarize(rows),
        )
