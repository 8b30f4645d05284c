# =============================================================================
# tests/test_command_center.py - Command Center Tests
# =============================================================================
# Urgency, next action, filters and summary counts. The pure functions are
# tested directly; build_overview runs against the in-memory database.
# =============================================================================

from datetime import date, timedelta

import pytest

from core.models.client import CommandCenterRow, Urgency
from core.services.command_center import (
    CommandCenterFilters,
    CommandCenterService,
    build_row,
    classify_urgency,
    days_until_due,
    filter_rows,
    next_action,
    summarize,
)

TODAY = date(2024, 6, 10)


def make_client(**overrides):
    client = {
        "id": "c-1",
        "name": "Jane Doe",
        "email": "jane@example.com",
        "status": "active",
        "payment_status": "paid",
        "estimated_delivery_date": (TODAY + timedelta(days=5)).isoformat(),
        "is_rush": False,
        "created_at": "2024-06-01T09:00:00+00:00",
    }
    client.update(overrides)
    return client


INTAKE_DONE = [{"action_type": "intake_form_completed", "description": "Client completed intake"}]


def make_row(**overrides):
    data = {
        "id": "c-1",
        "name": "Jane Doe",
        "email": "jane@example.com",
        "status": "active",
        "payment_status": "paid",
        "service_name": "Executive Resume Package",
        "days_until_due": 5,
        "urgency": Urgency.ON_TRACK,
        "next_action": "Review client status",
        "last_activity": "No recent activity",
    }
    data.update(overrides)
    return CommandCenterRow(**data)


# =============================================================================
# Due Dates & Urgency
# =============================================================================

class TestDaysUntilDue:

    def test_uses_estimated_delivery_date(self):
        assert days_until_due(make_client(), TODAY) == 5

    def test_negative_when_overdue(self):
        client = make_client(estimated_delivery_date="2024-06-08")

        assert days_until_due(client, TODAY) == -2

    def test_falls_back_to_created_at(self):
        client = make_client(estimated_delivery_date=None, created_at="2024-06-11T23:30:00Z")

        assert days_until_due(client, TODAY) == 1

    def test_no_dates_means_due_today(self):
        client = make_client(estimated_delivery_date=None, created_at=None)

        assert days_until_due(client, TODAY) == 0


class TestClassifyUrgency:

    @pytest.mark.parametrize("days,expected", [
        (-3, Urgency.OVERDUE),
        (0, Urgency.DUE_TODAY),
        (1, Urgency.DUE_TOMORROW),
        (2, Urgency.ON_TRACK),
    ])
    def test_by_days(self, days, expected):
        assert classify_urgency(False, days) == expected

    def test_rush_wins_over_overdue(self):
        assert classify_urgency(True, -10) == Urgency.RUSH


# =============================================================================
# Next Action
# =============================================================================

class TestNextAction:
    """First matching rule wins."""

    def test_payment_pending_first(self):
        client = make_client(payment_status="pending")

        assert next_action(client, Urgency.OVERDUE, []) == "Follow up on payment"

    def test_send_intake_form_when_no_intake_history(self):
        assert next_action(make_client(), Urgency.OVERDUE, []) == "Send intake form"

    def test_intake_rules_only_for_active_clients(self):
        client = make_client(status="on-hold", payment_status="pending")

        assert next_action(client, Urgency.OVERDUE, []) == "Urgent: Deliver project"

    def test_overdue(self):
        assert next_action(make_client(), Urgency.OVERDUE, INTAKE_DONE) == "Urgent: Deliver project"

    def test_due_today(self):
        assert next_action(make_client(), Urgency.DUE_TODAY, INTAKE_DONE) == "Complete and deliver today"

    def test_rush(self):
        assert next_action(make_client(), Urgency.RUSH, INTAKE_DONE) == "Rush delivery required"

    def test_default(self):
        assert next_action(make_client(), Urgency.DUE_TOMORROW, INTAKE_DONE) == "Review client status"


class TestBuildRow:

    def test_counts_files_and_uses_latest_activity(self):
        history = [
            {"action_type": "file_uploaded", "description": "Uploaded resume.pdf"},
            {"action_type": "file_uploaded", "description": "Uploaded posting.pdf"},
            {"action_type": "intake_form_completed", "description": "Client completed intake"},
        ]

        row = build_row(make_client(), history, "Executive Resume Package", TODAY)

        assert row.files_count == 2
        assert row.last_activity == "Uploaded resume.pdf"
        assert row.service_name == "Executive Resume Package"
        assert row.urgency == Urgency.ON_TRACK

    def test_no_history(self):
        row = build_row(make_client(), [], None, TODAY)

        assert row.files_count == 0
        assert row.last_activity == "No recent activity"
        assert row.next_action == "Send intake form"


# =============================================================================
# Filters & Summary
# =============================================================================

class TestFilterRows:

    @pytest.fixture
    def rows(self):
        return [
            make_row(id="a", name="Alice Smith", email="alice@example.com",
                     service_name="Executive Resume Package", urgency=Urgency.OVERDUE, days_until_due=-1),
            make_row(id="b", name="Bob Jones", email="bob@corp.com",
                     service_name="LinkedIn Makeover", urgency=Urgency.DUE_TODAY, days_until_due=0),
            make_row(id="c", name="Cara Lee", email="cara@example.com", status="completed",
                     service_name="Executive Resume Package", urgency=Urgency.ON_TRACK, days_until_due=6),
            make_row(id="d", name="Dan Wu", email="dan@example.com", payment_status="pending",
                     service_name=None, urgency=Urgency.ON_TRACK, days_until_due=30),
        ]

    def ids(self, rows):
        return [r.id for r in rows]

    def test_no_filters(self, rows):
        assert self.ids(filter_rows(rows, CommandCenterFilters())) == ["a", "b", "c", "d"]

    def test_search_matches_name_email_or_service(self, rows):
        assert self.ids(filter_rows(rows, CommandCenterFilters(search="ALICE"))) == ["a"]
        assert self.ids(filter_rows(rows, CommandCenterFilters(search="corp.com"))) == ["b"]
        assert self.ids(filter_rows(rows, CommandCenterFilters(search="executive"))) == ["a", "c"]

    def test_status(self, rows):
        assert self.ids(filter_rows(rows, CommandCenterFilters(status="completed"))) == ["c"]

    def test_due_date_this_week(self, rows):
        assert self.ids(filter_rows(rows, CommandCenterFilters(due_date="this-week"))) == ["b", "c"]

    def test_due_date_overdue(self, rows):
        assert self.ids(filter_rows(rows, CommandCenterFilters(due_date="overdue"))) == ["a"]

    def test_package(self, rows):
        assert self.ids(filter_rows(rows, CommandCenterFilters(package="linkedin"))) == ["b"]

    def test_action_needed(self, rows):
        assert self.ids(filter_rows(rows, CommandCenterFilters(action_needed=True))) == ["a", "b", "d"]

    def test_filters_combine_with_and(self, rows):
        filters = CommandCenterFilters(search="example.com", action_needed=True)

        assert self.ids(filter_rows(rows, filters)) == ["a", "d"]

    def test_summary_counts_all_rows(self, rows):
        summary = summarize(rows)

        assert summary.overdue == 1
        assert summary.due_today == 1
        assert summary.rush == 0
        assert summary.active == 3
        assert summary.action_needed == 3
        assert summary.total == 4


# =============================================================================
# Service
# =============================================================================

class TestCommandCenterService:

    def test_build_overview(self, db, service_type, client_row, today):
        db.seed("clients", [{
            "name": "Rush Client",
            "email": "rush@example.com",
            "status": "active",
            "payment_status": "paid",
            "estimated_delivery_date": (today + timedelta(days=10)).isoformat(),
            "is_rush": True,
        }])
        db.seed("client_history", [
            {
                "client_id": client_row["id"],
                "action_type": "intake_form_completed",
                "description": "Client completed intake questionnaire",
                "created_at": "2024-06-05T10:00:00+00:00",
            },
            {
                "client_id": client_row["id"],
                "action_type": "file_uploaded",
                "description": "Uploaded old_resume.pdf",
                "created_at": "2024-06-06T10:00:00+00:00",
            },
        ])

        overview = CommandCenterService.build_overview(
            CommandCenterFilters(urgency="rush"), today=today
        )

        assert [r.name for r in overview.clients] == ["Rush Client"]
        assert overview.summary.total == 2
        assert overview.summary.rush == 1

        all_rows = CommandCenterService.build_overview(today=today).clients
        jane = next(r for r in all_rows if r.id == client_row["id"])
        assert jane.service_name == "Executive Resume Package"
        assert jane.files_count == 1
        assert jane.last_activity == "Uploaded old_resume.pdf"
        assert jane.next_action == "Review client status"
