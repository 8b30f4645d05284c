# =============================================================================
# tests/test_client_service.py - Client Service Tests
# =============================================================================
# Client creation and onboarding, updates, service changes, rush toggling,
# deletion and access checks.
# =============================================================================

from datetime import date, datetime, timedelta, timezone

import pytest

from app.exceptions import (
    AccessDeniedError,
    ClientNotFoundError,
    ExternalServiceError,
    MissingFieldsError,
    ServiceTypeNotFoundError,
)
from core.services.account_service import AccountService
from core.services.client_service import ClientService, estimate_delivery_date
from core.services.history_service import HistoryService


class TestEstimateDeliveryDate:

    def test_uses_service_timeline(self):
        assert estimate_delivery_date({"default_timeline_days": 5}, date(2024, 6, 10)) == date(2024, 6, 15)

    def test_default_timeline(self):
        assert estimate_delivery_date(None, date(2024, 6, 10)) == date(2024, 6, 17)
        assert estimate_delivery_date({"default_timeline_days": None}, date(2024, 6, 10)) == date(2024, 6, 17)


# =============================================================================
# Create & Onboard
# =============================================================================

class TestCreateClient:

    def test_creates_and_onboards(self, db, service_type, today):
        client = ClientService.create_client(
            name="  Jane Doe ",
            email="jane@example.com",
            service_type_id=service_type["id"],
            created_by="admin-1",
            today=today,
        )

        assert client["name"] == "Jane Doe"
        assert client["status"] == "active"
        assert client["payment_status"] == "pending"
        assert client["estimated_delivery_date"] == "2024-06-15"
        assert client["is_rush"] is False

        history = db.rows("client_history")
        assert [h["action_type"] for h in history] == ["onboarding_triggered"]
        assert history[0]["metadata"] == {"service_type_id": service_type["id"]}
        assert history[0]["created_by"] == "admin-1"

        steps = sorted(db.rows("client_progress"), key=lambda s: s["step_number"])
        assert [s["step_number"] for s in steps] == [1, 2, 3, 4, 5]
        assert all(s["status"] == "pending" for s in steps)

    def test_schedules_client_created_reminders(self, db, service_type, today):
        db.seed("reminder_templates", [
            {"name": "Welcome", "trigger_type": "client_created", "delay_hours": 24,
             "subject_template": "s", "message_template": "m", "is_active": True},
            {"name": "Inactive", "trigger_type": "client_created", "delay_hours": 1,
             "subject_template": "s", "message_template": "m", "is_active": False},
            {"name": "Manual", "trigger_type": "manual", "delay_hours": 0,
             "subject_template": "s", "message_template": "m", "is_active": True},
        ])

        client = ClientService.create_client(
            name="Jane Doe", email="jane@example.com", service_type_id=service_type["id"], today=today
        )

        reminders = db.rows("scheduled_reminders")
        assert len(reminders) == 1
        assert reminders[0]["client_id"] == client["id"]
        assert reminders[0]["status"] == "pending"

    def test_blank_fields_rejected(self, db, service_type):
        with pytest.raises(MissingFieldsError) as exc_info:
            ClientService.create_client(name=" ", email="", service_type_id=service_type["id"])

        assert exc_info.value.details["fields"] == ["name", "email"]
        assert db.rows("clients") == []

    def test_unknown_service_type(self, db):
        with pytest.raises(ServiceTypeNotFoundError):
            ClientService.create_client(name="Jane", email="jane@example.com", service_type_id="missing")


# =============================================================================
# Read & Access
# =============================================================================

class TestAccess:

    def test_admin_sees_any_client(self, client_row):
        assert ClientService.check_access(client_row["id"], "someone-else", "admin")["id"] == client_row["id"]

    def test_client_sees_own_record(self, client_row, client_user_id):
        assert ClientService.check_access(client_row["id"], client_user_id, "client")["id"] == client_row["id"]

    def test_client_denied_other_record(self, client_row):
        with pytest.raises(AccessDeniedError):
            ClientService.check_access(client_row["id"], "another-user", "client")

    def test_missing_client(self, db):
        with pytest.raises(ClientNotFoundError):
            ClientService.check_access("missing", "u", "admin")

    def test_list_attaches_service_type(self, client_row, service_type):
        clients = ClientService.list_clients()

        assert clients[0]["service_type"]["name"] == service_type["name"]


# =============================================================================
# Updates
# =============================================================================

class TestUpdates:

    def test_update_writes_only_given_fields(self, db, client_row):
        updated = ClientService.update_client(client_row["id"], {
            "status": "on-hold",
            "estimated_delivery_date": date(2024, 7, 1),
        })

        assert updated["status"] == "on-hold"
        assert updated["estimated_delivery_date"] == "2024-07-01"
        assert updated["email"] == client_row["email"]
        assert "updated_at" in updated

    def test_empty_update_returns_client(self, client_row):
        assert ClientService.update_client(client_row["id"], {})["id"] == client_row["id"]

    def test_change_service(self, db, client_row, service_type, today):
        new_service = db.seed("service_types", [{"name": "LinkedIn Makeover", "default_timeline_days": 3}])[0]

        updated = ClientService.change_service(client_row["id"], new_service["id"], changed_by="admin-1", today=today)

        assert updated["service_type_id"] == new_service["id"]
        assert updated["estimated_delivery_date"] == "2024-06-13"

        actions = {h["action_type"]: h for h in db.rows("client_history")}
        assert set(actions) == {"onboarding_triggered", "service_changed"}
        assert actions["service_changed"]["metadata"] == {
            "old_service_type_id": service_type["id"],
            "new_service_type_id": new_service["id"],
        }

    def test_enable_rush_with_deadline(self, db, client_row):
        updated = ClientService.set_rush(client_row["id"], True, date(2024, 6, 12))

        assert updated["is_rush"] is True
        assert updated["rush_deadline"] == "2024-06-12"
        history = db.rows("client_history")[0]
        assert history["action_type"] == "rush_enabled"
        assert history["description"] == "Rush delivery enabled (deadline 2024-06-12)"

    def test_disable_rush_clears_deadline(self, db, client_row):
        updated = ClientService.set_rush(client_row["id"], False, date(2024, 6, 12))

        assert updated["is_rush"] is False
        assert updated["rush_deadline"] is None
        assert db.rows("client_history")[0]["action_type"] == "rush_disabled"


# =============================================================================
# Deletion
# =============================================================================

class TestDeleteClient:

    def test_deletes_row_only(self, db, client_row):
        ClientService.delete_client(client_row["id"])

        assert db.rows("clients") == []
        assert db.auth.admin.deleted_users == []

    def test_deletes_auth_user_too(self, db, client_row, client_user_id):
        ClientService.delete_client(client_row["id"], delete_auth_user=True)

        assert db.auth.admin.deleted_users == [client_user_id]

    def test_removes_uploaded_documents(self, db, client_row):
        db.storage.files["client-documents"] = {
            f"{client_row['id']}/1718000000000_a.pdf": b"a",
            f"{client_row['id']}/1718000000001_b.pdf": b"b",
            "other-client/1718000000002_c.pdf": b"c",
        }

        ClientService.delete_client(client_row["id"])

        assert list(db.storage.files["client-documents"]) == ["other-client/1718000000002_c.pdf"]
        assert len(db.storage.removed) == 2

    def test_auth_failure_is_400(self, db):
        db.auth.admin.fail = True

        with pytest.raises(ExternalServiceError) as exc_info:
            AccountService.delete_auth_user("user-1")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "User not found"

    def test_auth_user_id_required(self, db):
        with pytest.raises(MissingFieldsError):
            AccountService.delete_auth_user("")


class TestHistory:

    def test_latest_fifty_newest_first(self, db, client_row):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        db.seed("client_history", [
            {
                "client_id": client_row["id"],
                "action_type": "file_uploaded",
                "description": f"Upload {i}",
                "created_at": start.replace(day=1 + i % 28, hour=i % 24).isoformat(),
            }
            for i in range(60)
        ])

        history = ClientService.get_history(client_row["id"])

        assert len(history) == 50
        assert history[0]["created_at"] >= history[-1]["created_at"]

    def test_recent_activity(self, db, client_row):
        now = datetime.now(timezone.utc)
        db.seed("client_history", [
            {"client_id": client_row["id"], "action_type": "file_uploaded",
             "description": "Uploaded cv.pdf", "created_at": (now - timedelta(hours=2)).isoformat()},
            {"client_id": client_row["id"], "action_type": "message_received",
             "description": "New message", "created_at": (now - timedelta(days=3)).isoformat()},
            {"client_id": client_row["id"], "action_type": "rush_enabled",
             "description": "Rush delivery enabled", "created_at": now.isoformat()},
            {"client_id": "gone", "action_type": "file_uploaded",
             "description": "Uploaded old.pdf", "created_at": (now - timedelta(days=5)).isoformat()},
        ])

        activity = HistoryService.recent_activity()

        assert [a["description"] for a in activity] == ["Uploaded cv.pdf", "New message", "Uploaded old.pdf"]
        assert [a["unread"] for a in activity] == [True, False, False]
        assert activity[0]["client_name"] == "Jane Doe"
        assert activity[2]["client_name"] == "Unknown Client"


class TestAccountEmails:

    def test_onboarding(self, outbox):
        AccountService.send_onboarding_email(
            client_name="Jane <Doe>",
            client_email="jane@example.com",
            service_name="Executive Resume Package",
            temp_password="Temp#123",
            service_price="$499",
        )

        email = outbox[0]
        assert email["to"] == "jane@example.com"
        assert email["subject"] == "Welcome to Results Driven Resumes - Let's Get Started!"
        assert "Jane &lt;Doe&gt;" in email["html"]
        assert "$499" in email["html"]
        assert "Estimated delivery" not in email["html"]
        assert "/client-portal" in email["html"]

    def test_login_credentials(self, outbox):
        AccountService.send_login_credentials(
            "Jane", "jane@example.com", "Temp#123", login_url="https://portal.example.com/login"
        )

        assert outbox[0]["subject"] == "Your Login Credentials"
        assert "https://portal.example.com/login" in outbox[0]["html"]
        assert "Temp#123" in outbox[0]["html"]
