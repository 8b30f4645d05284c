# =============================================================================
# tests/test_digest_service.py - Daily Digest Tests
# =============================================================================

from datetime import datetime, timedelta, timezone

import pytest

from app.config import settings
from core.models.reminder import DigestPreferences
from core.services.digest_service import DigestService

NOW = datetime(2024, 6, 10, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def digest_clients(db, service_type):
    def client(name, due, status="active"):
        return {
            "name": name,
            "email": f"{name.lower()}@example.com",
            "status": status,
            "service_type_id": service_type["id"],
            "estimated_delivery_date": due,
        }

    return db.seed("clients", [
        client("Today", "2024-06-10"),
        client("Tomorrow", "2024-06-11"),
        client("Late", "2024-06-01"),
        client("Later", "2024-06-20"),
        client("Paused", "2024-06-10", status="on-hold"),
    ])


class TestPreferences:

    def test_defaults_when_no_row(self, db):
        prefs = DigestService.get_preferences()

        assert prefs["enabled"] is True
        assert prefs["include_new_uploads"] is True

    def test_save_then_update_same_row(self, db):
        first = DigestService.save_preferences(DigestPreferences(include_overdue=False), user_id="admin-1")
        second = DigestService.save_preferences(DigestPreferences(enabled=False))

        assert second["id"] == first["id"]
        assert len(db.rows("daily_digest_preferences")) == 1
        assert DigestService.get_preferences()["enabled"] is False


class TestBuildDigest:

    def test_sections(self, db, digest_clients):
        db.seed("client_history", [
            {"client_id": digest_clients[0]["id"], "action_type": "file_uploaded",
             "description": "Uploaded resume.pdf", "created_at": (NOW - timedelta(hours=3)).isoformat()},
            {"client_id": digest_clients[0]["id"], "action_type": "file_uploaded",
             "description": "Uploaded old.pdf", "created_at": (NOW - timedelta(days=2)).isoformat()},
            {"client_id": digest_clients[0]["id"], "action_type": "message_received",
             "description": "New message", "created_at": (NOW - timedelta(hours=1)).isoformat()},
        ])

        digest = DigestService.build_digest(now=NOW)

        assert digest["date"] == "2024-06-10"
        assert [c["name"] for c in digest["due_today"]] == ["Today"]
        assert [c["name"] for c in digest["due_tomorrow"]] == ["Tomorrow"]
        assert [c["name"] for c in digest["overdue"]] == ["Late"]
        assert digest["overdue"][0]["service_name"] == "Executive Resume Package"
        assert [u["description"] for u in digest["new_uploads"]] == ["Uploaded resume.pdf"]
        assert digest["new_uploads"][0]["client_name"] == "Today"

    def test_disabled_sections_are_empty(self, db, digest_clients):
        prefs = DigestPreferences(include_due_today=False, include_overdue=False).model_dump()

        digest = DigestService.build_digest(prefs, now=NOW)

        assert digest["due_today"] == []
        assert digest["overdue"] == []
        assert len(digest["due_tomorrow"]) == 1


class TestSendDigest:

    def test_sends_to_default_recipient(self, db, digest_clients, outbox):
        result = DigestService.send_digest(now=NOW)

        assert result["success"] is True
        assert result["counts"] == {"due_today": 1, "due_tomorrow": 1, "overdue": 1, "new_uploads": 0}
        assert outbox[0]["to"] == settings.DIGEST_DEFAULT_RECIPIENT
        assert outbox[0]["sender"] == settings.EMAIL_FROM_DIGEST
        assert outbox[0]["subject"] == "Daily Digest - 2024-06-10 (3 items)"

    def test_disabled_skips_unless_forced(self, db, outbox):
        DigestService.save_preferences(DigestPreferences(enabled=False))

        assert DigestService.send_digest(now=NOW) == {"message": "Daily digest is disabled"}
        assert outbox == []

        result = DigestService.send_digest(force=True, recipient="boss@rdr.com", now=NOW)
        assert result["success"] is True
        assert outbox[0]["to"] == "boss@rdr.com"
        assert "All caught up" in outbox[0]["html"]
