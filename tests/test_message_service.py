# =============================================================================
# tests/test_message_service.py - Client Messaging Tests
# =============================================================================

import pytest

from app.exceptions import ClientNotFoundError, MissingFieldsError
from core.email_templates import message_preview
from core.services.message_service import MessageService


class TestMessagePreview:

    def test_short_text_unchanged(self):
        assert message_preview("Hello", 50) == "Hello"

    def test_long_text_cut(self):
        assert message_preview("x" * 60, 50) == "x" * 50 + "..."


class TestSendMessage:

    def test_client_message_logs_history(self, db, client_row, client_user_id):
        text = "Quick question about my cover letter and the formatting of the header"

        row = MessageService.send_message(client_row["id"], client_user_id, "client", f"  {text} ")

        assert row["message"] == text
        assert row["sender_type"] == "client"
        assert row["message_type"] == "text"

        history = db.rows("client_history")[0]
        assert history["action_type"] == "message_received"
        assert history["description"] == f"New message: {text[:50]}..."
        assert history["metadata"] == {"message_id": row["id"]}

    def test_admin_message_has_no_history(self, db, client_row):
        MessageService.send_message(client_row["id"], "admin-1", "admin", "Draft attached!")

        assert db.rows("client_history") == []

    def test_blank_message(self, db, client_row):
        with pytest.raises(MissingFieldsError):
            MessageService.send_message(client_row["id"], "u", "client", "   ")

        assert db.rows("messages") == []

    def test_thread_oldest_first(self, db, client_row):
        db.seed("messages", [
            {"client_id": client_row["id"], "message": "second", "created_at": "2024-06-02T10:00:00+00:00"},
            {"client_id": client_row["id"], "message": "first", "created_at": "2024-06-01T10:00:00+00:00"},
            {"client_id": "other", "message": "elsewhere", "created_at": "2024-06-01T09:00:00+00:00"},
        ])

        assert [m["message"] for m in MessageService.list_messages(client_row["id"])] == ["first", "second"]


class TestMarkRead:

    def test_marks_only_other_party_unread(self, db, client_row):
        db.seed("messages", [
            {"client_id": client_row["id"], "sender_type": "client", "message": "a", "read_at": None},
            {"client_id": client_row["id"], "sender_type": "client", "message": "b",
             "read_at": "2024-06-01T10:00:00+00:00"},
            {"client_id": client_row["id"], "sender_type": "admin", "message": "c", "read_at": None},
        ])

        assert MessageService.mark_read(client_row["id"], "admin") == 1

        unread = [m["message"] for m in db.rows("messages") if m["read_at"] is None]
        assert unread == ["c"]

    def test_nothing_to_mark(self, db, client_row):
        assert MessageService.mark_read(client_row["id"], "client") == 0


class TestNotify:

    def test_admin_message_emails_client(self, db, client_row, admin_user, outbox):
        record = {
            "id": "m-1",
            "client_id": client_row["id"],
            "sender_id": str(admin_user.id),
            "sender_type": "admin",
            "message": "Your draft is ready",
            "created_at": "2024-06-10T12:00:00+00:00",
        }

        result = MessageService.notify(record)

        assert result == {"success": True, "sent": 1, "failed": 0}
        assert outbox[0]["to"] == "jane@example.com"
        assert outbox[0]["subject"] == "New message from Riley Admin"

    def test_client_message_emails_every_admin(self, db, client_row, client_user_id, admin_user, outbox):
        other_admin = "22222222-2222-2222-2222-222222222222"
        db.seed("user_roles", [{"user_id": other_admin, "role": "admin"}])
        db.seed("profiles", [{"id": other_admin, "email": "ops@rdr.com", "display_name": None}])

        result = MessageService.notify({
            "id": "m-2",
            "client_id": client_row["id"],
            "sender_id": client_user_id,
            "sender_type": "client",
            "message": "Can we move the session?",
        })

        assert result["sent"] == 2
        assert sorted(e["to"] for e in outbox) == ["admin@rdr.com", "ops@rdr.com"]
        assert all(e["subject"] == "New message from client: Jane Doe" for e in outbox)

    def test_one_failed_email_does_not_stop_others(self, db, client_row, admin_user, monkeypatch):
        from lib.email_client import EmailClient, EmailError

        db.seed("user_roles", [{"user_id": "admin-2", "role": "admin"}])
        db.seed("profiles", [{"id": "admin-2", "email": "ops@rdr.com", "display_name": "Ops"}])
        delivered = []

        def flaky_send(self, to, subject, html, sender=None):
            if to == "admin@rdr.com":
                raise EmailError("bounced")
            delivered.append(to)
            return {"id": "ok"}

        monkeypatch.setattr(EmailClient, "send", flaky_send)

        result = MessageService.notify({
            "client_id": client_row["id"],
            "sender_type": "client",
            "message": "Hello",
        })

        assert result == {"success": True, "sent": 1, "failed": 1}
        assert delivered == ["ops@rdr.com"]

    def test_unknown_client(self, db):
        with pytest.raises(ClientNotFoundError):
            MessageService.notify({"client_id": "missing", "sender_type": "admin", "message": "x"})
