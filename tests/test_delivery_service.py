# =============================================================================
# tests/test_delivery_service.py - Deliveries, Revisions & Notifications
# =============================================================================
# Covers the delivery lifecycle:
#   upload -> delivered -> approved
#                      \-> revision_requested -> (completed) -> delivered
# plus comments and the notifications sent along the way.
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from app.config import settings
from app.exceptions import (
    AttachmentTooLargeError,
    ClientNotFoundError,
    DeliveryNotFoundError,
    InvalidStatusError,
    MissingFieldsError,
    RevisionRequestNotFoundError,
)
from core.services.delivery_service import DeliveryService, UploadedFile
from core.services.notification_service import NotificationService, notification_content
from core.services.revision_service import RevisionService
from core.services.storage_service import ATTACHMENTS_BUCKET, RESUMES_BUCKET


# =============================================================================
# Uploading
# =============================================================================

class TestCreateDelivery:

    def test_uploads_and_creates_delivered_row(self, db, client_row):
        file = UploadedFile("Jane Resume.PDF", b"%PDF-1.4", "application/pdf")

        delivery = DeliveryService.create_delivery(client_row["id"], " Executive Resume ", file, "resume")

        assert delivery["status"] == "delivered"
        assert delivery["delivered_at"]
        assert delivery["document_title"] == "Executive Resume"
        assert delivery["document_type"] == "resume"
        assert delivery["file_size"] == 8
        assert delivery["file_path"].startswith("deliveries/")
        assert delivery["file_path"].endswith(".pdf")
        assert delivery["file_url"].endswith(delivery["file_path"])
        assert db.storage.files[RESUMES_BUCKET][delivery["file_path"]] == b"%PDF-1.4"

    def test_default_document_type(self, db, client_row):
        file = UploadedFile("notes.txt", b"hello")

        assert DeliveryService.create_delivery(client_row["id"], "Notes", file)["document_type"] == "document"

    def test_missing_fields(self, db):
        with pytest.raises(MissingFieldsError) as exc_info:
            DeliveryService.create_delivery(None, "  ", None)

        assert exc_info.value.details["fields"] == ["client_id", "document_title", "file"]
        assert db.rows("deliveries") == []


class TestStatusAndApproval:

    def test_invalid_status(self, delivery_row):
        with pytest.raises(InvalidStatusError):
            DeliveryService.set_status(delivery_row["id"], "shipped")

    def test_unknown_delivery(self, db):
        with pytest.raises(DeliveryNotFoundError):
            DeliveryService.set_status("missing", "approved")

    def test_approve_records_history(self, db, delivery_row, client_user_id):
        delivery = DeliveryService.approve(delivery_row["id"], approved_by=client_user_id)

        assert delivery["status"] == "approved"
        assert delivery["approved_at"]
        history = db.rows("client_history")[0]
        assert history["action_type"] == "delivery_approved"
        assert history["description"] == "Client approved Executive Resume"
        assert history["metadata"] == {"delivery_id": delivery_row["id"]}

    def test_checklist(self, db, client_row, delivery_row):
        db.seed("deliveries", [
            {"client_id": client_row["id"], "document_type": "cover_letter",
             "document_title": "Cover Letter", "status": "approved"},
            {"client_id": client_row["id"], "document_type": "linkedin",
             "document_title": "LinkedIn", "status": "revision_requested"},
        ])

        checklist = DeliveryService.checklist(client_row["id"])

        assert checklist["pending_review"] == 1
        assert checklist["approved"] == 1
        assert checklist["resume"]["id"] == delivery_row["id"]
        assert len(checklist["deliveries"]) == 3

    def test_list_all_attaches_client(self, delivery_row, client_row):
        deliveries = DeliveryService.list_all()

        assert deliveries[0]["client_name"] == "Jane Doe"
        assert deliveries[0]["client_email"] == "jane@example.com"


# =============================================================================
# Revision Requests
# =============================================================================

class TestRequestRevision:

    def test_creates_request_and_flags_delivery(self, db, delivery_row):
        attachment = UploadedFile("markup.png", b"\x89PNG", "image/png")

        revision = DeliveryService.request_revision(
            delivery_row["id"],
            ["tone_format", "other"],
            "  Make the summary punchier ",
            custom_reason="Shorter bullets",
            attachments=[attachment],
        )

        assert revision["status"] == "pending"
        assert revision["client_id"] == delivery_row["client_id"]
        assert revision["description"] == "Make the summary punchier"
        assert revision["custom_reason"] == "Shorter bullets"
        assert len(revision["attachment_urls"]) == 1
        assert ATTACHMENTS_BUCKET in revision["attachment_urls"][0]
        assert f"revision-{delivery_row['id']}-" in revision["attachment_urls"][0]

        assert db.rows("deliveries")[0]["status"] == "revision_requested"

    def test_custom_reason_dropped_without_other(self, delivery_row):
        revision = DeliveryService.request_revision(
            delivery_row["id"], ["incorrect"], "Wrong dates", custom_reason="ignored"
        )

        assert revision["custom_reason"] is None
        assert revision["attachment_urls"] == []

    def test_reason_required(self, db, delivery_row):
        with pytest.raises(MissingFieldsError) as exc_info:
            DeliveryService.request_revision(delivery_row["id"], [], "Something")

        assert exc_info.value.details["fields"] == ["reasons"]
        assert db.rows("revision_requests") == []

    def test_description_required(self, delivery_row):
        with pytest.raises(MissingFieldsError) as exc_info:
            DeliveryService.request_revision(delivery_row["id"], ["incorrect"], "   ")

        assert exc_info.value.details["fields"] == ["description"]

    def test_attachment_size_limit(self, db, delivery_row):
        too_big = UploadedFile("huge.pdf", b"x" * (settings.max_attachment_size_bytes + 1))

        with pytest.raises(AttachmentTooLargeError):
            DeliveryService.request_revision(delivery_row["id"], ["incorrect"], "Fix", attachments=[too_big])

        assert db.storage.files == {}
        assert db.rows("deliveries")[0]["status"] == "delivered"


class TestRevisionWorkflow:

    @pytest.fixture
    def revision(self, delivery_row):
        return DeliveryService.request_revision(delivery_row["id"], ["incorrect"], "Wrong dates")

    def test_in_progress(self, db, revision):
        updated = RevisionService.update_status(revision["id"], "in_progress")

        assert updated["status"] == "in_progress"
        assert db.rows("notifications") == []

    def test_completed_redelivers_and_notifies(self, db, revision, outbox):
        RevisionService.update_status(revision["id"], "completed")

        assert db.rows("deliveries")[0]["status"] == "delivered"
        notification = db.rows("notifications")[0]
        assert notification["type"] == "revision_complete"
        assert notification["title"] == "Your Executive Resume revisions are complete!"
        assert outbox[0]["to"] == "jane@example.com"

    def test_unknown_status(self, revision):
        with pytest.raises(InvalidStatusError):
            RevisionService.update_status(revision["id"], "done")

    def test_unknown_revision(self, db):
        with pytest.raises(RevisionRequestNotFoundError):
            RevisionService.update_status("missing", "completed")

    def test_admin_list_has_names(self, revision):
        revisions = RevisionService.list_all()

        assert revisions[0]["client_name"] == "Jane Doe"
        assert revisions[0]["document_title"] == "Executive Resume"


# =============================================================================
# Comments
# =============================================================================

class TestComments:

    def test_add_and_list(self, delivery_row, client_user_id):
        DeliveryService.add_comment(delivery_row["id"], client_user_id, " Looks great ", is_admin=False)

        comments = DeliveryService.list_comments(delivery_row["id"])

        assert len(comments) == 1
        assert comments[0]["content"] == "Looks great"
        assert comments[0]["is_admin"] is False
        assert comments[0]["client_id"] == delivery_row["client_id"]

    def test_blank_comment(self, delivery_row):
        with pytest.raises(MissingFieldsError):
            DeliveryService.add_comment(delivery_row["id"], "u", "  ", is_admin=True)


# =============================================================================
# Notifications
# =============================================================================

class TestNotificationContent:

    def test_delivery_ready(self):
        title, message = notification_content("delivery_ready", "Cover Letter")

        assert title == "Your Cover Letter is ready!"
        assert "cover letter" in message

    def test_revision_complete(self):
        title, _ = notification_content("revision_complete", "Resume")

        assert title == "Your Resume revisions are complete!"


class TestSendDeliveryNotification:

    def test_in_app_and_email(self, db, client_row, delivery_row, client_user_id, outbox):
        result = NotificationService.send_delivery_notification(
            delivery_row["id"], client_row["id"], "Executive Resume", "delivery_ready"
        )

        assert result["success"] is True
        assert result["email_sent"] is True
        assert result["sms_sent"] is False

        notification = db.rows("notifications")[0]
        assert notification["user_id"] == client_user_id
        assert notification["metadata"]["client_name"] == "Jane Doe"
        assert notification["metadata"]["delivery_url"].endswith("/client-portal")

        assert outbox[0]["subject"] == "Your Executive Resume is ready for review!"

    def test_email_failure_is_not_fatal(self, db, client_row, delivery_row, monkeypatch):
        from lib.email_client import EmailClient, EmailError

        def failing_send(self, **kwargs):
            raise EmailError("Resend is down")

        monkeypatch.setattr(EmailClient, "send", failing_send)

        result = NotificationService.send_delivery_notification(
            delivery_row["id"], client_row["id"], "Executive Resume", "delivery_ready"
        )

        assert result["success"] is True
        assert result["email_sent"] is False
        assert len(db.rows("notifications")) == 1

    def test_sms_when_client_has_phone(self, db, client_row, delivery_row, outbox):
        db.table("clients").update({"phone": "+15551234567"}).eq("id", client_row["id"]).execute()
        sms = MagicMock()

        with patch("core.services.notification_service.get_sms_client", return_value=sms):
            result = NotificationService.send_delivery_notification(
                delivery_row["id"], client_row["id"], "Executive Resume", "delivery_ready"
            )

        assert result["sms_sent"] is True
        to, body = sms.send.call_args.args
        assert to == "+15551234567"
        assert "Executive Resume is ready for review" in body

    def test_unknown_client(self, db):
        with pytest.raises(ClientNotFoundError):
            NotificationService.send_delivery_notification("d", "missing", "Resume", "delivery_ready")

    def test_unknown_type(self, db, client_row):
        with pytest.raises(InvalidStatusError):
            NotificationService.send_delivery_notification("d", client_row["id"], "Resume", "shipped")


class TestUserNotifications:

    def test_list_and_mark_read(self, db, client_user_id):
        rows = db.seed("notifications", [
            {"user_id": client_user_id, "title": "One", "read_at": None},
            {"user_id": "someone-else", "title": "Two", "read_at": None},
        ])

        assert [n["title"] for n in NotificationService.list_for_user(client_user_id)] == ["One"]

        assert NotificationService.mark_read(rows[0]["id"], client_user_id)["read_at"]
        assert NotificationService.mark_read(rows[1]["id"], client_user_id) is None
        assert NotificationService.list_for_user(client_user_id, unread_only=True) == []

    def test_toggle_rule(self, db):
        rule = db.seed("notification_rules", [{"name": "Overdue alert", "is_enabled": True, "priority": 1}])[0]

        assert NotificationService.toggle_rule(rule["id"])["is_enabled"] is False
        assert NotificationService.toggle_rule(rule["id"])["is_enabled"] is True
        assert NotificationService.toggle_rule("missing") is None
