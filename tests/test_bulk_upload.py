# =============================================================================
# tests/test_bulk_upload.py - Bulk Delivery Upload Tests
# =============================================================================
# Filename parsing, fuzzy client matching and the per-file upload loop.
# =============================================================================

import pytest

from core.models.delivery import DocumentType
from core.services.bulk_upload import (
    BulkUploadService,
    detect_document_type,
    extract_client_name,
    match_client,
    normalize_name,
    plan_bulk_upload,
)
from core.services.delivery_service import UploadedFile
from core.services.storage_service import DELIVERIES_BUCKET

CLIENTS = [
    {"id": "1", "name": "Jane Doe"},
    {"id": "2", "name": "Robert Smith-Jones"},
    {"id": "3", "name": "Maria"},
    {"id": "4", "name": ""},
]


# =============================================================================
# Filename Parsing
# =============================================================================

class TestNormalizeName:

    def test_strips_non_alphanumerics(self):
        assert normalize_name("Jane O'Doe-Smith 2") == "janeodoesmith2"


class TestDetectDocumentType:

    @pytest.mark.parametrize("filename,expected", [
        ("Jane_Resume.pdf", DocumentType.RESUME),
        ("Jane_CV.docx", DocumentType.RESUME),
        ("Jane_Cover_Letter.pdf", DocumentType.COVER_LETTER),
        ("Jane_CoverLetter.pdf", DocumentType.COVER_LETTER),
        ("Jane_Thank_You.pdf", DocumentType.THANK_YOU_LETTER),
        ("Jane_LinkedIn.pdf", DocumentType.LINKEDIN),
        ("Jane_Bio.pdf", DocumentType.BIO),
        ("Jane_Outreach.pdf", DocumentType.OUTREACH_LETTER),
        ("Jane_Final.pdf", DocumentType.RESUME),
    ])
    def test_keywords(self, filename, expected):
        assert detect_document_type(filename) == expected

    def test_resume_keyword_checked_first(self):
        assert detect_document_type("Jane_Resume_and_Cover_Letter.pdf") == DocumentType.RESUME


class TestExtractClientName:

    def test_underscore(self):
        assert extract_client_name("Jane_Doe_Resume.pdf") == "Jane"

    def test_spaced_dash(self):
        assert extract_client_name("Jane Doe - Resume.pdf") == "Jane Doe"

    def test_dash(self):
        assert extract_client_name("JaneDoe-Resume.pdf") == "JaneDoe"

    def test_no_separator(self):
        assert extract_client_name("resume.pdf") is None


# =============================================================================
# Client Matching
# =============================================================================

class TestMatchClient:

    def test_exact_normalized_match(self):
        assert match_client("jane doe", CLIENTS)["id"] == "1"

    def test_containment(self):
        assert match_client("RobertSmith", CLIENTS)["id"] == "2"

    def test_first_name(self):
        assert match_client("Jane", CLIENTS)["id"] == "1"

    def test_search_containing_first_name(self):
        assert match_client("MariaGonzalez", CLIENTS)["id"] == "3"

    def test_empty_client_names_never_match(self):
        assert match_client("Unknown", CLIENTS) is None

    def test_nothing_extracted(self):
        assert match_client(None, CLIENTS) is None
        assert match_client("___", CLIENTS) is None


class TestPlanBulkUpload:

    def test_splits_matched_and_unmatched(self):
        plan = plan_bulk_upload(
            ["Jane Doe - Cover Letter.pdf", "Zed_Resume.pdf", "notes.pdf"],
            CLIENTS,
        )

        assert [m.filename for m in plan["matched"]] == ["Jane Doe - Cover Letter.pdf"]
        match = plan["matched"][0]
        assert match.client_id == "1"
        assert match.client_name == "Jane Doe"
        assert match.document_type == DocumentType.COVER_LETTER

        unmatched = {m.filename: m for m in plan["unmatched"]}
        assert unmatched["Zed_Resume.pdf"].extracted_name == "Zed"
        assert unmatched["notes.pdf"].extracted_name is None


# =============================================================================
# Upload Loop
# =============================================================================

class TestUploadMatched:

    def test_uploads_matched_and_reports_unmatched(self, db, client_row):
        files = [
            UploadedFile("Jane Doe - Resume.pdf", b"%PDF-1.4 jane", "application/pdf"),
            UploadedFile("Nobody_Resume.pdf", b"%PDF-1.4 nobody", "application/pdf"),
        ]

        results = BulkUploadService.upload_matched(files)

        by_name = {r.filename: r for r in results}
        ok = by_name["Jane Doe - Resume.pdf"]
        assert ok.success is True
        assert ok.client_id == client_row["id"]

        missed = by_name["Nobody_Resume.pdf"]
        assert missed.success is False
        assert missed.error == "No matching client"

        delivery = db.rows("deliveries")[0]
        assert delivery["id"] == ok.delivery_id
        assert delivery["status"] == "delivered"
        assert delivery["document_type"] == "resume"
        assert delivery["document_title"] == "Jane Doe - Resume"
        assert delivery["file_path"].startswith(f"{client_row['id']}/")
        assert delivery["file_path"].endswith("_Jane Doe - Resume.pdf")
        assert delivery["file_path"] in db.storage.files[DELIVERIES_BUCKET]

    def test_failure_does_not_stop_batch(self, db, client_row):
        db.fail_on("deliveries", "insert")
        files = [
            UploadedFile("Jane_Resume.pdf", b"one", "application/pdf"),
            UploadedFile("Jane_Bio.pdf", b"two", "application/pdf"),
        ]

        results = BulkUploadService.upload_matched(files)

        assert len(results) == 2
        assert all(not r.success for r in results)
        assert all("failed" in r.error for r in results)
