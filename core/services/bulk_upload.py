# =============================================================================
# core/services/bulk_upload.py - Bulk Delivery Upload
# =============================================================================
# Admins drop many finished documents at once. Each filename is expected to
# look like "ClientName_DocumentType.pdf" or "ClientName - DocumentType.pdf";
# the client part is fuzzy-matched to an existing client and the document
# type is guessed from keywords.
#
# These are single-pass string heuristics: first match wins, and a file
# that matches nothing is reported as unmatched rather than guessed.
# =============================================================================

import logging
import os
import re
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso
from core.models.delivery import BulkUploadMatch, BulkUploadResult, DeliveryStatus, DocumentType
from core.services.delivery_service import UploadedFile, timestamp_ms
from core.services.storage_service import DELIVERIES_BUCKET, StorageService

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")

# Separators tried in order when splitting the client name off a filename
NAME_SEPARATORS = ("_", " - ", "-")


def normalize_name(name: str) -> str:
    """Lowercase and strip everything but a-z and 0-9."""
    return _NON_ALNUM.sub("", name.lower())


def detect_document_type(filename: str) -> DocumentType:
    """
    Guess the document type from keywords in a filename.

    Example:
        >>> detect_document_type("Jane_Doe_Cover_Letter.pdf")
        <DocumentType.COVER_LETTER: 'cover_letter'>
    """
    lower = filename.lower()

    if "resume" in lower or "cv" in lower:
        return DocumentType.RESUME
    if ("cover" in lower and "letter" in lower) or "coverletter" in lower:
        return DocumentType.COVER_LETTER
    if "thank" in lower and "you" in lower:
        return DocumentType.THANK_YOU_LETTER
    if "linkedin" in lower:
        return DocumentType.LINKEDIN
    if "bio" in lower:
        return DocumentType.BIO
    if "outreach" in lower:
        return DocumentType.OUTREACH_LETTER
    return DocumentType.RESUME


def extract_client_name(filename: str) -> str | None:
    """
    Take the client part of a filename: text before the first separator.

    Returns None when the name has no separator at all.
    """
    stem, _ = os.path.splitext(filename)
    for separator in NAME_SEPARATORS:
        if separator in stem:
            return stem.split(separator)[0].strip()
    return None


def match_client(extracted_name: str | None, clients: list[dict[str, Any]]) -> dict[str, Any] | None:
    """
    Fuzzy-match an extracted name to a client.

    Tried in order:
        1. exact match of normalized names
        2. either name contains the other
        3. the client's first name equals or is contained in the search
    """
    if not extracted_name:
        return None
    search = normalize_name(extracted_name)
    if not search:
        return None

    for client in clients:
        if normalize_name(client.get("name") or "") == search:
            return client

    for client in clients:
        candidate = normalize_name(client.get("name") or "")
        if candidate and (search in candidate or candidate in search):
            return client

    for client in clients:
        parts = (client.get("name") or "").split(" ")
        first_name = normalize_name(parts[0]) if parts else ""
        if first_name and (first_name == search or first_name in search):
            return client

    return None


def plan_bulk_upload(
    filenames: list[str],
    clients: list[dict[str, Any]],
) -> dict[str, list[BulkUploadMatch]]:
    """
    Match every filename to a client without uploading anything.

    Returns:
        {"matched": [...], "unmatched": [...]}
    """
    matched: list[BulkUploadMatch] = []
    unmatched: list[BulkUploadMatch] = []

    for filename in filenames:
        extracted = extract_client_name(filename)
        client = match_client(extracted, clients)
        entry = BulkUploadMatch(
            filename=filename,
            extracted_name=extracted,
            client_id=client["id"] if client else None,
            client_name=client.get("name") if client else None,
            document_type=detect_document_type(filename),
        )
        (matched if client else unmatched).append(entry)

    return {"matched": matched, "unmatched": unmatched}


class BulkUploadService:

    @staticmethod
    def load_clients() -> list[dict[str, Any]]:
        return SupabaseClient.fetch_clients(columns="id, name, email", order_by="name", desc=False)

    @staticmethod
    def preview(filenames: list[str]) -> dict[str, list[BulkUploadMatch]]:
        return plan_bulk_upload(filenames, BulkUploadService.load_clients())

    @staticmethod
    def upload_matched(files: list[UploadedFile]) -> list[BulkUploadResult]:
        """
        Match and deliver every file.

        Unmatched files are reported as errors. A failing file doesn't
        stop the others.
        """
        plan = BulkUploadService.preview([f.filename for f in files])
        by_name = {m.filename: m for m in plan["matched"]}

        db = SupabaseClient.get_client()
        results: list[BulkUploadResult] = []

        for file in files:
            match = by_name.get(file.filename)
            if match is None:
                results.append(BulkUploadResult(
                    filename=file.filename,
                    success=False,
                    error="No matching client",
                ))
                continue

            path = f"{match.client_id}/{timestamp_ms()}_{file.filename}"
            try:
                StorageService.upload_bytes(DELIVERIES_BUCKET, path, file.content, file.content_type)
                file_url = StorageService.get_public_url(DELIVERIES_BUCKET, path)

                response = db.table("deliveries").insert({
                    "client_id": match.client_id,
                    "document_type": match.document_type.value,
                    "document_title": os.path.splitext(file.filename)[0],
                    "file_url": file_url,
                    "file_path": path,
                    "file_size": file.size,
                    "mime_type": file.content_type,
                    "status": DeliveryStatus.DELIVERED.value,
                    "delivered_at": utc_now_iso(),
                }).execute()

                delivery = response.data[0] if response.data else {}
                results.append(BulkUploadResult(
                    filename=file.filename,
                    client_id=match.client_id,
                    success=True,
                    delivery_id=delivery.get("id"),
                ))

            except Exception as e:
                logger.error(f"Bulk upload failed for {file.filename}: {e}")
                results.append(BulkUploadResult(
                    filename=file.filename,
                    client_id=match.client_id,
                    success=False,
                    error=str(e),
                ))

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Bulk upload finished: {succeeded}/{len(results)} delivered")
        return results
