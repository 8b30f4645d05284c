# =============================================================================
# core/services/document_service.py - Client Document Uploads
# =============================================================================
# Files clients (or admins on their behalf) upload: current resume, job
# postings, reference material. Each upload is a storage object plus a
# document_uploads row plus a file_uploaded history entry.
# =============================================================================

import logging
from typing import Any
from uuid import UUID, uuid4

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now, utc_now_iso
from core.models.progress import StepStatus
from core.services.delivery_service import UploadedFile, timestamp_ms
from core.services.history_service import HistoryService
from core.services.progress_service import ProgressService
from core.services.storage_service import DOCUMENTS_BUCKET, StorageService
from app.config import settings
from app.exceptions import AttachmentTooLargeError, DocumentNotFoundError, MissingFieldsError

logger = logging.getLogger(__name__)

# Uploading this document type completes progress step 2 (Upload Resume)
RESUME_DOCUMENT_TYPE = "resume"


class DocumentService:

    @staticmethod
    def upload(
        client_id: str | UUID,
        file: UploadedFile | None,
        document_type: str = "general",
        uploaded_by: str | None = None,
        bucket: str = DOCUMENTS_BUCKET,
    ) -> dict[str, Any]:
        """
        Store a client document.

        The storage object is removed again if the database insert fails.

        Returns:
            The document_uploads row

        Raises:
            MissingFieldsError: No file
            AttachmentTooLargeError: File exceeds MAX_ATTACHMENT_SIZE_MB
        """
        if file is None or not file.content:
            raise MissingFieldsError("Please select a file to upload", ["file"])
        if file.size > settings.max_attachment_size_bytes:
            raise AttachmentTooLargeError(
                file.filename, file.size / (1024 * 1024), settings.MAX_ATTACHMENT_SIZE_MB
            )

        client_id_str = normalize_uuid(client_id)
        stored_name = f"{timestamp_ms()}_{uuid4().hex[:10]}.{file.extension or 'bin'}"
        path = f"{client_id_str}/{stored_name}"

        StorageService.upload_bytes(bucket, path, file.content, file.content_type)

        record = {
            "client_id": client_id_str,
            "bucket_name": bucket,
            "file_path": path,
            "file_name": stored_name,
            "original_name": file.filename,
            "file_size": file.size,
            "mime_type": file.content_type or "application/octet-stream",
            "document_type": document_type,
            "status": "active",
            "uploaded_by": uploaded_by,
            "metadata": {"uploaded_at": utc_now_iso(), "file_extension": file.extension},
        }

        db = SupabaseClient.get_client()

        try:
            response = db.table("document_uploads").insert(record).execute()
            document = response.data[0] if response.data else record

        except Exception as e:
            logger.error(f"Database insert failed for {path}, removing upload: {e}")
            StorageService.delete_file(bucket, path)
            raise

        HistoryService.record(
            client_id_str,
            "file_uploaded",
            f"Uploaded {file.filename}",
            metadata={"document_id": document.get("id"), "document_type": document_type},
            created_by=uploaded_by,
        )

        if document_type == RESUME_DOCUMENT_TYPE:
            ProgressService.update_step(client_id_str, 2, StepStatus.COMPLETED)

        logger.info(f"Uploaded document {file.filename} for client {client_id_str}")
        return document

    @staticmethod
    def list_for_client(client_id: str | UUID, include_archived: bool = False) -> list[dict[str, Any]]:
        """
        A client's documents, newest first, each with a download `url`.

        Signed URLs are used; the public URL is the fallback.
        """
        db = SupabaseClient.get_client()

        try:
            query = db.table("document_uploads").select("*").eq("client_id", normalize_uuid(client_id))
            if not include_archived:
                query = query.neq("status", "archived")
            response = query.order("created_at", desc=True).execute()
            documents = response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch documents for client {client_id}: {e}")
            raise

        for document in documents:
            bucket = document.get("bucket_name") or DOCUMENTS_BUCKET
            path = document.get("file_path")
            document["url"] = (
                StorageService.create_signed_url(bucket, path)
                or StorageService.get_public_url(bucket, path)
            ) if path else None

        return documents

    @staticmethod
    def get_document(document_id: str | UUID) -> dict[str, Any]:
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("document_uploads")
                .select("*")
                .eq("id", normalize_uuid(document_id))
                .execute()
            )

        except Exception as e:
            logger.error(f"Failed to fetch document {document_id}: {e}")
            raise

        if not response.data:
            raise DocumentNotFoundError(normalize_uuid(document_id))
        return response.data[0]

    @staticmethod
    def download(document: dict[str, Any]) -> bytes:
        """
        Raw content of a stored document.

        Raises:
            StorageDownloadError: The object is missing or storage failed
        """
        bucket = document.get("bucket_name") or DOCUMENTS_BUCKET
        return StorageService.download(bucket, document["file_path"])

    @staticmethod
    def archive(document_id: str | UUID) -> dict[str, Any] | None:
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("document_uploads")
                .update({"status": "archived", "updated_at": utc_now().isoformat()})
                .eq("id", normalize_uuid(document_id))
                .execute()
            )
            logger.info(f"Archived document {document_id}")
            return response.data[0] if response.data else None

        except Exception as e:
            logger.error(f"Failed to archive document {document_id}: {e}")
            raise
