# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles file upload/download operations with Supabase Storage.
#
# Buckets:
#   client-deliveries   - bulk-uploaded finished documents
#   resumes             - single deliveries and client resume uploads
#   intake-attachments  - files attached to revision requests
#   client-documents    - general client document uploads
#   training-materials  - training files shown to clients
#   training-thumbnails - optional preview images for training files
# =============================================================================

import logging

from lib.supabase_client import SupabaseClient
from app.exceptions import StorageUploadError, StorageDownloadError

logger = logging.getLogger(__name__)

DELIVERIES_BUCKET = "client-deliveries"
RESUMES_BUCKET = "resumes"
ATTACHMENTS_BUCKET = "intake-attachments"
DOCUMENTS_BUCKET = "client-documents"
TRAINING_MATERIALS_BUCKET = "training-materials"
TRAINING_THUMBNAILS_BUCKET = "training-thumbnails"

# Signed URLs stay valid for one hour
SIGNED_URL_TTL_SECONDS = 3600


class StorageService:
    """
    Service for Supabase Storage operations.

    Every method takes the bucket explicitly; paths are bucket-relative.
    """

    @staticmethod
    def upload_bytes(
        bucket: str,
        path: str,
        content: bytes,
        content_type: str | None = None,
        upsert: bool = False,
    ) -> str:
        """
        Upload raw file content to storage.

        Args:
            bucket: Storage bucket name
            path: Path inside the bucket
            content: File bytes
            content_type: MIME type (defaults to application/octet-stream)
            upsert: Overwrite an existing object at the same path

        Returns:
            Storage path where file was uploaded

        Raises:
            StorageUploadError: If upload fails
        """
        client = SupabaseClient.get_client()

        try:
            client.storage.from_(bucket).upload(
                path=path,
                file=content,
                file_options={
                    "content-type": content_type or "application/octet-stream",
                    "upsert": "true" if upsert else "false",
                }
            )

            logger.info(f"Uploaded file to storage: {bucket}/{path}")
            return path

        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e))

    @staticmethod
    def download(bucket: str, path: str) -> bytes:
        """
        Download raw file content from storage.

        Raises:
            StorageDownloadError: If download fails
        """
        client = SupabaseClient.get_client()

        try:
            response = client.storage.from_(bucket).download(path)
            logger.info(f"Downloaded file from storage: {bucket}/{path}")
            return response

        except Exception as e:
            logger.error(f"Storage download failed: {e}")
            raise StorageDownloadError(path, str(e))

    @staticmethod
    def get_public_url(bucket: str, path: str) -> str:
        """
        Get a public URL for a storage file.

        Args:
            bucket: Storage bucket name
            path: Path in storage bucket

        Returns:
            Public URL string
        """
        client = SupabaseClient.get_client()

        try:
            return client.storage.from_(bucket).get_public_url(path)
        except Exception as e:
            logger.error(f"Failed to get public URL: {e}")
            raise

    @staticmethod
    def create_signed_url(
        bucket: str,
        path: str,
        expires_in: int = SIGNED_URL_TTL_SECONDS,
    ) -> str | None:
        """
        Create a time-limited download URL.

        Returns:
            Signed URL, or None when storage refuses (callers fall back to
            the public URL)
        """
        client = SupabaseClient.get_client()

        try:
            result = client.storage.from_(bucket).create_signed_url(path, expires_in)
        except Exception as e:
            logger.error(f"Failed to create signed URL for {bucket}/{path}: {e}")
            return None

        if isinstance(result, dict):
            return result.get("signedURL") or result.get("signedUrl")
        return None

    @staticmethod
    def delete_file(bucket: str, path: str) -> bool:
        """
        Delete a file from storage.

        Returns:
            True if deleted successfully
        """
        client = SupabaseClient.get_client()

        try:
            client.storage.from_(bucket).remove([path])
            logger.info(f"Deleted file from storage: {bucket}/{path}")
            return True

        except Exception as e:
            logger.error(f"Failed to delete file: {e}")
            return False

    @staticmethod
    def list_files(bucket: str, prefix: str = "") -> list[dict]:
        """List objects under a folder prefix."""
        client = SupabaseClient.get_client()

        try:
            response = client.storage.from_(bucket).list(prefix)
            return response or []

        except Exception as e:
            logger.error(f"Failed to list files: {e}")
            return []

    @staticmethod
    def delete_folder(bucket: str, folder: str) -> int:
        """
        Delete every object directly inside a folder.

        Returns:
            Number of objects removed (0 if the folder is empty or the
            removal fails)
        """
        folder = folder.strip("/")
        paths = [
            f"{folder}/{item['name']}"
            for item in StorageService.list_files(bucket, folder)
            if item.get("name")
        ]
        if not paths:
            return 0

        client = SupabaseClient.get_client()

        try:
            client.storage.from_(bucket).remove(paths)
            logger.info(f"Deleted {len(paths)} files from storage: {bucket}/{folder}")
            return len(paths)

        except Exception as e:
            logger.error(f"Failed to delete folder {bucket}/{folder}: {e}")
            return 0
