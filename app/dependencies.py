# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# Helpers shared by the routers that accept multipart uploads.
# =============================================================================

from fastapi import UploadFile

from core.services.delivery_service import UploadedFile


async def read_upload(upload: UploadFile) -> UploadedFile:
    """Read a multipart upload into memory for the service layer."""
    content = await upload.read()
    return UploadedFile(
        filename=upload.filename or "upload",
        content=content,
        content_type=upload.content_type,
    )


async def read_uploads(uploads: list[UploadFile] | None) -> list[UploadedFile]:
    return [await read_upload(u) for u in (uploads or []) if u.filename]
