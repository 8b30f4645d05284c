# =============================================================================
# app/routers/documents.py - Client Document Endpoints
# =============================================================================
# Files a client (or an admin for them) uploads: current resume, job
# postings, reference material.
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, Query, Response, UploadFile, status

from app.auth import AuthUser, get_accessible_client, get_current_admin, get_current_user, require_client_access
from app.dependencies import read_upload
from app.exceptions import DocumentNotFoundError
from core.services.document_service import DocumentService

router = APIRouter()

DocumentId = Annotated[UUID, Path(description="Document UUID")]


@router.post("/clients/{client_id}/documents", status_code=status.HTTP_201_CREATED)
async def upload_document(
    client: dict[str, Any] = Depends(get_accessible_client),
    user: AuthUser = Depends(get_current_user),
    file: Annotated[UploadFile | None, File()] = None,
    document_type: Annotated[str, Form()] = "general",
):
    """
    Upload a document for a client.

    A `resume` upload also completes progress step 2.
    """
    uploaded = await read_upload(file) if file is not None else None
    return DocumentService.upload(
        client["id"], uploaded, document_type=document_type, uploaded_by=str(user.id)
    )


@router.get("/clients/{client_id}/documents")
async def list_documents(
    client: dict[str, Any] = Depends(get_accessible_client),
    include_archived: Annotated[bool, Query()] = False,
):
    """Newest first, each with a signed download `url`."""
    documents = DocumentService.list_for_client(client["id"], include_archived=include_archived)
    return {"documents": documents, "total": len(documents)}


@router.get("/documents/{document_id}/download")
async def download_document(document_id: DocumentId, user: AuthUser = Depends(get_current_user)):
    """The stored file, served as an attachment under its original name."""
    document = DocumentService.get_document(document_id)
    require_client_access(document["client_id"], user)

    content = DocumentService.download(document)
    filename = document.get("original_name") or document.get("file_name") or "document"
    return Response(
        content=content,
        media_type=document.get("mime_type") or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/documents/{document_id}/archive")
async def archive_document(document_id: DocumentId, admin: AuthUser = Depends(get_current_admin)):
    document = DocumentService.archive(document_id)
    if document is None:
        raise DocumentNotFoundError(str(document_id))
    return document
