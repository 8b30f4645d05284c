# =============================================================================
# app/routers/revisions.py - Revision Request Endpoints
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, get_accessible_client, get_current_admin
from core.models.delivery import RevisionStatusUpdate
from core.services.revision_service import RevisionService

router = APIRouter()


@router.get("/revisions")
async def list_revisions(admin: AuthUser = Depends(get_current_admin)):
    """All revision requests, newest first, with client name and document title."""
    revisions = RevisionService.list_all()
    return {"revisions": revisions, "total": len(revisions)}


@router.get("/clients/{client_id}/revisions")
async def list_client_revisions(client: dict[str, Any] = Depends(get_accessible_client)):
    revisions = RevisionService.list_for_client(client["id"])
    return {"revisions": revisions, "total": len(revisions)}


@router.put("/revisions/{revision_id}/status")
async def update_revision_status(
    revision_id: Annotated[UUID, Path(description="Revision request UUID")],
    request: RevisionStatusUpdate,
    admin: AuthUser = Depends(get_current_admin),
):
    """
    Move a revision request along.

    `completed` puts the delivery back to delivered and notifies the client.
    """
    return RevisionService.update_status(revision_id, request.status)
