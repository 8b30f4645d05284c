# =============================================================================
# app/routers/deliveries.py - Delivery Endpoints
# =============================================================================
# Admins upload finished documents (one at a time or in bulk); clients
# review them: approve, request a revision, comment.
# =============================================================================

import logging
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status
from pydantic import BaseModel, Field

from app.auth import AuthUser, get_accessible_client, get_current_admin, get_current_user, require_client_access
from app.dependencies import read_upload, read_uploads
from core.models.delivery import BulkUploadMatch, BulkUploadResult, CommentCreate, DeliveryStatusUpdate
from core.services.bulk_upload import BulkUploadService
from core.services.delivery_service import DeliveryService
from workers.tasks import send_delivery_notification

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class BulkPreviewRequest(BaseModel):
    filenames: list[str] = Field(..., min_length=1)


class BulkPreviewResponse(BaseModel):
    matched: list[BulkUploadMatch]
    unmatched: list[BulkUploadMatch]


class BulkUploadResponse(BaseModel):
    results: list[BulkUploadResult]
    succeeded: int
    failed: int


def _delivery_for(delivery_id: UUID, user: AuthUser) -> dict[str, Any]:
    delivery = DeliveryService.get_delivery(delivery_id)
    require_client_access(delivery["client_id"], user)
    return delivery


# =============================================================================
# Admin: upload and manage
# =============================================================================

@router.get("/deliveries")
async def list_deliveries(admin: AuthUser = Depends(get_current_admin)):
    """Every delivery with client name/email, most recently delivered first."""
    deliveries = DeliveryService.list_all()
    return {"deliveries": deliveries, "total": len(deliveries)}


@router.post("/deliveries", status_code=status.HTTP_201_CREATED)
async def create_delivery(
    admin: AuthUser = Depends(get_current_admin),
    client_id: Annotated[str | None, Form()] = None,
    document_title: Annotated[str | None, Form()] = None,
    document_type: Annotated[str | None, Form()] = None,
    file: Annotated[UploadFile | None, File(description="Finished document")] = None,
):
    """
    Upload a finished document for a client.

    The client is notified (in-app, email, SMS) by a background task.
    """
    uploaded = await read_upload(file) if file is not None else None
    delivery = DeliveryService.create_delivery(client_id, document_title, uploaded, document_type)

    try:
        task = send_delivery_notification.delay(
            delivery["id"], delivery["client_id"], delivery["document_title"], "delivery_ready"
        )
        logger.info(f"Queued delivery notification {task.id} for delivery {delivery['id']}")
    except Exception as e:
        logger.error(f"Failed to queue notification for delivery {delivery['id']}: {e}")

    return delivery


@router.put("/deliveries/{delivery_id}/status")
async def set_delivery_status(
    delivery_id: Annotated[UUID, Path(description="Delivery UUID")],
    request: DeliveryStatusUpdate,
    admin: AuthUser = Depends(get_current_admin),
):
    return DeliveryService.set_status(delivery_id, request.status)


@router.post("/deliveries/bulk/preview", response_model=BulkPreviewResponse)
async def preview_bulk_upload(
    request: BulkPreviewRequest,
    admin: AuthUser = Depends(get_current_admin),
):
    """Match filenames to clients without uploading anything."""
    return BulkUploadService.preview(request.filenames)


@router.post("/deliveries/bulk", response_model=BulkUploadResponse)
async def bulk_upload(
    files: Annotated[list[UploadFile], File(description="Files named after clients")],
    admin: AuthUser = Depends(get_current_admin),
):
    """
    Deliver many files at once.

    Each file is matched to a client by name (e.g. "Jane_Doe_Resume.pdf").
    A failing or unmatched file is reported and the rest continue.
    """
    results = BulkUploadService.upload_matched(await read_uploads(files))
    succeeded = sum(1 for r in results if r.success)
    return BulkUploadResponse(results=results, succeeded=succeeded, failed=len(results) - succeeded)


# =============================================================================
# Client portal
# =============================================================================

@router.get("/clients/{client_id}/deliveries")
async def list_client_deliveries(client: dict[str, Any] = Depends(get_accessible_client)):
    deliveries = DeliveryService.list_for_client(client["id"])
    return {"deliveries": deliveries, "total": len(deliveries)}


@router.get("/clients/{client_id}/deliveries/checklist")
async def delivery_checklist(client: dict[str, Any] = Depends(get_accessible_client)):
    """Pending-review and approved counts plus the delivered resume."""
    return DeliveryService.checklist(client["id"])


@router.post("/deliveries/{delivery_id}/approve")
async def approve_delivery(
    delivery_id: Annotated[UUID, Path(description="Delivery UUID")],
    user: AuthUser = Depends(get_current_user),
):
    _delivery_for(delivery_id, user)
    return DeliveryService.approve(delivery_id, approved_by=str(user.id))


@router.post("/deliveries/{delivery_id}/revisions", status_code=status.HTTP_201_CREATED)
async def request_revision(
    delivery_id: Annotated[UUID, Path(description="Delivery UUID")],
    user: AuthUser = Depends(get_current_user),
    reasons: Annotated[list[str] | None, Form(description="RevisionReason values")] = None,
    description: Annotated[str | None, Form()] = None,
    custom_reason: Annotated[str | None, Form()] = None,
    attachments: Annotated[list[UploadFile] | None, File()] = None,
):
    """
    Ask for changes to a delivered document.

    At least one reason and a description are required; attachments are
    limited to MAX_ATTACHMENT_SIZE_MB each.
    """
    _delivery_for(delivery_id, user)
    return DeliveryService.request_revision(
        delivery_id,
        reasons or [],
        description,
        custom_reason=custom_reason,
        attachments=await read_uploads(attachments),
    )


@router.get("/deliveries/{delivery_id}/comments")
async def list_comments(
    delivery_id: Annotated[UUID, Path(description="Delivery UUID")],
    user: AuthUser = Depends(get_current_user),
):
    _delivery_for(delivery_id, user)
    comments = DeliveryService.list_comments(delivery_id)
    return {"comments": comments, "total": len(comments)}


@router.post("/deliveries/{delivery_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    delivery_id: Annotated[UUID, Path(description="Delivery UUID")],
    request: CommentCreate,
    user: AuthUser = Depends(get_current_user),
):
    _delivery_for(delivery_id, user)
    return DeliveryService.add_comment(
        delivery_id, str(user.id), request.content, is_admin=user.is_admin
    )
