# =============================================================================
# core/models/delivery.py - Delivery & Revision Schemas
# =============================================================================
# A delivery is one finished document (resume, cover letter, ...) handed to
# a client for review. Status moves only through explicit user actions:
#
#   pending -> delivered -> approved
#                       \-> revision_requested -> (revised) -> delivered
#
# The only check on a status change is that the target is a known value.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    APPROVED = "approved"
    REVISION_REQUESTED = "revision_requested"


class RevisionStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class DocumentType(str, Enum):
    """Kinds of documents produced for a client."""
    RESUME = "resume"
    COVER_LETTER = "cover_letter"
    THANK_YOU_LETTER = "thank_you_letter"
    LINKEDIN = "linkedin"
    BIO = "bio"
    OUTREACH_LETTER = "outreach_letter"


class RevisionReason(str, Enum):
    """
    Checkbox reasons on the revision request form.

    `other` is the only reason that keeps the free-text custom_reason.
    """
    UPDATE_INFO = "update_info"
    INCORRECT = "incorrect"
    TONE_FORMAT = "tone_format"
    TARGET_ROLE = "target_role"
    OTHER = "other"


class DeliveryStatusUpdate(BaseModel):
    status: DeliveryStatus


class RevisionStatusUpdate(BaseModel):
    status: RevisionStatus


class CommentCreate(BaseModel):
    """
    Schema for posting a comment on a delivery.

    Example:
        {"content": "Could you shorten the summary?"}
    """

    content: str = Field(..., description="Comment text (must not be blank)")


class BulkUploadMatch(BaseModel):
    """Result of matching one bulk-upload filename to a client."""

    filename: str
    extracted_name: str | None = None
    client_id: str | None = None
    client_name: str | None = None
    document_type: DocumentType


class BulkUploadResult(BaseModel):
    """Per-file outcome of a bulk upload; failures don't stop the batch."""

    filename: str
    client_id: str | None = None
    success: bool
    delivery_id: str | None = None
    error: str | None = None
