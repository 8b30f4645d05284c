# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - client.py: Client CRUD, history and command center schemas
# - delivery.py: Delivery, revision request and bulk upload schemas
# - message.py: Messaging and notification schemas
# - reminder.py: Reminder template and daily digest schemas
# - progress.py: Progress steps and intake form
# - service_type.py: Service catalogue schemas
# - integration.py: Proxy endpoint request bodies
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Client Models
# -----------------------------------------------------------------------------
from .client import (
    ClientCreate,
    ClientStatus,
    ClientUpdate,
    CommandCenterResponse,
    CommandCenterRow,
    CommandCenterSummary,
    HistoryAction,
    HistoryEntry,
    PaymentStatus,
    RushToggle,
    ServiceChange,
    Urgency,
)

# -----------------------------------------------------------------------------
# Delivery Models
# -----------------------------------------------------------------------------
from .delivery import (
    BulkUploadMatch,
    BulkUploadResult,
    CommentCreate,
    DeliveryStatus,
    DeliveryStatusUpdate,
    DocumentType,
    RevisionReason,
    RevisionStatus,
    RevisionStatusUpdate,
)

# -----------------------------------------------------------------------------
# Message & Notification Models
# -----------------------------------------------------------------------------
from .message import (
    DeliveryNotificationRequest,
    MessageCreate,
    NotificationRuleUpdate,
    NotificationType,
    SenderType,
)

# -----------------------------------------------------------------------------
# Reminder & Digest Models
# -----------------------------------------------------------------------------
from .reminder import (
    DigestPreferences,
    ReminderStatus,
    ReminderTemplateCreate,
    ReminderTemplateUpdate,
    ScheduleReminderRequest,
    SendDigestRequest,
    SendReminderRequest,
)

# -----------------------------------------------------------------------------
# Progress Models
# -----------------------------------------------------------------------------
from .progress import (
    PROGRESS_STEPS,
    STEP_CLIENT_FLAGS,
    IntakeSubmission,
    StepStatus,
    StepUpdate,
)

# -----------------------------------------------------------------------------
# Service Catalogue & Integration Models
# -----------------------------------------------------------------------------
from .service_type import (
    MaterialAssignment,
    ServiceTypeCreate,
    ServiceTypeUpdate,
)
from .integration import (
    DeleteAuthUserRequest,
    LoginCredentialsRequest,
    OnboardingEmailRequest,
    ResumeParseRequest,
    SmsRequest,
)

# -----------------------------------------------------------------------------
# __all__ - Explicit public API
# -----------------------------------------------------------------------------
__all__ = [
    # Client
    "ClientCreate",
    "ClientStatus",
    "ClientUpdate",
    "CommandCenterResponse",
    "CommandCenterRow",
    "CommandCenterSummary",
    "HistoryAction",
    "HistoryEntry",
    "PaymentStatus",
    "RushToggle",
    "ServiceChange",
    "Urgency",
    # Delivery
    "BulkUploadMatch",
    "BulkUploadResult",
    "CommentCreate",
    "DeliveryStatus",
    "DeliveryStatusUpdate",
    "DocumentType",
    "RevisionReason",
    "RevisionStatus",
    "RevisionStatusUpdate",
    # Message
    "DeliveryNotificationRequest",
    "MessageCreate",
    "NotificationRuleUpdate",
    "NotificationType",
    "SenderType",
    # Reminder
    "DigestPreferences",
    "ReminderStatus",
    "ReminderTemplateCreate",
    "ReminderTemplateUpdate",
    "ScheduleReminderRequest",
    "SendDigestRequest",
    "SendReminderRequest",
    # Progress
    "PROGRESS_STEPS",
    "STEP_CLIENT_FLAGS",
    "IntakeSubmission",
    "StepStatus",
    "StepUpdate",
    # Service types
    "MaterialAssignment",
    "ServiceTypeCreate",
    "ServiceTypeUpdate",
    # Integrations
    "DeleteAuthUserRequest",
    "LoginCredentialsRequest",
    "OnboardingEmailRequest",
    "ResumeParseRequest",
    "SmsRequest",
]
