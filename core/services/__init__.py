# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .account_service import AccountService
from .bulk_upload import BulkUploadService
from .client_service import ClientService
from .command_center import CommandCenterFilters, CommandCenterService
from .delivery_service import DeliveryService, UploadedFile
from .digest_service import DigestService
from .document_service import DocumentService
from .export_service import ExportService
from .history_service import HistoryService
from .message_service import MessageService
from .notification_service import NotificationService
from .progress_service import ProgressService
from .reminder_service import ReminderService
from .revision_service import RevisionService
from .service_type_service import ServiceTypeService
from .storage_service import StorageService

__all__ = [
    "AccountService",
    "BulkUploadService",
    "ClientService",
    "CommandCenterFilters",
    "CommandCenterService",
    "DeliveryService",
    "DigestService",
    "DocumentService",
    "ExportService",
    "HistoryService",
    "MessageService",
    "NotificationService",
    "ProgressService",
    "ReminderService",
    "RevisionService",
    "ServiceTypeService",
    "StorageService",
    "UploadedFile",
]
