# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors tell HOW to fix, not just WHAT failed.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


class PortalException(Exception):
    """
    Base exception for the client portal API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PORTAL_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Lookup Exceptions
# =============================================================================

class ClientNotFoundError(PortalException):
    """Raised when a client ID doesn't exist."""

    def __init__(self, client_id: str):
        super().__init__(
            message=f"Client not found: {client_id}",
            code="CLIENT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the client_id is correct",
            details={"client_id": client_id}
        )


class DeliveryNotFoundError(PortalException):
    """Raised when a delivery ID doesn't exist."""

    def __init__(self, delivery_id: str):
        super().__init__(
            message=f"Delivery not found: {delivery_id}",
            code="DELIVERY_NOT_FOUND",
            status_code=404,
            suggestion="Check that the delivery_id is correct",
            details={"delivery_id": delivery_id}
        )


class RevisionRequestNotFoundError(PortalException):
    """Raised when a revision request ID doesn't exist."""

    def __init__(self, revision_id: str):
        super().__init__(
            message=f"Revision request not found: {revision_id}",
            code="REVISION_NOT_FOUND",
            status_code=404,
            details={"revision_id": revision_id}
        )


class TemplateNotFoundError(PortalException):
    """Raised when a reminder template is missing or inactive."""

    def __init__(self, template_id: str):
        super().__init__(
            message="Template not found",
            code="TEMPLATE_NOT_FOUND",
            status_code=404,
            suggestion="Check that the template exists and is active",
            details={"template_id": template_id}
        )


class ServiceTypeNotFoundError(PortalException):
    """Raised when a service type ID doesn't exist."""

    def __init__(self, service_type_id: str):
        super().__init__(
            message=f"Service type not found: {service_type_id}",
            code="SERVICE_TYPE_NOT_FOUND",
            status_code=404,
            details={"service_type_id": service_type_id}
        )


class TrainingMaterialNotFoundError(PortalException):
    """Raised when a training material ID doesn't exist."""

    def __init__(self, material_id: str):
        super().__init__(
            message=f"Training material not found: {material_id}",
            code="TRAINING_MATERIAL_NOT_FOUND",
            status_code=404,
            details={"material_id": material_id}
        )


class DocumentNotFoundError(PortalException):
    """Raised when a client document ID doesn't exist."""

    def __init__(self, document_id: str):
        super().__init__(
            message=f"Document not found: {document_id}",
            code="DOCUMENT_NOT_FOUND",
            status_code=404,
            details={"document_id": document_id}
        )


class NotificationNotFoundError(PortalException):
    """Raised for a missing notification or notification rule."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(
            message=f"{kind} not found: {item_id}",
            code="NOTIFICATION_NOT_FOUND",
            status_code=404,
            details={"id": item_id}
        )


# =============================================================================
# Validation Exceptions
# =============================================================================

class MissingFieldsError(PortalException):
    """Raised when required request fields are absent or blank."""

    def __init__(self, message: str, fields: list[str]):
        super().__init__(
            message=message,
            code="MISSING_FIELDS",
            status_code=400,
            details={"fields": fields}
        )


class InvalidStatusError(PortalException):
    """Raised when a status string isn't one of the known values."""

    def __init__(self, status: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid status: {status}",
            code="INVALID_STATUS",
            status_code=400,
            suggestion=f"Use one of: {', '.join(allowed)}",
            details={"status": status, "allowed": allowed}
        )


class AttachmentTooLargeError(PortalException):
    """Raised when an uploaded file exceeds the size limit."""

    def __init__(self, filename: str, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {filename} ({size_mb:.1f}MB, max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload files smaller than {max_mb}MB",
            details={"filename": filename, "size_mb": size_mb, "max_mb": max_mb}
        )


# =============================================================================
# Access Exceptions
# =============================================================================

class AccessDeniedError(PortalException):
    """Raised when a client user touches another client's records."""

    def __init__(self, client_id: str):
        super().__init__(
            message="You do not have access to this client",
            code="ACCESS_DENIED",
            status_code=403,
            details={"client_id": client_id}
        )


class AdminRequiredError(PortalException):
    """Raised when a non-admin calls an admin endpoint."""

    def __init__(self):
        super().__init__(
            message="Admin access required",
            code="ADMIN_REQUIRED",
            status_code=403,
            suggestion="Sign in with an account that has the admin role",
        )


# =============================================================================
# Integration Exceptions
# =============================================================================

class IntegrationNotConfiguredError(PortalException):
    """Raised when an external integration has no credentials."""

    def __init__(self, integration: str, env_vars: list[str]):
        super().__init__(
            message=f"{integration} configuration not found",
            code="INTEGRATION_NOT_CONFIGURED",
            status_code=500,
            suggestion=f"Set {', '.join(env_vars)} in the environment",
            details={"integration": integration}
        )


class ExternalServiceError(PortalException):
    """Raised when a third-party API call fails."""

    def __init__(
        self,
        service: str,
        error: str,
        status_code: int = 502,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=error,
            code="EXTERNAL_SERVICE_ERROR",
            status_code=status_code,
            details={"service": service, **(details or {})}
        )


# =============================================================================
# Storage Exceptions
# =============================================================================

class StorageUploadError(PortalException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


class StorageDownloadError(PortalException):
    """Raised when file download from storage fails."""

    def __init__(self, path: str, error: str):
        super().__init__(
            message=f"Failed to download file from storage: {error}",
            code="STORAGE_DOWNLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"path": path, "error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def portal_exception_handler(
    request: Request,
    exc: PortalException
) -> JSONResponse:
    """
    Convert PortalException to JSON response.

    Returns structured error with:
    - error: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def application_error_handler(
    request: Request,
    exc: ApplicationError
) -> JSONResponse:
    """
    Library-level failures (email, SMS, Calendly, OpenAI, database).

    Answered as 500 with the same shape as PortalException.
    """
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    content: dict[str, Any] = {"error": exc.message, "code": exc.code}
    if exc.suggestion:
        content["suggestion"] = exc.suggestion
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=500, content=content)


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected: logged with traceback, answered as a generic 500."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Convert Pydantic validation errors to a flat 422 response."""
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": errors if isinstance(errors, str) else [
                {"loc": list(e.get("loc", [])), "msg": e.get("msg")} for e in errors
            ],
        }
    )
