# =============================================================================
# core/models/integration.py - Proxy Endpoint Schemas
# =============================================================================
# Request bodies for the endpoints that forward to one external API
# (SMS, resume parsing, account emails, auth user deletion).
#
# Fields the endpoint checks itself (answering 400, not 422) are Optional.
# =============================================================================

from pydantic import BaseModel, Field


class SmsRequest(BaseModel):
    """
    Example:
        {"to": "+15551234567", "message": "Your resume is ready!"}
    """

    to: str | None = None
    message: str | None = None


class ResumeParseRequest(BaseModel):
    document_text: str | None = Field(
        default=None,
        description="Plain text extracted from the uploaded resume"
    )
    extraction_prompt: str | None = None


class OnboardingEmailRequest(BaseModel):
    """Welcome email with service details and temporary login."""

    client_name: str
    client_email: str
    service_name: str
    service_price: str | None = None
    estimated_delivery_date: str | None = None
    temp_password: str = Field(..., min_length=1)
    login_url: str | None = None


class LoginCredentialsRequest(BaseModel):
    client_name: str
    client_email: str
    temp_password: str = Field(..., min_length=1)
    login_url: str | None = None


class DeleteAuthUserRequest(BaseModel):
    user_id: str | None = None
