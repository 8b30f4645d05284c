# =============================================================================
# app/routers/integrations.py - Third-Party Integration Endpoints
# =============================================================================
# Admin tools backed by external APIs: Twilio SMS, Calendly appointments,
# OpenAI resume parsing.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_admin
from app.config import settings
from app.exceptions import ExternalServiceError, IntegrationNotConfiguredError, MissingFieldsError
from core.models.integration import ResumeParseRequest, SmsRequest
from lib.calendly_client import CalendlyError, get_calendly_client
from lib.resume_parser import ResumeParser
from lib.sms_client import SmsError, get_sms_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sms")
async def send_sms(
    request: SmsRequest,
    admin: AuthUser = Depends(get_current_admin),
):
    """
    Send a text message.

    400 when `to` or `message` is missing, 500 when Twilio isn't
    configured, 400 with Twilio's error body when Twilio refuses.
    """
    missing = [f for f in ("to", "message") if not getattr(request, f)]
    if missing:
        raise MissingFieldsError("Missing required fields: to, message", missing)

    sms_client = get_sms_client()
    if sms_client is None:
        raise IntegrationNotConfiguredError(
            "Twilio", ["TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER"]
        )

    try:
        result = sms_client.send(request.to, request.message)
    except SmsError as e:
        raise ExternalServiceError("twilio", e.message, status_code=400, details=e.details)

    return {"success": True, **result}


@router.get("/calendly/appointments")
async def list_appointments(
    admin: AuthUser = Depends(get_current_admin),
    days: Annotated[int | None, Query(ge=1, le=365)] = None,
):
    """Upcoming active Calendly appointments (next CALENDLY_LOOKAHEAD_DAYS days by default)."""
    calendly = get_calendly_client()
    if calendly is None:
        raise IntegrationNotConfiguredError("Calendly", ["CALENDLY_ACCESS_TOKEN"])

    try:
        return calendly.list_upcoming_appointments(days=days or settings.CALENDLY_LOOKAHEAD_DAYS)
    except CalendlyError as e:
        raise ExternalServiceError("calendly", e.message, status_code=e.status_code)


@router.post("/resume/parse")
async def parse_resume(
    request: ResumeParseRequest,
    admin: AuthUser = Depends(get_current_admin),
):
    """Extract contact details, skills and history from resume text."""
    if not request.document_text or not request.document_text.strip():
        raise MissingFieldsError("Document text is required", ["document_text"])

    parser = ResumeParser()
    parsed = parser.parse(request.document_text, request.extraction_prompt)
    return {"parsedData": parsed}
