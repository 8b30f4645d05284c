# =============================================================================
# app/routers/reminders.py - Reminder Endpoints
# =============================================================================
# Reminder templates, one-off reminder emails, and scheduled reminders.
# All admin-only.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status

from app.auth import AuthUser, get_current_admin
from core.models.reminder import (
    ReminderTemplateCreate,
    ReminderTemplateUpdate,
    ScheduleReminderRequest,
    SendReminderRequest,
)
from core.services.reminder_service import ReminderService

router = APIRouter()

TemplateId = Annotated[UUID, Path(description="Reminder template UUID")]


# =============================================================================
# Templates
# =============================================================================

@router.get("/templates")
async def list_templates(
    admin: AuthUser = Depends(get_current_admin),
    active_only: Annotated[bool, Query()] = False,
):
    return {"templates": ReminderService.list_templates(active_only=active_only)}


@router.post("/templates", status_code=status.HTTP_201_CREATED)
async def create_template(
    request: ReminderTemplateCreate,
    admin: AuthUser = Depends(get_current_admin),
):
    return ReminderService.create_template(request.model_dump())


@router.get("/templates/{template_id}")
async def get_template(template_id: TemplateId, admin: AuthUser = Depends(get_current_admin)):
    return ReminderService.get_template(template_id)


@router.patch("/templates/{template_id}")
async def update_template(
    template_id: TemplateId,
    request: ReminderTemplateUpdate,
    admin: AuthUser = Depends(get_current_admin),
):
    return ReminderService.update_template(template_id, request.model_dump(exclude_unset=True))


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(template_id: TemplateId, admin: AuthUser = Depends(get_current_admin)):
    ReminderService.delete_template(template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Sending
# =============================================================================

@router.post("/send")
async def send_reminder(
    request: SendReminderRequest,
    admin: AuthUser = Depends(get_current_admin),
):
    """
    Email a reminder now.

    With template_id the template is rendered ({{client_name}} etc.);
    otherwise custom_subject / custom_message (or the defaults) are used.
    """
    email_response = ReminderService.send_reminder(
        client_email=request.client_email,
        client_name=request.client_name,
        client_id=request.client_id,
        template_id=request.template_id,
        custom_subject=request.custom_subject,
        custom_message=request.custom_message,
        custom_data=request.custom_data,
    )
    return {"success": True, "email_response": email_response}


# =============================================================================
# Scheduled reminders
# =============================================================================

@router.get("/scheduled")
async def list_scheduled(
    admin: AuthUser = Depends(get_current_admin),
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
):
    return {"reminders": ReminderService.list_scheduled(limit=limit)}


@router.post("/scheduled", status_code=status.HTTP_201_CREATED)
async def schedule_reminder(
    request: ScheduleReminderRequest,
    admin: AuthUser = Depends(get_current_admin),
):
    ReminderService.get_template(request.template_id, active_only=True)
    return ReminderService.schedule(
        request.client_id, request.template_id, request.scheduled_for, request.reminder_data
    )


@router.post("/scheduled/{reminder_id}/cancel")
async def cancel_reminder(
    reminder_id: Annotated[UUID, Path(description="Scheduled reminder UUID")],
    admin: AuthUser = Depends(get_current_admin),
):
    return ReminderService.cancel(reminder_id)


@router.post("/dispatch")
async def dispatch_due_reminders(admin: AuthUser = Depends(get_current_admin)):
    """Send due reminders now instead of waiting for the worker's next poll."""
    return ReminderService.dispatch_due_reminders()
