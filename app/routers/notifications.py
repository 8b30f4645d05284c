# =============================================================================
# app/routers/notifications.py - Notification Endpoints
# =============================================================================
# In-app notifications for the signed-in user, the admin "notify client
# about a delivery" action, and notification-rule settings.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_admin, get_current_user
from app.exceptions import NotificationNotFoundError
from core.models.message import DeliveryNotificationRequest, NotificationRuleUpdate
from core.services.notification_service import NotificationService

router = APIRouter()


@router.post("/notifications/delivery")
async def send_delivery_notification(
    request: DeliveryNotificationRequest,
    admin: AuthUser = Depends(get_current_admin),
):
    """
    Notify a client that a document is ready or a revision is complete.

    Always creates the in-app notification; email and SMS are best-effort
    and reported as email_sent / sms_sent.
    """
    return NotificationService.send_delivery_notification(
        request.delivery_id,
        request.client_id,
        request.document_title,
        request.notification_type,
    )


@router.get("/notifications")
async def list_notifications(
    user: AuthUser = Depends(get_current_user),
    unread_only: Annotated[bool, Query()] = False,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
):
    notifications = NotificationService.list_for_user(user.id, unread_only=unread_only, limit=limit)
    return {
        "notifications": notifications,
        "unread_count": sum(1 for n in notifications if not n.get("read_at")),
    }


@router.post("/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: Annotated[UUID, Path(description="Notification UUID")],
    user: AuthUser = Depends(get_current_user),
):
    notification = NotificationService.mark_read(notification_id, user.id)
    if notification is None:
        raise NotificationNotFoundError("Notification", str(notification_id))
    return notification


@router.get("/notification-rules")
async def list_rules(admin: AuthUser = Depends(get_current_admin)):
    return {"rules": NotificationService.list_rules(admin.id)}


@router.patch("/notification-rules/{rule_id}")
async def update_rule(
    rule_id: Annotated[UUID, Path(description="Rule UUID")],
    request: NotificationRuleUpdate,
    admin: AuthUser = Depends(get_current_admin),
):
    rule = NotificationService.update_rule(rule_id, request.model_dump(exclude_unset=True))
    if rule is None:
        raise NotificationNotFoundError("Notification rule", str(rule_id))
    return rule


@router.post("/notification-rules/{rule_id}/toggle")
async def toggle_rule(
    rule_id: Annotated[UUID, Path(description="Rule UUID")],
    admin: AuthUser = Depends(get_current_admin),
):
    rule = NotificationService.toggle_rule(rule_id)
    if rule is None:
        raise NotificationNotFoundError("Notification rule", str(rule_id))
    return rule
