# =============================================================================
# app/routers/command_center.py - Admin Overview Endpoints
# =============================================================================

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_admin
from core.models.client import CommandCenterResponse, Urgency
from core.services.command_center import CommandCenterFilters, CommandCenterService
from core.services.history_service import HistoryService

router = APIRouter()


@router.get("/command-center", response_model=CommandCenterResponse)
async def command_center(
    admin: AuthUser = Depends(get_current_admin),
    search: Annotated[str | None, Query(description="Name, email or service name")] = None,
    status: Annotated[str | None, Query(description="Client status")] = None,
    due_date: Annotated[
        Literal["today", "tomorrow", "overdue", "this-week"] | None, Query()
    ] = None,
    package: Annotated[str | None, Query(description="Service name contains")] = None,
    urgency: Annotated[Urgency | None, Query()] = None,
    action_needed: Annotated[bool, Query()] = False,
):
    """
    Every client with urgency, next action, file count and last activity.

    Filters combine with AND; the summary always counts all clients.
    """
    filters = CommandCenterFilters(
        search=search,
        status=status,
        due_date=due_date,
        package=package,
        urgency=urgency.value if urgency else None,
        action_needed=action_needed,
    )
    return CommandCenterService.build_overview(filters)


@router.get("/activity")
async def recent_activity(
    admin: AuthUser = Depends(get_current_admin),
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """Recent uploads, messages and onboardings; `unread` = last 24 hours."""
    activity = HistoryService.recent_activity(limit=limit)
    return {
        "activity": activity,
        "unread_count": sum(1 for a in activity if a["unread"]),
    }
