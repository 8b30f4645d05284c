# =============================================================================
# app/routers/progress.py - Progress Tracker & Intake Form Endpoints
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, status

from app.auth import AuthUser, get_accessible_client, get_current_user
from core.models.progress import IntakeSubmission, StepUpdate
from core.services.progress_service import ProgressService, completion_percent

router = APIRouter()


@router.get("/clients/{client_id}/progress")
async def get_progress(client: dict[str, Any] = Depends(get_accessible_client)):
    """The five steps in order, each with `accessible`, plus percent complete."""
    steps = ProgressService.list_steps(client["id"])
    return {"steps": steps, "percent_complete": completion_percent(steps)}


@router.put("/clients/{client_id}/progress/{step_number}")
async def update_step(
    step_number: Annotated[int, Path(ge=1, le=5, description="Step 1-5")],
    request: StepUpdate,
    client: dict[str, Any] = Depends(get_accessible_client),
):
    """
    Mark a step in_progress or completed.

    Completing steps 1-3 sets the matching client flag and, once all three
    are done, starts step 4.
    """
    steps = ProgressService.update_step(client["id"], step_number, request.status, request.metadata)
    return {"steps": steps, "percent_complete": completion_percent(steps)}


@router.post("/clients/{client_id}/intake", status_code=status.HTTP_201_CREATED)
async def submit_intake(
    request: IntakeSubmission,
    client: dict[str, Any] = Depends(get_accessible_client),
    user: AuthUser = Depends(get_current_user),
):
    return ProgressService.submit_intake_form(client["id"], request.answers, submitted_by=str(user.id))


@router.get("/clients/{client_id}/intake")
async def get_intake(client: dict[str, Any] = Depends(get_accessible_client)):
    """Latest intake submission (null when the form hasn't been filled in)."""
    return {"intake": ProgressService.latest_intake(client["id"])}
