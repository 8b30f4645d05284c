# =============================================================================
# core/models/progress.py - Progress Tracker Schemas
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class StepStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# (step_number, step_name) for every client, in order
PROGRESS_STEPS: list[tuple[int, str]] = [
    (1, "Intake Form"),
    (2, "Upload Resume"),
    (3, "Book Session"),
    (4, "In Progress"),
    (5, "Review & Download"),
]

# Client flag set when the matching step completes
STEP_CLIENT_FLAGS: dict[int, str] = {
    1: "intake_form_submitted",
    2: "resume_uploaded",
    3: "session_booked",
}


class StepUpdate(BaseModel):
    """Move a step forward. Steps are never set back to pending."""

    status: StepStatus = Field(..., description="in_progress or completed")
    metadata: dict[str, Any] | None = None


class IntakeSubmission(BaseModel):
    """
    Intake form answers.

    The form is unstructured: every answer is stored as-is in the
    metadata of an intake_form_completed history row.
    """

    answers: dict[str, Any] = Field(..., description="Question -> answer")
