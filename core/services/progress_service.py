# =============================================================================
# core/services/progress_service.py - Client Progress & Intake Form
# =============================================================================
# Each client has five fixed progress steps:
#
#   1 Intake Form -> 2 Upload Resume -> 3 Book Session -> 4 In Progress
#                                                       -> 5 Review & Download
#
# Steps move forward only (pending -> in_progress -> completed). Step 4 is
# started automatically once steps 1-3 are all completed. Completing steps
# 1-3 also sets the matching flag on the client row.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso
from core.models.progress import PROGRESS_STEPS, STEP_CLIENT_FLAGS, StepStatus
from core.services.history_service import HistoryService
from app.exceptions import InvalidStatusError, MissingFieldsError

logger = logging.getLogger(__name__)

# Step 4 ("In Progress") is driven by the team, not the client
WORK_STEP = 4
LAST_STEP = len(PROGRESS_STEPS)


def step_is_accessible(step: dict[str, Any], steps: list[dict[str, Any]]) -> bool:
    """A step is reachable once started, or when every earlier step is done."""
    if step.get("status") != StepStatus.PENDING.value:
        return True
    return all(
        s.get("status") == StepStatus.COMPLETED.value
        for s in steps
        if s.get("step_number", 0) < step.get("step_number", 0)
    )


def completion_percent(steps: list[dict[str, Any]]) -> float:
    if not steps:
        return 0.0
    done = sum(1 for s in steps if s.get("status") == StepStatus.COMPLETED.value)
    return done / len(steps) * 100


class ProgressService:
    """Service for client_progress rows and the intake form."""

    @staticmethod
    def seed_steps(client_id: str | UUID) -> list[dict[str, Any]]:
        """Insert the five pending steps for a new client."""
        client = SupabaseClient.get_client()
        client_id_str = normalize_uuid(client_id)

        rows = [
            {
                "client_id": client_id_str,
                "step_number": number,
                "step_name": name,
                "status": StepStatus.PENDING.value,
            }
            for number, name in PROGRESS_STEPS
        ]

        try:
            response = client.table("client_progress").insert(rows).execute()
            logger.info(f"Seeded {len(rows)} progress steps for client {client_id_str}")
            return response.data or rows

        except Exception as e:
            logger.error(f"Failed to seed progress steps: {e}")
            raise

    @staticmethod
    def list_steps(client_id: str | UUID) -> list[dict[str, Any]]:
        """
        Get a client's steps in order, each with an `accessible` flag.
        """
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("client_progress")
                .select("*")
                .eq("client_id", normalize_uuid(client_id))
                .order("step_number")
                .execute()
            )
            steps = response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch progress for client {client_id}: {e}")
            raise

        return [{**s, "accessible": step_is_accessible(s, steps)} for s in steps]

    @staticmethod
    def update_step(
        client_id: str | UUID,
        step_number: int,
        status: StepStatus | str,
        metadata: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Move one step to in_progress or completed.

        Args:
            client_id: Client UUID
            step_number: 1..5
            status: in_progress or completed
            metadata: Extra JSON stored on the step row

        Returns:
            The client's steps after the update

        Raises:
            InvalidStatusError: For pending or unknown statuses
            MissingFieldsError: For a step number outside 1..5
        """
        status_value = status.value if isinstance(status, StepStatus) else status
        allowed = [StepStatus.IN_PROGRESS.value, StepStatus.COMPLETED.value]
        if status_value not in allowed:
            raise InvalidStatusError(status_value, allowed)
        if not 1 <= step_number <= LAST_STEP:
            raise MissingFieldsError(
                f"Step number must be between 1 and {LAST_STEP}",
                ["step_number"],
            )

        client = SupabaseClient.get_client()
        client_id_str = normalize_uuid(client_id)

        update_data: dict[str, Any] = {
            "status": status_value,
            "metadata": metadata or {},
        }
        if status_value == StepStatus.COMPLETED.value:
            update_data["completed_at"] = utc_now_iso()

        try:
            (
                client.table("client_progress")
                .update(update_data)
                .eq("client_id", client_id_str)
                .eq("step_number", step_number)
                .execute()
            )

            if status_value == StepStatus.COMPLETED.value:
                ProgressService._after_step_completed(client_id_str, step_number)

        except Exception as e:
            logger.error(f"Failed to update progress step {step_number}: {e}")
            raise

        logger.info(f"Client {client_id_str} step {step_number} -> {status_value}")
        return ProgressService.list_steps(client_id_str)

    @staticmethod
    def _after_step_completed(client_id: str, step_number: int) -> None:
        client = SupabaseClient.get_client()

        if step_number + 1 == WORK_STEP:
            steps = ProgressService.list_steps(client_id)
            if all(
                s["status"] == StepStatus.COMPLETED.value
                for s in steps
                if s["step_number"] < WORK_STEP
            ):
                (
                    client.table("client_progress")
                    .update({
                        "status": StepStatus.IN_PROGRESS.value,
                        "metadata": {"auto_advanced": True},
                    })
                    .eq("client_id", client_id)
                    .eq("step_number", WORK_STEP)
                    .execute()
                )
                logger.info(f"Auto-advanced client {client_id} to step {WORK_STEP}")

        flag = STEP_CLIENT_FLAGS.get(step_number)
        if flag:
            (
                client.table("clients")
                .update({flag: True, "updated_at": utc_now_iso()})
                .eq("id", client_id)
                .execute()
            )

    # -------------------------------------------------------------------------
    # Intake form
    # -------------------------------------------------------------------------

    @staticmethod
    def submit_intake_form(
        client_id: str | UUID,
        answers: dict[str, Any],
        submitted_by: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Store intake answers and complete step 1.

        The answers are kept verbatim as the metadata of an
        intake_form_completed history row.

        Returns:
            The inserted history row
        """
        if not answers:
            raise MissingFieldsError("Intake form answers are required", ["answers"])

        entry = HistoryService.record(
            client_id,
            "intake_form_completed",
            "Client completed intake questionnaire",
            metadata=answers,
            created_by=submitted_by,
        )

        ProgressService.update_step(client_id, 1, StepStatus.COMPLETED)
        return entry

    @staticmethod
    def latest_intake(client_id: str | UUID) -> dict[str, Any] | None:
        """Most recent intake_form_completed history row, if any."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("client_history")
                .select("*")
                .eq("client_id", normalize_uuid(client_id))
                .eq("action_type", "intake_form_completed")
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            logger.error(f"Failed to fetch intake form for client {client_id}: {e}")
            raise
