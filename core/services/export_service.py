# =============================================================================
# core/services/export_service.py - Client Data Export
# =============================================================================
# Dumps client records (with intake form, history and uploaded documents)
# as JSON or as a flat CSV built with pandas.
# =============================================================================

import io
import json
import logging
from datetime import datetime
from typing import Any, Literal
from uuid import UUID

import pandas as pd

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now
from core.services.progress_service import ProgressService
from core.services.history_service import HistoryService

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "Client ID",
    "Name",
    "Email",
    "Phone",
    "Status",
    "Service Type",
    "Created Date",
    "Intake Form Data",
    "Document Count",
]

ExportFormat = Literal["json", "csv"]


def export_filename(fmt: str, now: datetime | None = None) -> str:
    """client-data-YYYY-MM-DD.<fmt>"""
    return f"client-data-{(now or utc_now()).date().isoformat()}.{fmt}"


class ExportService:

    @staticmethod
    def _documents(client_id: str) -> list[dict[str, Any]]:
        db = SupabaseClient.get_client()
        response = (
            db.table("document_uploads")
            .select("*")
            .eq("client_id", client_id)
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    @staticmethod
    def collect(client_id: str | UUID | None = None) -> list[dict[str, Any]]:
        """
        Gather export records for every client, or just one.

        Each record: {"client", "intakeForm", "history", "documents"}
        """
        if client_id:
            client_row = SupabaseClient.fetch_client(client_id)
            clients = [client_row] if client_row else []
        else:
            clients = SupabaseClient.fetch_clients()

        records = []
        try:
            for client_row in clients:
                logger.debug(f"Exporting client: {client_row['id']}")
                records.append({
                    "client": client_row,
                    "intakeForm": ProgressService.latest_intake(client_row["id"]),
                    "history": HistoryService.list_all_for_client(client_row["id"]),
                    "documents": ExportService._documents(client_row["id"]),
                })

        except Exception as e:
            logger.error(f"Failed to collect export data: {e}")
            raise

        return records

    @staticmethod
    def to_json(records: list[dict[str, Any]], now: datetime | None = None) -> dict[str, Any]:
        return {
            "exportDate": (now or utc_now()).isoformat(),
            "totalClients": len(records),
            "data": records,
        }

    @staticmethod
    def to_dataframe(records: list[dict[str, Any]]) -> pd.DataFrame:
        """One row per client with CSV_COLUMNS."""
        service_types = SupabaseClient.fetch_service_types() if records else {}

        rows = []
        for record in records:
            client_row = record["client"]
            intake = record.get("intakeForm") or {}
            service = service_types.get(client_row.get("service_type_id")) or {}
            rows.append({
                "Client ID": client_row.get("id"),
                "Name": client_row.get("name"),
                "Email": client_row.get("email"),
                "Phone": client_row.get("phone") or "",
                "Status": client_row.get("status"),
                "Service Type": service.get("name") or client_row.get("service_type_id") or "",
                "Created Date": client_row.get("created_at"),
                "Intake Form Data": json.dumps(intake["metadata"]) if intake.get("metadata") else "",
                "Document Count": len(record.get("documents") or []),
            })

        return pd.DataFrame(rows, columns=CSV_COLUMNS)

    @staticmethod
    def to_csv(records: list[dict[str, Any]]) -> str:
        buffer = io.StringIO()
        ExportService.to_dataframe(records).to_csv(buffer, index=False)
        return buffer.getvalue()

    @staticmethod
    def export(
        fmt: ExportFormat = "json",
        client_id: str | UUID | None = None,
    ) -> tuple[str | dict[str, Any], str]:
        """
        Build an export.

        Returns:
            (content, filename): CSV text or JSON-ready dict, plus the
            attachment filename
        """
        records = ExportService.collect(normalize_uuid(client_id) if client_id else None)
        logger.info(f"Exporting {len(records)} clients as {fmt}")

        if fmt == "csv":
            return ExportService.to_csv(records), export_filename("csv")
        return ExportService.to_json(records), export_filename("json")
