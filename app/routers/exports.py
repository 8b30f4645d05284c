# =============================================================================
# app/routers/exports.py - Client Data Export
# =============================================================================

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from app.auth import AuthUser, get_current_admin
from core.services.export_service import ExportService

router = APIRouter()


@router.get("/export")
async def export_clients(
    admin: AuthUser = Depends(get_current_admin),
    format: Annotated[Literal["json", "csv"], Query(description="json or csv")] = "json",
    client_id: Annotated[UUID | None, Query(description="Export only this client")] = None,
):
    """
    Download client records with intake form, history and documents.

    Served as an attachment named client-data-YYYY-MM-DD.<format>.
    """
    content, filename = ExportService.export(format, client_id)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}

    if format == "csv":
        return Response(content=content, media_type="text/csv", headers=headers)
    return JSONResponse(content=jsonable_encoder(content), headers=headers)
