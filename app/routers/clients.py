# =============================================================================
# app/routers/clients.py - Client Management Endpoints
# =============================================================================
# Admin CRUD over clients plus the per-client history feed.
# Reads of a single client are also open to the client themselves.
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status

from app.auth import AuthUser, get_accessible_client, get_current_admin
from core.models.client import ClientCreate, ClientUpdate, RushToggle, ServiceChange
from core.services.client_service import ClientService

router = APIRouter()


@router.get("")
async def list_clients(admin: AuthUser = Depends(get_current_admin)):
    """All clients, newest first, each with its service_type attached."""
    clients = ClientService.list_clients()
    return {"clients": clients, "total": len(clients)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_client(
    request: ClientCreate,
    admin: AuthUser = Depends(get_current_admin),
):
    """
    Create and onboard a client.

    Sets the estimated delivery date from the service's timeline, records
    onboarding history, seeds the five progress steps and schedules any
    active `client_created` reminder templates.
    """
    return ClientService.create_client(
        name=request.name,
        email=request.email,
        service_type_id=request.service_type_id,
        phone=request.phone,
        user_id=request.user_id,
        is_rush=request.is_rush,
        created_by=str(admin.id),
    )


@router.get("/{client_id}")
async def get_client(client: dict[str, Any] = Depends(get_accessible_client)):
    return client


@router.patch("/{client_id}")
async def update_client(
    client_id: Annotated[UUID, Path(description="Client UUID")],
    request: ClientUpdate,
    admin: AuthUser = Depends(get_current_admin),
):
    return ClientService.update_client(client_id, request.model_dump(exclude_unset=True))


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: Annotated[UUID, Path(description="Client UUID")],
    admin: AuthUser = Depends(get_current_admin),
    delete_auth_user: Annotated[bool, Query(description="Also delete the linked login")] = False,
):
    ClientService.delete_client(client_id, delete_auth_user=delete_auth_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{client_id}/service")
async def change_service(
    client_id: Annotated[UUID, Path(description="Client UUID")],
    request: ServiceChange,
    admin: AuthUser = Depends(get_current_admin),
):
    """Switch the client's package; the delivery date is recomputed from today."""
    return ClientService.change_service(client_id, request.service_type_id, changed_by=str(admin.id))


@router.put("/{client_id}/rush")
async def set_rush(
    client_id: Annotated[UUID, Path(description="Client UUID")],
    request: RushToggle,
    admin: AuthUser = Depends(get_current_admin),
):
    return ClientService.set_rush(
        client_id, request.is_rush, request.rush_deadline, changed_by=str(admin.id)
    )


@router.get("/{client_id}/history")
async def get_history(client: dict[str, Any] = Depends(get_accessible_client)):
    """Latest 50 history entries, newest first."""
    history = ClientService.get_history(client["id"])
    return {"history": history, "total": len(history)}
