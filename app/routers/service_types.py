# =============================================================================
# app/routers/service_types.py - Service Catalogue & Training Materials
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status

from app.auth import AuthUser, get_accessible_client, get_current_admin, get_current_user
from app.dependencies import read_upload
from core.models.service_type import MaterialAssignment, ServiceTypeCreate, ServiceTypeUpdate
from core.services.service_type_service import ServiceTypeService

router = APIRouter()

ServiceTypeId = Annotated[UUID, Path(description="Service type UUID")]
MaterialId = Annotated[UUID, Path(description="Training material UUID")]


@router.get("/service-types")
async def list_service_types(
    user: AuthUser = Depends(get_current_user),
    include_inactive: Annotated[bool, Query(description="Admins only")] = False,
):
    """Service types by name; inactive ones only for admins who ask."""
    active_only = not (include_inactive and user.is_admin)
    return {"service_types": ServiceTypeService.list_service_types(active_only=active_only)}


@router.post("/service-types", status_code=status.HTTP_201_CREATED)
async def create_service_type(
    request: ServiceTypeCreate,
    admin: AuthUser = Depends(get_current_admin),
):
    return ServiceTypeService.create_service_type(request.model_dump())


@router.patch("/service-types/{service_type_id}")
async def update_service_type(
    service_type_id: ServiceTypeId,
    request: ServiceTypeUpdate,
    admin: AuthUser = Depends(get_current_admin),
):
    return ServiceTypeService.update_service_type(service_type_id, request.model_dump(exclude_unset=True))


@router.post("/service-types/{service_type_id}/toggle")
async def toggle_service_type(service_type_id: ServiceTypeId, admin: AuthUser = Depends(get_current_admin)):
    return ServiceTypeService.toggle_active(service_type_id)


@router.get("/service-types/{service_type_id}/materials")
async def list_materials(service_type_id: ServiceTypeId, admin: AuthUser = Depends(get_current_admin)):
    ServiceTypeService.get_service_type(service_type_id)
    return {"material_ids": ServiceTypeService.list_material_ids(service_type_id)}


@router.put("/service-types/{service_type_id}/materials")
async def set_materials(
    service_type_id: ServiceTypeId,
    request: MaterialAssignment,
    admin: AuthUser = Depends(get_current_admin),
):
    """Replace the training materials assigned to this service type."""
    return {"material_ids": ServiceTypeService.set_materials(service_type_id, request.material_ids)}


@router.get("/clients/{client_id}/training-materials")
async def client_training_materials(client: dict[str, Any] = Depends(get_accessible_client)):
    """Materials from the client's service type plus any granted directly."""
    materials = ServiceTypeService.materials_for_client(client)
    return {"materials": materials, "total": len(materials)}


@router.post("/training-materials", status_code=status.HTTP_201_CREATED)
async def upload_training_material(
    admin: AuthUser = Depends(get_current_admin),
    name: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    material_type: Annotated[str, Form(alias="type")] = "PDF",
    file: Annotated[UploadFile | None, File(description="Training file")] = None,
    thumbnail: Annotated[UploadFile | None, File(description="Optional preview image")] = None,
):
    """Upload a training file; it starts out active and unassigned."""
    uploaded = await read_upload(file) if file is not None else None
    preview = await read_upload(thumbnail) if thumbnail is not None else None
    return ServiceTypeService.create_material(
        name, uploaded, description=description, material_type=material_type, thumbnail=preview
    )


@router.post("/clients/{client_id}/training-materials/{material_id}", status_code=status.HTTP_201_CREATED)
async def grant_training_material(
    material_id: MaterialId,
    client: dict[str, Any] = Depends(get_accessible_client),
    admin: AuthUser = Depends(get_current_admin),
):
    """Grant one client a material outside their service type."""
    return ServiceTypeService.grant_client_access(client["id"], material_id)


@router.delete("/clients/{client_id}/training-materials/{material_id}")
async def revoke_training_material(
    material_id: MaterialId,
    client: dict[str, Any] = Depends(get_accessible_client),
    admin: AuthUser = Depends(get_current_admin),
):
    return {"revoked": ServiceTypeService.revoke_client_access(client["id"], material_id)}
