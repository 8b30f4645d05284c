# =============================================================================
# core/services/service_type_service.py - Service Catalogue & Training
# =============================================================================
# Service types are the packages clients buy. Each can have training
# materials assigned; clients see those plus any material granted to them
# individually (client_training_access).
# =============================================================================

import logging
import re
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid
from core.services.delivery_service import UploadedFile, timestamp_ms
from core.services.storage_service import (
    TRAINING_MATERIALS_BUCKET,
    TRAINING_THUMBNAILS_BUCKET,
    StorageService,
)
from app.exceptions import (
    MissingFieldsError,
    ServiceTypeNotFoundError,
    StorageUploadError,
    TrainingMaterialNotFoundError,
)

logger = logging.getLogger(__name__)


class ServiceTypeService:

    @staticmethod
    def list_service_types(active_only: bool = True) -> list[dict[str, Any]]:
        """Service types ordered by name."""
        db = SupabaseClient.get_client()

        try:
            query = db.table("service_types").select("*")
            if active_only:
                query = query.eq("is_active", True)
            response = query.order("name").execute()
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch service types: {e}")
            raise

    @staticmethod
    def get_service_type(service_type_id: str | UUID) -> dict[str, Any]:
        service_type = SupabaseClient.fetch_service_type(service_type_id)
        if not service_type:
            raise ServiceTypeNotFoundError(normalize_uuid(service_type_id))
        return service_type

    @staticmethod
    def create_service_type(data: dict[str, Any]) -> dict[str, Any]:
        db = SupabaseClient.get_client()

        try:
            response = db.table("service_types").insert(data).execute()
            service_type = response.data[0]
            logger.info(f"Created service type: {service_type.get('name')}")
            return service_type

        except Exception as e:
            logger.error(f"Failed to create service type: {e}")
            raise

    @staticmethod
    def update_service_type(service_type_id: str | UUID, updates: dict[str, Any]) -> dict[str, Any]:
        service_type = ServiceTypeService.get_service_type(service_type_id)
        if not updates:
            return service_type

        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("service_types")
                .update(updates)
                .eq("id", normalize_uuid(service_type_id))
                .execute()
            )
            return response.data[0] if response.data else {**service_type, **updates}

        except Exception as e:
            logger.error(f"Failed to update service type {service_type_id}: {e}")
            raise

    @staticmethod
    def toggle_active(service_type_id: str | UUID) -> dict[str, Any]:
        service_type = ServiceTypeService.get_service_type(service_type_id)
        return ServiceTypeService.update_service_type(
            service_type_id, {"is_active": not service_type.get("is_active")}
        )

    # -------------------------------------------------------------------------
    # Training materials
    # -------------------------------------------------------------------------

    @staticmethod
    def list_material_ids(service_type_id: str | UUID) -> list[str]:
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("service_training_materials")
                .select("training_material_id")
                .eq("service_type_id", normalize_uuid(service_type_id))
                .execute()
            )
            return [r["training_material_id"] for r in (response.data or [])]

        except Exception as e:
            logger.error(f"Failed to fetch materials for service type {service_type_id}: {e}")
            raise

    @staticmethod
    def set_materials(service_type_id: str | UUID, material_ids: list[str]) -> list[str]:
        """
        Replace the training materials assigned to a service type.

        Existing assignments are deleted, then the new list inserted.
        """
        ServiceTypeService.get_service_type(service_type_id)
        service_type_id_str = normalize_uuid(service_type_id)
        unique_ids = list(dict.fromkeys(material_ids))

        db = SupabaseClient.get_client()

        try:
            (
                db.table("service_training_materials")
                .delete()
                .eq("service_type_id", service_type_id_str)
                .execute()
            )
            if unique_ids:
                db.table("service_training_materials").insert([
                    {"service_type_id": service_type_id_str, "training_material_id": mid}
                    for mid in unique_ids
                ]).execute()

        except Exception as e:
            logger.error(f"Failed to assign materials to service type {service_type_id}: {e}")
            raise

        logger.info(f"Service type {service_type_id_str} now has {len(unique_ids)} materials")
        return unique_ids

    @staticmethod
    def materials_for_client(client_row: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Active training materials visible to a client, newest first.

        Visible = assigned to the client's service type, or granted to the
        client directly.
        """
        db = SupabaseClient.get_client()

        try:
            service_ids: list[str] = []
            if client_row.get("service_type_id"):
                service_ids = ServiceTypeService.list_material_ids(client_row["service_type_id"])

            manual = (
                db.table("client_training_access")
                .select("training_material_id")
                .eq("client_id", client_row["id"])
                .execute()
            )
            manual_ids = [r["training_material_id"] for r in (manual.data or [])]

            material_ids = [m for m in dict.fromkeys(service_ids + manual_ids) if m]
            if not material_ids:
                return []

            response = (
                db.table("training_materials")
                .select("*")
                .in_("id", material_ids)
                .eq("is_active", True)
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch training materials for client {client_row.get('id')}: {e}")
            raise

    @staticmethod
    def get_material(material_id: str | UUID) -> dict[str, Any]:
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("training_materials")
                .select("*")
                .eq("id", normalize_uuid(material_id))
                .execute()
            )

        except Exception as e:
            logger.error(f"Failed to fetch training material {material_id}: {e}")
            raise

        if not response.data:
            raise TrainingMaterialNotFoundError(normalize_uuid(material_id))
        return response.data[0]

    @staticmethod
    def create_material(
        name: str | None,
        file: UploadedFile | None,
        description: str | None = None,
        material_type: str = "PDF",
        thumbnail: UploadedFile | None = None,
    ) -> dict[str, Any]:
        """
        Upload a training file and register it as an active material.

        The file goes to the training-materials bucket under
        `{ms}_{safe_name}.{ext}`. A thumbnail that fails to upload is
        dropped rather than failing the whole upload. Stored objects are
        removed again if the database insert fails.

        Raises:
            MissingFieldsError: No name or no file
        """
        missing = []
        if not (name or "").strip():
            missing.append("name")
        if file is None or not file.content:
            missing.append("file")
        if missing:
            raise MissingFieldsError("Please enter a name and select a file", missing)

        safe_name = re.sub(r"[^a-zA-Z0-9]", "_", name.strip())
        file_path = f"{timestamp_ms()}_{safe_name}.{file.extension or 'bin'}"

        StorageService.upload_bytes(TRAINING_MATERIALS_BUCKET, file_path, file.content, file.content_type)

        thumbnail_path = None
        thumbnail_url = None
        if thumbnail is not None and thumbnail.content:
            candidate = f"thumb_{timestamp_ms()}_{safe_name}.{thumbnail.extension or 'png'}"
            try:
                StorageService.upload_bytes(
                    TRAINING_THUMBNAILS_BUCKET, candidate, thumbnail.content, thumbnail.content_type
                )
                thumbnail_path = candidate
                thumbnail_url = StorageService.get_public_url(TRAINING_THUMBNAILS_BUCKET, candidate)
            except StorageUploadError as e:
                logger.warning(f"Thumbnail upload failed for {file_path}, continuing without: {e.message}")

        record = {
            "name": name.strip(),
            "description": description,
            "type": material_type,
            "content_url": StorageService.get_public_url(TRAINING_MATERIALS_BUCKET, file_path),
            "file_path": file_path,
            "file_size": file.size,
            "mime_type": file.content_type or "application/octet-stream",
            "thumbnail_url": thumbnail_url,
            "is_active": True,
        }

        db = SupabaseClient.get_client()

        try:
            response = db.table("training_materials").insert(record).execute()
            material = response.data[0] if response.data else record

        except Exception as e:
            logger.error(f"Database insert failed for training material {file_path}, removing upload: {e}")
            StorageService.delete_file(TRAINING_MATERIALS_BUCKET, file_path)
            if thumbnail_path:
                StorageService.delete_file(TRAINING_THUMBNAILS_BUCKET, thumbnail_path)
            raise

        logger.info(f"Created training material: {material.get('name')}")
        return material

    @staticmethod
    def grant_client_access(client_id: str | UUID, material_id: str | UUID) -> dict[str, Any]:
        """
        Give one client access to a material outside their service type.

        Granting twice is a no-op that returns the existing grant.
        """
        ServiceTypeService.get_material(material_id)
        client_id_str = normalize_uuid(client_id)
        material_id_str = normalize_uuid(material_id)

        db = SupabaseClient.get_client()

        try:
            existing = (
                db.table("client_training_access")
                .select("*")
                .eq("client_id", client_id_str)
                .eq("training_material_id", material_id_str)
                .execute()
            )
            if existing.data:
                return existing.data[0]

            response = db.table("client_training_access").insert({
                "client_id": client_id_str,
                "training_material_id": material_id_str,
                "access_type": "manual",
            }).execute()

        except Exception as e:
            logger.error(f"Failed to grant material {material_id_str} to client {client_id_str}: {e}")
            raise

        logger.info(f"Granted training material {material_id_str} to client {client_id_str}")
        return response.data[0]

    @staticmethod
    def revoke_client_access(client_id: str | UUID, material_id: str | UUID) -> int:
        """Remove a direct grant. Returns how many grants were deleted."""
        db = SupabaseClient.get_client()

        try:
            response = (
                db.table("client_training_access")
                .delete()
                .eq("client_id", normalize_uuid(client_id))
                .eq("training_material_id", normalize_uuid(material_id))
                .execute()
            )

        except Exception as e:
            logger.error(f"Failed to revoke material {material_id} from client {client_id}: {e}")
            raise

        revoked = len(response.data or [])
        logger.info(f"Revoked {revoked} training grant(s) for client {client_id}")
        return revoked
