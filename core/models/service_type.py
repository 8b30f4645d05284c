# =============================================================================
# core/models/service_type.py - Service Catalogue Schemas
# =============================================================================

from pydantic import BaseModel, Field


class ServiceTypeCreate(BaseModel):
    """
    Schema for a purchasable service package.

    Example:
        {
            "name": "Executive Resume Package",
            "default_timeline_days": 5,
            "price_cents": 49900
        }
    """

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None

    # Drives the estimated delivery date of new clients
    default_timeline_days: int = Field(default=7, ge=1, le=365)

    price_cents: int | None = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True


class ServiceTypeUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    default_timeline_days: int | None = Field(default=None, ge=1, le=365)
    price_cents: int | None = Field(default=None, ge=0)
    tags: list[str] | None = None
    is_active: bool | None = None


class MaterialAssignment(BaseModel):
    """Full replacement list of training materials for a service type."""

    material_ids: list[str] = Field(default_factory=list)
