# =============================================================================
# app/routers/digest.py - Daily Digest Endpoints
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_admin
from core.models.reminder import DigestPreferences, SendDigestRequest
from core.services.digest_service import DigestService

router = APIRouter()


@router.get("/preferences")
async def get_preferences(admin: AuthUser = Depends(get_current_admin)):
    """Stored preferences, or the defaults (everything on) if none saved."""
    return DigestService.get_preferences()


@router.put("/preferences")
async def save_preferences(
    request: DigestPreferences,
    admin: AuthUser = Depends(get_current_admin),
):
    return DigestService.save_preferences(request, user_id=str(admin.id))


@router.get("/preview")
async def preview_digest(admin: AuthUser = Depends(get_current_admin)):
    """What the digest would contain right now, without sending it."""
    return DigestService.build_digest()


@router.post("/send")
async def send_digest(
    request: SendDigestRequest | None = None,
    admin: AuthUser = Depends(get_current_admin),
):
    """
    Send the digest now.

    Returns {"message": "Daily digest is disabled"} when disabled and
    `force` is not set.
    """
    request = request or SendDigestRequest()
    return DigestService.send_digest(force=request.force, recipient=request.recipient)
