# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Signup/login happen in Supabase Auth client-side; these routes tell the
# portal who the token belongs to and which role it carries.
# =============================================================================

import logging
from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the current user's profile, role and (for client users) client ID.

    Raises:
        401: If not authenticated
    """
    profile = SupabaseClient.fetch_profile(user.id) or {}
    client_row = None if user.is_admin else SupabaseClient.fetch_client_for_user(user.id)

    if not profile:
        # Profile trigger may not have run yet
        logger.debug(f"No profile row for user {user.id}")

    return UserResponse(
        id=user.id,
        email=profile.get("email") or user.email,
        display_name=profile.get("display_name"),
        avatar_url=profile.get("avatar_url"),
        role=user.role,
        client_id=client_row["id"] if client_row else None,
        created_at=profile.get("created_at"),
        updated_at=profile.get("updated_at"),
    )


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """Confirm a stored token is still valid."""
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email,
        "role": user.role,
    }
