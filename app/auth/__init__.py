# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# JWT authentication against Supabase Auth, plus the admin / client-access
# checks the portal routes depend on.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import (
    authenticate_token,
    get_accessible_client,
    get_current_admin,
    get_current_user,
    require_client_access,
)
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "authenticate_token",
    "get_accessible_client",
    "get_current_admin",
    "get_current_user",
    "require_client_access",
    "AuthUser",
    "UserResponse",
]
