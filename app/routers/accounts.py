# =============================================================================
# app/routers/accounts.py - Client Account Endpoints
# =============================================================================
# Onboarding / login-credential emails and removal of a client's login.
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import AuthUser, get_current_admin
from core.models.integration import DeleteAuthUserRequest, LoginCredentialsRequest, OnboardingEmailRequest
from core.services.account_service import AccountService

router = APIRouter()


@router.post("/onboarding-email")
async def send_onboarding_email(
    request: OnboardingEmailRequest,
    admin: AuthUser = Depends(get_current_admin),
):
    """Welcome email with package, price, delivery date and login details."""
    email_response = AccountService.send_onboarding_email(
        client_name=request.client_name,
        client_email=request.client_email,
        service_name=request.service_name,
        temp_password=request.temp_password,
        service_price=request.service_price,
        estimated_delivery_date=request.estimated_delivery_date,
        login_url=request.login_url,
    )
    return {"success": True, "email_response": email_response}


@router.post("/login-credentials")
async def send_login_credentials(
    request: LoginCredentialsRequest,
    admin: AuthUser = Depends(get_current_admin),
):
    email_response = AccountService.send_login_credentials(
        client_name=request.client_name,
        client_email=request.client_email,
        temp_password=request.temp_password,
        login_url=request.login_url,
    )
    return {"success": True, "email_response": email_response}


@router.post("/delete-user")
async def delete_auth_user(
    request: DeleteAuthUserRequest,
    admin: AuthUser = Depends(get_current_admin),
):
    """Delete a login; 400 when user_id is missing or the auth API refuses."""
    return AccountService.delete_auth_user(request.user_id)
