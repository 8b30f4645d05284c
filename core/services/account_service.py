# =============================================================================
# core/services/account_service.py - Client Account Emails & Auth Users
# =============================================================================
# Welcome / credential emails for new portal users and removal of auth
# users. Passwords are never generated or stored here; the caller supplies
# the temporary password it set on the auth user.
# =============================================================================

import logging
from typing import Any

from lib.email_client import get_email_client
from lib.supabase_client import SupabaseClient
from core import email_templates
from app.exceptions import ExternalServiceError, MissingFieldsError

logger = logging.getLogger(__name__)


class AccountService:

    @staticmethod
    def send_onboarding_email(
        client_name: str,
        client_email: str,
        service_name: str,
        temp_password: str,
        service_price: str | None = None,
        estimated_delivery_date: str | None = None,
        login_url: str | None = None,
    ) -> dict[str, Any]:
        """Send the welcome email. Returns the email provider's response."""
        subject, html = email_templates.onboarding(
            client_name=client_name,
            client_email=client_email,
            service_name=service_name,
            temp_password=temp_password,
            service_price=service_price,
            estimated_delivery_date=estimated_delivery_date,
            login_url=login_url,
        )
        response = get_email_client().send(to=client_email, subject=subject, html=html)
        logger.info(f"Onboarding email sent to {client_email}")
        return response

    @staticmethod
    def send_login_credentials(
        client_name: str,
        client_email: str,
        temp_password: str,
        login_url: str | None = None,
    ) -> dict[str, Any]:
        subject, html = email_templates.login_credentials(
            client_name=client_name,
            client_email=client_email,
            temp_password=temp_password,
            login_url=login_url,
        )
        response = get_email_client().send(to=client_email, subject=subject, html=html)
        logger.info(f"Login credentials sent to {client_email}")
        return response

    @staticmethod
    def delete_auth_user(user_id: str | None) -> dict[str, Any]:
        """
        Delete a Supabase Auth user (removes their login).

        Raises:
            MissingFieldsError: If user_id is empty
            ExternalServiceError: (400) If the auth API refuses
        """
        if not user_id:
            raise MissingFieldsError("user_id is required", ["user_id"])

        client = SupabaseClient.get_client()
        logger.info(f"Attempting to delete auth user: {user_id}")

        try:
            client.auth.admin.delete_user(user_id)
        except Exception as e:
            logger.error(f"Error deleting auth user {user_id}: {e}")
            raise ExternalServiceError("supabase_auth", str(e), status_code=400)

        logger.info(f"Successfully deleted auth user: {user_id}")
        return {
            "success": True,
            "message": "Auth user deleted successfully",
            "deleted_user_id": user_id,
        }
