# =============================================================================
# lib/email_client.py - Transactional Email (Resend)
# =============================================================================
# Thin wrapper around the Resend REST API. One call = one email.
#
# Usage:
#   from lib.email_client import get_email_client
#   get_email_client().send(
#       to="client@example.com",
#       subject="Your resume is ready",
#       html="<p>...</p>",
#   )
# =============================================================================

import logging
from typing import Any

import httpx

from app.config import settings
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com"


class EmailError(ApplicationError):
    """Raised when an email cannot be sent."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="EMAIL_ERROR", **kwargs)


class EmailClient:
    """
    Sends emails through Resend.

    Args:
        api_key: Resend API key
        http_client: Optional preconfigured httpx.Client (tests inject a
            MockTransport here)
    """

    def __init__(
        self,
        api_key: str,
        http_client: httpx.Client | None = None,
        default_sender: str | None = None,
    ):
        if not api_key:
            raise EmailError(
                "RESEND_API_KEY not configured",
                suggestion="Set RESEND_API_KEY in your .env file",
            )
        self.api_key = api_key
        self.default_sender = default_sender or settings.EMAIL_FROM_DEFAULT
        self._http = http_client or httpx.Client(base_url=RESEND_API_URL, timeout=15)

    def send(
        self,
        to: str | list[str],
        subject: str,
        html: str,
        sender: str | None = None,
    ) -> dict[str, Any]:
        """
        Send one email.

        Args:
            to: Recipient address or list of addresses
            subject: Subject line
            html: HTML body
            sender: "Name <address>" sender, defaults to EMAIL_FROM_DEFAULT

        Returns:
            Resend response JSON (contains the email "id")

        Raises:
            EmailError: If Resend rejects the request or is unreachable
        """
        recipients = [to] if isinstance(to, str) else list(to)
        payload = {
            "from": sender or self.default_sender,
            "to": recipients,
            "subject": subject,
            "html": html,
        }

        try:
            response = self._http.post(
                "/emails",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Resend request failed: {e}")
            raise EmailError(f"Email service unreachable: {e}")

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {"message": response.text}
            logger.error(f"Resend rejected email to {recipients}: {body}")
            raise EmailError(
                body.get("message") or "Email failed",
                details={"status": response.status_code, "response": body},
            )

        result = response.json()
        logger.info(f"Email sent to {recipients}: {subject!r} (id={result.get('id')})")
        return result


def get_email_client() -> EmailClient:
    """Build an EmailClient from settings. Raises EmailError if unconfigured."""
    return EmailClient(settings.RESEND_API_KEY)
