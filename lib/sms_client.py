# =============================================================================
# lib/sms_client.py - SMS Alerts (Twilio)
# =============================================================================
# Posts a single message to the Twilio Messages REST endpoint.
# =============================================================================

import logging
from typing import Any

import httpx

from app.config import settings
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

TWILIO_API_URL = "https://api.twilio.com/2010-04-01"


class SmsError(ApplicationError):
    """Raised when Twilio refuses or cannot be reached."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="SMS_ERROR", **kwargs)


class SmsClient:
    """Sends text messages from a fixed Twilio number."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        http_client: httpx.Client | None = None,
    ):
        self.account_sid = account_sid
        self.from_number = from_number
        self._auth = (account_sid, auth_token)
        self._http = http_client or httpx.Client(base_url=TWILIO_API_URL, timeout=15)

    def send(self, to: str, body: str) -> dict[str, Any]:
        """
        Send an SMS.

        Returns:
            Dict with sid, to, from and status as reported by Twilio

        Raises:
            SmsError: On transport failure or a non-2xx Twilio response;
                details["response"] carries Twilio's error body
        """
        url = f"/Accounts/{self.account_sid}/Messages.json"
        logger.info(f"Sending SMS to {to} from {self.from_number}")

        try:
            response = self._http.post(
                url,
                data={"To": to, "From": self.from_number, "Body": body},
                auth=self._auth,
            )
        except httpx.HTTPError as e:
            logger.error(f"Twilio request failed: {e}")
            raise SmsError(f"SMS service unreachable: {e}")

        try:
            data = response.json()
        except ValueError:
            data = {"message": response.text}

        if response.status_code >= 400:
            logger.error(f"Twilio error ({response.status_code}): {data}")
            raise SmsError(
                "Failed to send SMS",
                details={"status": response.status_code, "response": data},
            )

        logger.info(f"SMS sent successfully: {data.get('sid')}")
        return {
            "sid": data.get("sid"),
            "to": data.get("to"),
            "from": data.get("from"),
            "status": data.get("status"),
        }


def get_sms_client() -> SmsClient | None:
    """Build an SmsClient from settings, or None when Twilio isn't configured."""
    if not settings.sms_configured:
        return None
    return SmsClient(
        settings.TWILIO_ACCOUNT_SID,
        settings.TWILIO_AUTH_TOKEN,
        settings.TWILIO_PHONE_NUMBER,
    )
