import logging

from tradewire.config import settings
from tradewire.google.base import GoogleAPIError, GoogleHTTPClient

logger = logging.getLogger(__name__)


class GmailClient(GoogleHTTPClient):
    """Minimal Gmail API client: sends raw RFC 2822 messages."""

    def __init__(self, base_url: str = "https://gmail.googleapis.com/gmail/v1", timeout_seconds: float = 30.0):
        super().__init__(timeout_seconds)
        self.base_url = base_url.rstrip("/")

    async def send_raw(self, access_token: str, raw: str) -> str:
        """
        Send a base64url-encoded message as the owner of ``access_token``.

        Gmail sets the From header to the authenticated account.

        Returns:
            Gmail message id
        """
        url = f"{self.base_url}/users/me/messages/send"
        status, payload = await self._post(
            url,
            json={"raw": raw},
            headers={"Authorization": f"Bearer {access_token}"},
        )

        if status >= 400:
            error = payload.get("error") or {}
            if not isinstance(error, dict):
                error = {"status": str(error)}
            reason = error.get("status", "send_failed")
            logger.warning(f"Gmail send rejected: {status} {reason}")
            raise GoogleAPIError(status, reason, error.get("message", ""))

        message_id = payload.get("id")
        if not message_id:
            raise GoogleAPIError(status, "malformed_response", "Send response has no message id")
        return message_id


def get_gmail_client() -> GmailClient:
    return GmailClient(
        base_url=settings.gmail_api_base_url,
        timeout_seconds=settings.google_http_timeout_seconds,
    )
