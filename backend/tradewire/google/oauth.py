"""
Google OAuth 2.0 client for the authorization-code flow.

Builds consent URLs, exchanges authorization codes for tokens and trades
refresh tokens for short-lived access tokens.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence
from urllib.parse import urlencode

from tradewire.config import settings
from tradewire.google.base import GoogleAPIError, GoogleHTTPClient

logger = logging.getLogger(__name__)

GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"


@dataclass(frozen=True)
class TokenSet:
    access_token: str
    refresh_token: Optional[str]
    expires_in: Optional[int] = None
    scope: Optional[str] = None
    token_type: str = "Bearer"


class GoogleOAuthClient(GoogleHTTPClient):
    """OAuth client for one registered Google application."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        auth_url: str = "https://accounts.google.com/o/oauth2/v2/auth",
        token_url: str = "https://oauth2.googleapis.com/token",
        timeout_seconds: float = 30.0,
    ):
        super().__init__(timeout_seconds)
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.auth_url = auth_url
        self.token_url = token_url

    def build_auth_url(self, state: str, scopes: Sequence[str] = (GMAIL_SEND_SCOPE,)) -> str:
        """
        Build the consent screen URL.

        ``access_type=offline`` asks for a refresh token and ``prompt=consent``
        makes Google issue a new one even when the user granted access before.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{self.auth_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> TokenSet:
        payload = await self._token_request({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        })
        return TokenSet(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
            scope=payload.get("scope"),
            token_type=payload.get("token_type", "Bearer"),
        )

    async def refresh_access_token(self, refresh_token: str) -> str:
        payload = await self._token_request({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })
        return payload["access_token"]

    async def _token_request(self, form: dict) -> dict:
        form = {**form, "client_id": self.client_id, "client_secret": self.client_secret}
        status, payload = await self._post(self.token_url, data=form)

        if status >= 400:
            error = payload.get("error", "token_request_failed")
            logger.warning(f"Token request ({form['grant_type']}) rejected: {status} {error}")
            raise GoogleAPIError(status, error, payload.get("error_description", ""))
        if "access_token" not in payload:
            raise GoogleAPIError(status, "malformed_response", "Token response has no access_token")
        return payload


def get_oauth_client() -> GoogleOAuthClient:
    return GoogleOAuthClient(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        redirect_uri=settings.google_redirect_uri,
        auth_url=settings.google_auth_url,
        token_url=settings.google_token_url,
        timeout_seconds=settings.google_http_timeout_seconds,
    )
