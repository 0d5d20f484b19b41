"""
Authorization Flow Coordinator.

Three steps, with no state kept between them except the client row:
1. Advisor requests a consent link for a client (client is registered)
2. Google redirects the client back with a code and ``state`` = client email
3. The refresh token is encrypted and attached to the client
"""

import enum
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tradewire.auth.dependencies import AdvisorIdentity
from tradewire.core.cipher import CredentialCipher
from tradewire.core.exceptions import AuthCallbackError, AuthExchangeError
from tradewire.google.base import GoogleAPIError
from tradewire.google.oauth import GoogleOAuthClient, GMAIL_SEND_SCOPE
from tradewire.observability.metrics import record_auth_callback
from tradewire.registry.client_registry import ClientRegistry

logger = logging.getLogger(__name__)


class CallbackOutcome(str, enum.Enum):
    AUTHORIZED = "authorized"
    NO_REFRESH_TOKEN = "no_refresh_token"  # User already had a grant; nothing stored
    UNKNOWN_CLIENT = "unknown_client"      # State did not match a registered client


class AuthorizationFlow:
    def __init__(self, db: AsyncSession, cipher: CredentialCipher, oauth_client: GoogleOAuthClient):
        self.cipher = cipher
        self.oauth_client = oauth_client
        self.registry = ClientRegistry(db)

    async def generate_auth_link(
        self,
        advisor: AdvisorIdentity,
        name: str,
        client_email: str,
        broker_email: str,
    ) -> str:
        """Register the client and return the Google consent URL for them."""
        await self.registry.register_client(name, client_email, broker_email)
        auth_url = self.oauth_client.build_auth_url(state=client_email, scopes=(GMAIL_SEND_SCOPE,))
        logger.info(f"Advisor {advisor.email} issued authorization link for {client_email}")
        return auth_url

    async def handle_callback(
        self,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
    ) -> CallbackOutcome:
        """
        Complete the authorization for the client named in ``state``.

        Raises:
            AuthCallbackError: consent denied, or code/state missing
            AuthExchangeError: Google rejected the code or was unreachable
        """
        if error:
            logger.info(f"Authorization declined for {state}: {error}")
            record_auth_callback("declined")
            raise AuthCallbackError("Authorization was not granted.")
        if not code:
            record_auth_callback("missing_code")
            raise AuthCallbackError("Authorization failed. No code provided.")
        if not state:
            record_auth_callback("missing_state")
            raise AuthCallbackError("Authorization failed. Request could not be matched to a client.")

        logger.info(f"Authorization code received for {state}. Exchanging for tokens...")
        try:
            tokens = await self.oauth_client.exchange_code(code)
        except GoogleAPIError as e:
            logger.error(f"Token exchange failed for {state}: {e}")
            record_auth_callback("exchange_failed")
            raise AuthExchangeError("Authentication failed.") from e

        if not tokens.refresh_token:
            logger.warning(f"No refresh token returned for {state}; existing grant must be revoked first")
            record_auth_callback(CallbackOutcome.NO_REFRESH_TOKEN.value)
            return CallbackOutcome.NO_REFRESH_TOKEN

        encrypted = self.cipher.encrypt(tokens.refresh_token)
        if not await self.registry.attach_credential(state, encrypted):
            record_auth_callback(CallbackOutcome.UNKNOWN_CLIENT.value)
            return CallbackOutcome.UNKNOWN_CLIENT

        record_auth_callback(CallbackOutcome.AUTHORIZED.value)
        return CallbackOutcome.AUTHORIZED
