"""
Trade Dispatch Pipeline.

Sends a trade instruction from the client's Gmail account to their broker
and records it in the audit log:

1. Resolve the active client
2. Decrypt the stored refresh token
3. Build the RFC 2822 message
4. Encode it as base64url
5. Exchange the refresh token for an access token and send via Gmail
6. Write the audit entry
7. Return the Gmail message id and broker

An audit entry exists if and only if Gmail confirmed the send.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradewire.audit.writer import AuditLogWriter
from tradewire.auth.dependencies import AdvisorIdentity
from tradewire.core.cipher import CredentialCipher
from tradewire.core.exceptions import (
    ClientNotFoundError,
    CredentialCorruptError,
    CredentialRevokedError,
    CryptoIntegrityError,
    DispatchError,
    LogPersistenceError,
)
from tradewire.dispatch.message import build_trade_message, encode_raw_message
from tradewire.google.base import GoogleAPIError
from tradewire.google.gmail import GmailClient
from tradewire.google.oauth import GoogleOAuthClient
from tradewire.observability.metrics import record_dispatch, record_dispatch_failure
from tradewire.registry.client_registry import ClientRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    message_id: str
    broker_email: str


class TradeDispatchPipeline:
    """
    Orchestrates a single trade dispatch.

    Holds no per-client state: the access token is obtained and used
    within one call.

    Usage:
        pipeline = TradeDispatchPipeline(db, cipher, oauth_client, gmail_client)
        result = await pipeline.dispatch_trade(advisor, "jane@x.com", "Buy 100 AAPL")
    """

    def __init__(
        self,
        db: AsyncSession,
        cipher: CredentialCipher,
        oauth_client: GoogleOAuthClient,
        gmail_client: GmailClient,
    ):
        self.db = db
        self.cipher = cipher
        self.oauth_client = oauth_client
        self.gmail_client = gmail_client
        self.registry = ClientRegistry(db)
        self.audit = AuditLogWriter(db)

    async def dispatch_trade(
        self,
        advisor: AdvisorIdentity,
        client_email: str,
        trade_details: str,
    ) -> DispatchResult:
        """
        Send a trade instruction on the client's behalf and log it.

        Args:
            advisor: Identity from the verified session token
            client_email: Client whose Gmail account sends the message
            trade_details: Instruction text, embedded verbatim

        Raises:
            ClientNotFoundError: client unknown, inactive or not authorized
            CredentialCorruptError: stored token failed decryption
            DispatchError: token refresh or Gmail send failed
            LogPersistenceError: sent, but the audit entry was not written
        """
        client = await self.registry.lookup_active_client(client_email)
        if client is None:
            record_dispatch_failure("client_not_found")
            raise ClientNotFoundError("Client not found or inactive.")

        try:
            refresh_token = self.cipher.decrypt(client.encrypted_refresh_token)
        except CryptoIntegrityError as e:
            logger.error(f"Stored credential for {client_email} failed decryption: {e}")
            record_dispatch_failure("credential_corrupt")
            raise CredentialCorruptError(
                "Stored authorization for this client is unreadable. Ask the client to re-authorize."
            ) from e

        raw = encode_raw_message(build_trade_message(client.broker_email, trade_details))

        message_id = await self._send(client_email, refresh_token, raw)

        try:
            await self.audit.record_dispatch(
                advisor_identifier=advisor.email,
                client_email=client_email,
                broker_email=client.broker_email,
                gmail_message_id=message_id,
                trade_details=trade_details,
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.critical(
                "Trade sent but audit entry NOT written",
                extra={
                    "advisor_identifier": advisor.email,
                    "client_email": client_email,
                    "broker_email": client.broker_email,
                    "gmail_message_id": message_id,
                    "trade_details": trade_details,
                    "error": repr(e),
                },
            )
            record_dispatch_failure("audit_write_failed")
            raise LogPersistenceError(
                "Trade was sent but could not be logged. Contact support.",
                message_id=message_id,
                broker_email=client.broker_email,
            ) from e

        record_dispatch()
        logger.info(f"Trade dispatched for {client_email} to {client.broker_email} by {advisor.email}: {message_id}")
        return DispatchResult(message_id=message_id, broker_email=client.broker_email)

    async def _send(self, client_email: str, refresh_token: str, raw: str) -> str:
        try:
            access_token = await self.oauth_client.refresh_access_token(refresh_token)
        except GoogleAPIError as e:
            logger.error(f"Token refresh failed for {client_email}: {e}")
            if e.error == "invalid_grant":
                record_dispatch_failure("credential_revoked")
                raise CredentialRevokedError(
                    "Client authorization was revoked or has expired. Generate a new authorization link."
                ) from e
            record_dispatch_failure("token_refresh_failed")
            raise DispatchError("Failed to send trade.") from e

        try:
            return await self.gmail_client.send_raw(access_token, raw)
        except GoogleAPIError as e:
            logger.error(f"Gmail send failed for {client_email}: {e}")
            record_dispatch_failure("send_failed")
            raise DispatchError("Failed to send trade.") from e
