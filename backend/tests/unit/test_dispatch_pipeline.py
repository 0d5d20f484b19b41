"""
Unit tests for the trade dispatch pipeline.

The audit log must hold an entry for a message if and only if Gmail
confirmed the send.
"""

import base64
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from tradewire.auth.dependencies import AdvisorIdentity
from tradewire.core.exceptions import (
    ClientNotFoundError,
    CredentialCorruptError,
    CredentialRevokedError,
    DispatchError,
    LogPersistenceError,
)
from tradewire.dispatch.pipeline import DispatchResult, TradeDispatchPipeline
from tradewire.google.base import GoogleAPIError
from tradewire.models.audit_log import AuditLogEntry
from tradewire.registry.client_registry import ClientRegistry

REFRESH_TOKEN = "1//test-refresh-token"
ACCESS_TOKEN = "ya29.test-access-token"

ADVISOR = AdvisorIdentity(id=1, email="advisor@test.com")


@pytest.fixture
def pipeline(test_db, cipher, oauth_client, gmail_client) -> TradeDispatchPipeline:
    return TradeDispatchPipeline(test_db, cipher, oauth_client, gmail_client)


@pytest_asyncio.fixture
async def authorized_client(test_db, cipher):
    registry = ClientRegistry(test_db)
    await registry.register_client("Jane", "c@x.com", "broker@y.com")
    await registry.attach_credential("c@x.com", cipher.encrypt(REFRESH_TOKEN))
    return "c@x.com"


async def _audit_entries(db):
    result = await db.execute(select(AuditLogEntry).order_by(AuditLogEntry.id))
    return list(result.scalars().all())


def _decode_raw(raw: str) -> str:
    padding = "=" * (-len(raw) % 4)
    return base64.urlsafe_b64decode(raw + padding).decode("utf-8")


class TestSuccessfulDispatch:
    @pytest.mark.asyncio
    async def test_returns_message_id_and_broker(self, pipeline, authorized_client):
        result = await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")

        assert result == DispatchResult(message_id="gmail-1", broker_email="broker@y.com")

    @pytest.mark.asyncio
    async def test_writes_one_audit_entry(self, pipeline, authorized_client, test_db):
        await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")

        entries = await _audit_entries(test_db)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.advisor_identifier == "advisor@test.com"
        assert entry.client_email == "c@x.com"
        assert entry.broker_email == "broker@y.com"
        assert entry.gmail_message_id == "gmail-1"
        assert entry.trade_details == "Buy 100 AAPL"
        assert entry.created_at is not None

    @pytest.mark.asyncio
    async def test_refreshes_with_decrypted_token(self, pipeline, authorized_client, oauth_client, gmail_client):
        await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")

        oauth_client.refresh_access_token.assert_awaited_once_with(REFRESH_TOKEN)
        access_token, raw = gmail_client.send_raw.await_args.args
        assert access_token == ACCESS_TOKEN
        assert "=" not in raw

    @pytest.mark.asyncio
    async def test_message_sent_to_broker_with_details(self, pipeline, authorized_client, gmail_client):
        await pipeline.dispatch_trade(ADVISOR, authorized_client, "Sell 50 MSFT @ market")

        message = _decode_raw(gmail_client.send_raw.await_args.args[1])
        assert "To: broker@y.com" in message
        assert "Subject: Trade Instruction" in message
        assert "Sell 50 MSFT @ market" in message
        assert "From:" not in message

    @pytest.mark.asyncio
    async def test_identical_requests_send_twice(self, pipeline, authorized_client, gmail_client, test_db):
        first = await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")
        second = await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")

        assert first.message_id != second.message_id
        assert gmail_client.send_raw.await_count == 2
        entries = await _audit_entries(test_db)
        assert [e.gmail_message_id for e in entries] == ["gmail-1", "gmail-2"]

    @pytest.mark.asyncio
    async def test_advisor_attribution_from_identity(self, pipeline, authorized_client, test_db):
        other = AdvisorIdentity(id=99, email="other@advisors.com")

        await pipeline.dispatch_trade(other, authorized_client, "Buy 1 AAPL")

        entries = await _audit_entries(test_db)
        assert entries[0].advisor_identifier == "other@advisors.com"


class TestClientResolution:
    @pytest.mark.asyncio
    async def test_unknown_client(self, pipeline, oauth_client, gmail_client, test_db):
        with pytest.raises(ClientNotFoundError):
            await pipeline.dispatch_trade(ADVISOR, "nobody@x.com", "Buy 100 AAPL")

        oauth_client.refresh_access_token.assert_not_called()
        gmail_client.send_raw.assert_not_called()
        assert await _audit_entries(test_db) == []

    @pytest.mark.asyncio
    async def test_registered_but_not_authorized(self, pipeline, gmail_client, test_db):
        await ClientRegistry(test_db).register_client("Jane", "c@x.com", "broker@y.com")

        with pytest.raises(ClientNotFoundError):
            await pipeline.dispatch_trade(ADVISOR, "c@x.com", "Buy 100 AAPL")

        gmail_client.send_raw.assert_not_called()
        assert await _audit_entries(test_db) == []

    @pytest.mark.asyncio
    async def test_deactivated_client(self, pipeline, authorized_client, gmail_client, test_db):
        await ClientRegistry(test_db).deactivate_client(authorized_client)

        with pytest.raises(ClientNotFoundError):
            await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")

        gmail_client.send_raw.assert_not_called()


class TestCredentialFailures:
    @pytest.mark.asyncio
    async def test_corrupt_credential(self, pipeline, test_db, oauth_client, gmail_client):
        registry = ClientRegistry(test_db)
        await registry.register_client("Jane", "c@x.com", "broker@y.com")
        await registry.attach_credential("c@x.com", "00:11:22")

        with pytest.raises(CredentialCorruptError):
            await pipeline.dispatch_trade(ADVISOR, "c@x.com", "Buy 100 AAPL")

        oauth_client.refresh_access_token.assert_not_called()
        gmail_client.send_raw.assert_not_called()
        assert await _audit_entries(test_db) == []

    @pytest.mark.asyncio
    async def test_revoked_grant(self, pipeline, authorized_client, oauth_client, gmail_client, test_db):
        oauth_client.refresh_access_token.side_effect = GoogleAPIError(
            400, "invalid_grant", "Token has been expired or revoked."
        )

        with pytest.raises(CredentialRevokedError):
            await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")

        gmail_client.send_raw.assert_not_called()
        assert await _audit_entries(test_db) == []

    @pytest.mark.asyncio
    async def test_token_endpoint_unreachable(self, pipeline, authorized_client, oauth_client):
        oauth_client.refresh_access_token.side_effect = GoogleAPIError(None, "network_error", "timeout")

        with pytest.raises(DispatchError) as exc_info:
            await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")

        assert not isinstance(exc_info.value, CredentialRevokedError)
        assert str(exc_info.value) == "Failed to send trade."


class TestSendFailures:
    @pytest.mark.asyncio
    async def test_gmail_rejects_send(self, pipeline, authorized_client, gmail_client, test_db):
        gmail_client.send_raw.side_effect = GoogleAPIError(403, "PERMISSION_DENIED", "Insufficient scope")

        with pytest.raises(DispatchError, match="Failed to send trade."):
            await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")

        assert await _audit_entries(test_db) == []

    @pytest.mark.asyncio
    async def test_audit_write_failure_after_send(self, pipeline, authorized_client, gmail_client, test_db):
        pipeline.audit.record_dispatch = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("db down"))
        )

        with pytest.raises(LogPersistenceError) as exc_info:
            await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")

        assert exc_info.value.message_id == "gmail-1"
        assert exc_info.value.broker_email == "broker@y.com"
        gmail_client.send_raw.assert_awaited_once()
        assert await _audit_entries(test_db) == []

    @pytest.mark.asyncio
    async def test_audit_failure_is_logged_critically(self, pipeline, authorized_client, caplog):
        pipeline.audit.record_dispatch = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("db down"))
        )

        with caplog.at_level("CRITICAL", logger="tradewire.dispatch.pipeline"):
            with pytest.raises(LogPersistenceError):
                await pipeline.dispatch_trade(ADVISOR, authorized_client, "Buy 100 AAPL")

        records = [r for r in caplog.records if r.levelname == "CRITICAL"]
        assert len(records) == 1
        assert records[0].gmail_message_id == "gmail-1"
        assert records[0].trade_details == "Buy 100 AAPL"
