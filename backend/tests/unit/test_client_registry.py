"""
Unit tests for the client registry.
"""

import pytest
from sqlalchemy import select, func

from tradewire.models.client import Client
from tradewire.registry.client_registry import ActiveClient, ClientRegistry


@pytest.fixture
def registry(test_db) -> ClientRegistry:
    return ClientRegistry(test_db)


async def _client_count(db) -> int:
    result = await db.execute(select(func.count()).select_from(Client))
    return result.scalar_one()


class TestRegisterClient:
    @pytest.mark.asyncio
    async def test_new_client_is_active_without_credential(self, registry, test_db):
        created = await registry.register_client("Jane", "c@x.com", "broker@y.com")

        assert created is True
        row = (await test_db.execute(select(Client))).scalar_one()
        assert row.client_name == "Jane"
        assert row.broker_email == "broker@y.com"
        assert row.is_active is True
        assert row.encrypted_refresh_token is None

    @pytest.mark.asyncio
    async def test_reregistration_keeps_first_row(self, registry, test_db):
        await registry.register_client("Jane", "c@x.com", "broker@y.com")
        created = await registry.register_client("Janet", "c@x.com", "other@z.com")

        assert created is False
        assert await _client_count(test_db) == 1
        row = (await test_db.execute(select(Client))).scalar_one()
        assert row.client_name == "Jane"
        assert row.broker_email == "broker@y.com"

    @pytest.mark.asyncio
    async def test_reregistration_keeps_credential(self, registry, cipher):
        await registry.register_client("Jane", "c@x.com", "broker@y.com")
        envelope = cipher.encrypt("rt")
        await registry.attach_credential("c@x.com", envelope)

        await registry.register_client("Jane", "c@x.com", "broker@y.com")

        client = await registry.lookup_active_client("c@x.com")
        assert client.encrypted_refresh_token == envelope


class TestAttachCredential:
    @pytest.mark.asyncio
    async def test_attach_to_registered_client(self, registry, cipher):
        await registry.register_client("Jane", "c@x.com", "broker@y.com")
        envelope = cipher.encrypt("rt")

        assert await registry.attach_credential("c@x.com", envelope) is True

        client = await registry.lookup_active_client("c@x.com")
        assert client == ActiveClient(
            client_email="c@x.com",
            broker_email="broker@y.com",
            encrypted_refresh_token=envelope,
        )

    @pytest.mark.asyncio
    async def test_attach_to_unknown_client_writes_nothing(self, registry, test_db):
        assert await registry.attach_credential("ghost@x.com", "aa:bb:cc") is False
        assert await _client_count(test_db) == 0

    @pytest.mark.asyncio
    async def test_reauthorization_replaces_credential(self, registry, cipher):
        await registry.register_client("Jane", "c@x.com", "broker@y.com")
        await registry.attach_credential("c@x.com", cipher.encrypt("old"))
        await registry.attach_credential("c@x.com", cipher.encrypt("new"))

        client = await registry.lookup_active_client("c@x.com")
        assert cipher.decrypt(client.encrypted_refresh_token) == "new"


class TestLookupActiveClient:
    @pytest.mark.asyncio
    async def test_unknown_client(self, registry):
        assert await registry.lookup_active_client("nobody@x.com") is None

    @pytest.mark.asyncio
    async def test_client_without_credential(self, registry):
        await registry.register_client("Jane", "c@x.com", "broker@y.com")
        assert await registry.lookup_active_client("c@x.com") is None

    @pytest.mark.asyncio
    async def test_deactivated_client(self, registry, cipher):
        await registry.register_client("Jane", "c@x.com", "broker@y.com")
        await registry.attach_credential("c@x.com", cipher.encrypt("rt"))

        assert await registry.deactivate_client("c@x.com") is True
        assert await registry.lookup_active_client("c@x.com") is None

    @pytest.mark.asyncio
    async def test_reauthorization_reactivates(self, registry, cipher):
        await registry.register_client("Jane", "c@x.com", "broker@y.com")
        await registry.attach_credential("c@x.com", cipher.encrypt("rt"))
        await registry.deactivate_client("c@x.com")

        await registry.attach_credential("c@x.com", cipher.encrypt("rt2"))

        assert await registry.lookup_active_client("c@x.com") is not None

    @pytest.mark.asyncio
    async def test_deactivate_unknown_client(self, registry):
        assert await registry.deactivate_client("ghost@x.com") is False
