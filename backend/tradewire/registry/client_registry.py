"""
Client Registry.

Owns the ``clients`` table: who the client is, which broker receives
their instructions and the encrypted refresh token used to send them.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradewire.models.client import Client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveClient:
    client_email: str
    broker_email: str
    encrypted_refresh_token: str


class ClientRegistry:
    """
    Registry of clients eligible for delegated sending.

    Usage:
        registry = ClientRegistry(db)
        await registry.register_client("Jane", "jane@x.com", "desk@broker.com")
        await registry.attach_credential("jane@x.com", envelope)
        client = await registry.lookup_active_client("jane@x.com")
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register_client(self, name: str, client_email: str, broker_email: str) -> bool:
        """
        Insert a client unless one with this email already exists.

        Re-registering leaves the existing row untouched.

        Returns:
            True if a new row was created
        """
        existing = await self.db.execute(
            select(Client.id).where(Client.client_email == client_email)
        )
        if existing.scalar_one_or_none() is not None:
            logger.debug(f"Client already registered: {client_email}")
            return False

        self.db.add(Client(
            client_name=name,
            client_email=client_email,
            broker_email=broker_email,
        ))
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await self.db.rollback()
            logger.debug(f"Client registered concurrently: {client_email}")
            return False
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info(f"Registered client {client_email} (broker {broker_email})")
        return True

    async def attach_credential(self, client_email: str, encrypted_refresh_token: str) -> bool:
        """
        Store an encrypted refresh token and mark the client active.

        Returns:
            False when no client has this email (nothing is written)
        """
        rowcount = await self._apply(
            update(Client)
            .where(Client.client_email == client_email)
            .values(encrypted_refresh_token=encrypted_refresh_token, is_active=True)
        )
        if rowcount == 0:
            logger.warning(f"Credential received for unknown client: {client_email}")
            return False
        logger.info(f"Credential attached for client {client_email}")
        return True

    async def lookup_active_client(self, client_email: str) -> Optional[ActiveClient]:
        """Return the client's broker and credential, or None if not eligible.

        Unknown, inactive and not-yet-authorized clients all return None.
        """
        result = await self.db.execute(
            select(Client.client_email, Client.broker_email, Client.encrypted_refresh_token).where(
                Client.client_email == client_email,
                Client.is_active.is_(True),
                Client.encrypted_refresh_token.is_not(None),
            )
        )
        row = result.one_or_none()
        if row is None:
            return None
        return ActiveClient(
            client_email=row.client_email,
            broker_email=row.broker_email,
            encrypted_refresh_token=row.encrypted_refresh_token,
        )

    async def deactivate_client(self, client_email: str) -> bool:
        """Make a client ineligible for dispatch until they re-authorize."""
        rowcount = await self._apply(
            update(Client)
            .where(Client.client_email == client_email)
            .values(is_active=False)
        )
        if rowcount == 0:
            return False
        logger.info(f"Deactivated client {client_email}")
        return True

    async def _apply(self, statement) -> int:
        """Execute and commit a write, returning the affected row count."""
        try:
            result = await self.db.execute(statement)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return result.rowcount
