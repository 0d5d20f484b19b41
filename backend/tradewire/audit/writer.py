"""
Audit Log Writer for dispatched trade instructions.

Writes immutable audit entries. The audit log is the SINGLE SOURCE OF
TRUTH that a trade instruction was sent on an advisor's authority.
"""

import logging
from typing import List

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from tradewire.models.audit_log import AuditLogEntry

logger = logging.getLogger(__name__)


class AuditLogWriter:
    """Inserts audit entries. Entries are never updated or deleted."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_dispatch(
        self,
        advisor_identifier: str,
        client_email: str,
        broker_email: str,
        gmail_message_id: str,
        trade_details: str,
    ) -> AuditLogEntry:
        """
        Record a trade instruction Gmail confirmed as sent.

        Args:
            advisor_identifier: Advisor email from the verified session token
            client_email: Client whose account sent the instruction
            broker_email: Recipient of the instruction
            gmail_message_id: Id returned by Gmail
            trade_details: Instruction text exactly as sent

        Returns:
            Created audit entry

        Raises:
            SQLAlchemyError: if the entry could not be committed
        """
        entry = AuditLogEntry(
            advisor_identifier=advisor_identifier,
            client_email=client_email,
            broker_email=broker_email,
            gmail_message_id=gmail_message_id,
            trade_details=trade_details,
        )

        self.db.add(entry)
        # Committed entries are final: no further database calls
        await self.db.commit()

        logger.info(f"Audit entry {entry.id}: {advisor_identifier} sent {gmail_message_id} for {client_email}")

        return entry

    async def entries_for_message(self, gmail_message_id: str) -> List[AuditLogEntry]:
        result = await self.db.execute(
            select(AuditLogEntry)
            .where(AuditLogEntry.gmail_message_id == gmail_message_id)
            .order_by(desc(AuditLogEntry.created_at))
        )
        return list(result.scalars().all())
