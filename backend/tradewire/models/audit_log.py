"""Compliance audit log model."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from tradewire.models.base import Base, utcnow


class AuditLogEntry(Base):
    """Immutable record of a trade instruction confirmed sent by Gmail.

    Rows are only ever inserted. A row for a Gmail message id is the
    record that the trade went out on the advisor's authority.
    """
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    advisor_identifier: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    client_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    broker_email: Mapped[str] = mapped_column(String(255), nullable=False)
    gmail_message_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    trade_details: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_audit_logs_advisor_created", "advisor_identifier", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AuditLogEntry {self.gmail_message_id} {self.client_email} -> {self.broker_email}>"
