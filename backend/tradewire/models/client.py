"""Client registry model."""

from typing import Optional

from sqlalchemy import String, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column

from tradewire.models.base import Base, TimestampMixin


class Client(Base, TimestampMixin):
    """A client whose Gmail account sends trade instructions to their broker.

    The refresh token is stored only as a cipher envelope and stays NULL
    until the client completes the Google consent screen.
    """
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    broker_email: Mapped[str] = mapped_column(String(255), nullable=False)
    encrypted_refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Client {self.client_email} -> {self.broker_email} active={self.is_active}>"
