from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from tradewire.models.base import Base, TimestampMixin


class Advisor(Base, TimestampMixin):
    __tablename__ = "advisors"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Advisor {self.email}>"
