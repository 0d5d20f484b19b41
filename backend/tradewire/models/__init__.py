from tradewire.models.base import Base, TimestampMixin
from tradewire.models.advisor import Advisor
from tradewire.models.client import Client
from tradewire.models.audit_log import AuditLogEntry

__all__ = [
    "Base",
    "TimestampMixin",
    "Advisor",
    "Client",
    "AuditLogEntry",
]
