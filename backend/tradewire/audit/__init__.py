"""Compliance audit log for dispatched trade instructions."""

from tradewire.audit.writer import AuditLogWriter

__all__ = ["AuditLogWriter"]
