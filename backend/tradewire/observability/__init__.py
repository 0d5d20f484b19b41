"""Observability module for Tradewire - logging and metrics."""

from tradewire.observability.logging_config import setup_logging, get_logger
from tradewire.observability.metrics import (
    setup_metrics,
    record_dispatch,
    record_dispatch_failure,
    record_auth_callback,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "record_dispatch",
    "record_dispatch_failure",
    "record_auth_callback",
]
