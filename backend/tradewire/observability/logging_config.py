"""
Structured logging configuration for Tradewire.

Provides:
- JSON lines in production, coloured text in development
- Google credential redaction on every handler
- Optional rotating file handler outside development
"""

import logging
import os
import re
import sys
from datetime import datetime, timezone
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from tradewire.config import settings

SERVICE_NAME = "tradewire-backend"
TEXT_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
JSON_FORMAT = '%(timestamp)s %(level)s %(name)s %(message)s'

# Google access tokens start with "ya29.", refresh tokens with "1//"
CREDENTIAL_PATTERN = re.compile(r"(ya29\.|1//)[A-Za-z0-9._\-]+|(Bearer\s+)[A-Za-z0-9._\-]+")
REDACTED = "[REDACTED]"


def _current_env() -> str:
    return settings.effective_env or "development"


def redact_credentials(text: str) -> str:
    return CREDENTIAL_PATTERN.sub(
        lambda m: f"{m.group(1) or m.group(2)}{REDACTED}", text
    )


class CredentialRedactionFilter(logging.Filter):
    """Masks OAuth tokens in the rendered message and string extras."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_credentials(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        for key, value in list(record.__dict__.items()):
            if key != "msg" and isinstance(value, str) and CREDENTIAL_PATTERN.search(value):
                setattr(record, key, redact_credentials(value))
        return True


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter adding service, environment and source location."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['service'] = SERVICE_NAME
        log_record['environment'] = _current_env()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['source'] = f"{record.module}.{record.funcName}:{record.lineno}"

        request_id = getattr(record, 'request_id', None)
        if request_id:
            log_record['request_id'] = request_id


class ColoredFormatter(logging.Formatter):
    """Level-coloured console output for local runs."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[1;31m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        # Copy so other handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _console_formatter(log_format: str, environment: str) -> logging.Formatter:
    if log_format == "json":
        return CustomJsonFormatter(JSON_FORMAT)
    if environment in ("development", "dev"):
        return ColoredFormatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    return logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file_enabled: Optional[bool] = None,
    log_file_path: Optional[str] = None,
) -> None:
    """Configure the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: 'json' or 'text'
        log_file_enabled: Also write JSON lines to a rotating file
        log_file_path: Path of that file
    """
    log_level = log_level or os.getenv("LOG_LEVEL", "INFO")
    log_format = log_format or os.getenv("LOG_FORMAT", "json")
    environment = _current_env()
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_file_enabled is None:
        log_file_enabled = os.getenv("LOG_FILE_ENABLED", "false").lower() == "true"
    if log_file_path is None:
        log_file_path = os.getenv("LOG_FILE_PATH", "/var/log/tradewire/tradewire.log")

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = []

    redaction = CredentialRedactionFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(_console_formatter(log_format, environment))
    console_handler.addFilter(redaction)
    root.addHandler(console_handler)

    if log_file_enabled and environment not in ("development", "dev"):
        from logging.handlers import RotatingFileHandler

        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file_path,
            maxBytes=int(os.getenv("LOG_FILE_MAX_BYTES", 10485760)),
            backupCount=int(os.getenv("LOG_FILE_BACKUP_COUNT", 5)),
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(CustomJsonFormatter(JSON_FORMAT))
        file_handler.addFilter(redaction)
        root.addHandler(file_handler)

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiohttp", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root.info("Logging configured", extra={
        "log_level": log_level,
        "log_format": log_format,
        "environment": environment,
    })


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
