"""Logging setup: one console handler, request ids on every record, credentials masked."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict, Optional

from indexintellect.core.context import get_request_id

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s"
REDACTED = "***"

# SDK loggers echo request details (including prompts) at DEBUG.
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "opik")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


class RedactSecretsFilter(logging.Filter):
    """Replace the configured generative API key wherever it shows up in a message."""

    def __init__(self, secret: Optional[str] = None) -> None:
        super().__init__()
        self._secret = secret

    def _current_secret(self) -> Optional[str]:
        if self._secret is not None:
            return self._secret or None
        from indexintellect.core.config import settings

        key = settings.llm_api_key
        return key.get_secret_value() if key else None

    def filter(self, record: logging.LogRecord) -> bool:
        secret = self._current_secret()
        if not secret:
            return True
        message = record.getMessage()
        if secret in message:
            record.msg = message.replace(secret, REDACTED)
            record.args = ()
        return True


def build_logging_config(log_level: str = "INFO") -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "filters": {
            "request_id": {"()": "indexintellect.core.logging.RequestIdFilter"},
            "redact_secrets": {"()": "indexintellect.core.logging.RedactSecretsFilter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": log_level,
                "filters": ["request_id", "redact_secrets"],
            }
        },
        "root": {"handlers": ["console"], "level": log_level},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    }


def configure_logging(*, log_level: str = "INFO") -> None:
    """Apply :func:`build_logging_config` once per process."""
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(build_logging_config(log_level.upper()))
    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
    setattr(configure_logging, "_configured", True)
