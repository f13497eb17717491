"""Logging setup and filters that scrub guest contact details."""

from __future__ import annotations

import logging
import re

from bungalow_pricing.core.config import get_settings

_SENSITIVE_PATTERN = re.compile(
    r"([\w.+-]+@[\w-]+\.[\w.-]+|\+?\d[\d\s-]{8,}\d)",
)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class SensitiveFilter(logging.Filter):
    """Replace e-mail addresses and phone numbers with a redaction marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = _SENSITIVE_PATTERN.sub("**REDACTED**", record.msg)
        return True


def configure_logging(level: str | None = None) -> logging.Logger:
    """Configure the package logger from settings and return it."""
    resolved = level or get_settings().log_level
    logging.basicConfig(format=_LOG_FORMAT)
    # Logger filters do not apply to records from child loggers; handlers do.
    for handler in logging.getLogger().handlers:
        if not any(isinstance(flt, SensitiveFilter) for flt in handler.filters):
            handler.addFilter(SensitiveFilter())
    logger = logging.getLogger("bungalow_pricing")
    logger.setLevel(resolved)
    return logger


__all__ = ["SensitiveFilter", "configure_logging"]
