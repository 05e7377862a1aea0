"""Sanitized logging helpers.

Log lines in this service routinely mention request headers, reviewer
identities and store URLs. ``get_sanitized_logger`` returns a normal stdlib
logger whose records are scrubbed of bearer tokens, private keys, e-mail
addresses and URL passwords before any handler sees them.
"""
import logging
import re
from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_PATTERNS = [
    (re.compile(r"(?i)bearer\s+[A-Za-z0-9\-_\.=]+"), "Bearer ***"),
    (re.compile(r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----", re.S), "***PRIVATE KEY***"),
    (re.compile(r"([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})"), r"\1***@\2"),
    (re.compile(r"://([^:/@\s]+):([^@\s]+)@"), r"://\1:***@"),
]


def sanitize(message: str) -> str:
    for pattern, replacement in _PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class SanitizingFilter(logging.Filter):
    """Rewrites the rendered message of a record with secrets masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            rendered = record.getMessage()
        except Exception:
            return True
        record.msg = sanitize(rendered)
        record.args = None
        return True


class RequestIDFilter(logging.Filter):
    """Attaches the current request id (see RequestIDMiddleware) to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


_sanitizer = SanitizingFilter()


def get_sanitized_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if _sanitizer not in logger.filters:
        logger.addFilter(_sanitizer)
    return logger
