"""
Log redaction: keep credentials out of every log sink.

RedactingFilter scrubs records before any handler formats them; configure_logging
installs it on the root handlers.
"""
import logging
import re
from typing import Any, Dict, Mapping

LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

SENSITIVE_KEYS = ("token", "password", "secret", "key", "auth")
REDACTED = "[REDACTED]"

# Slack-style tokens and HTTP bearer credentials
_TOKEN_PATTERN = re.compile(r"\b(xox[abpr]-[A-Za-z0-9-]+|Bearer\s+[A-Za-z0-9._~+/=-]+)")


def _is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    return any(s in lowered for s in SENSITIVE_KEYS)


def _mask(value: Any) -> str:
    if isinstance(value, str) and len(value) > 10:
        return f"{value[:4]}...{value[-4:]}"
    return REDACTED


def redact_text(text: str) -> str:
    """Mask token-looking substrings inside free text."""
    return _TOKEN_PATTERN.sub(lambda m: _mask(m.group(0)), text)


def sanitize_metadata(meta: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Copy of meta with sensitive values masked.

    Long strings keep their first/last 4 characters so operators can tell
    tokens apart; everything else under a sensitive key becomes [REDACTED].
    """
    sanitized: Dict[str, Any] = {}
    for key, value in meta.items():
        if _is_sensitive(key):
            sanitized[key] = _mask(value)
        elif isinstance(value, str):
            sanitized[key] = redact_text(value)
        else:
            sanitized[key] = value
    return sanitized


class RedactingFilter(logging.Filter):
    """Scrub credentials from log records (dict args, positional args, message)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact_text(record.msg)
        args = record.args
        if isinstance(args, Mapping):
            record.args = sanitize_metadata(args)
        elif isinstance(args, tuple):
            record.args = tuple(redact_text(a) if isinstance(a, str) else a for a in args)
        return True


def configure_logging(level: str = "info") -> None:
    """basicConfig with the standard format and the redacting filter on root handlers."""
    numeric = LOG_LEVELS.get(str(level).lower(), logging.INFO)
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(numeric)
    for handler in root.handlers:
        if not any(isinstance(f, RedactingFilter) for f in handler.filters):
            handler.addFilter(RedactingFilter())
