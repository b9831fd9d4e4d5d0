"""Observability: log redaction and logging setup."""
from status_scheduler.observability.redaction import (
    LOG_LEVELS,
    RedactingFilter,
    configure_logging,
    redact_text,
    sanitize_metadata,
)

__all__ = [
    "LOG_LEVELS",
    "RedactingFilter",
    "configure_logging",
    "redact_text",
    "sanitize_metadata",
]
