"""
Abstract status-setting interface.

The scheduler only decides what the status should be; a StatusSetter applies it
to the remote profile. Implementations own their credentials and any retry policy.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional


class StatusSetter(ABC):
    """Abstract base class for profile status clients."""

    retry_attempts: Optional[int] = None
    retry_delay_ms: Optional[int] = None

    @abstractmethod
    async def set_status(self, text: str, icon: str, expires_at: Optional[datetime] = None) -> None:
        """
        Apply a status.

        Args:
            text: Status text (1-100 chars)
            icon: :short_code: or Unicode glyph
            expires_at: Aware datetime after which the status is stale
        """
        pass

    @abstractmethod
    async def clear_status(self) -> None:
        """Remove the current status."""
        pass

    def configure_retry(self, attempts: Optional[int], delay_ms: Optional[int]) -> None:
        """Receive the schedule's retry options; retrying itself is up to the implementation."""
        self.retry_attempts = attempts
        self.retry_delay_ms = delay_ms
