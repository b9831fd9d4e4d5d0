"""
Error types raised by the schedule engine.

Validation defects are collected and returned (see validation.py); everything
here is fail-fast.
"""
from typing import Any, Dict, List, Optional


class ScheduleError(Exception):
    """Base class for schedule engine errors."""
    pass


class InvalidScheduleError(ScheduleError, ValueError):
    """Raised by initialize when the schedule document fails validation."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(f"Invalid schedule: {', '.join(self.errors)}")


class InvalidTimezoneError(ScheduleError, ValueError):
    """Raised when a timezone name does not resolve to an IANA zone."""

    def __init__(self, timezone: Any):
        self.timezone = timezone
        super().__init__(f"Invalid timezone: {timezone}")


class UnknownRuleTypeError(ScheduleError):
    """Raised when a rule reaches the matcher with an unrecognized type."""

    def __init__(self, rule_type: Any):
        self.rule_type = rule_type
        super().__init__(f"Unknown rule type: {rule_type}")


class CredentialMissingError(ScheduleError):
    """Raised when a live run has no status setter to talk to."""
    pass


class InvalidTargetInstantError(ScheduleError, ValueError):
    """Raised when a caller-supplied target date/time does not parse."""
    pass


class SchedulerNotInitializedError(ScheduleError, RuntimeError):
    """Raised when the scheduler is used before initialize()."""
    pass


def error_result(exc: BaseException) -> Dict[str, Any]:
    """
    Wrap an exception into the {success: false} envelope used at the UI/CLI boundary.

    kind is "configuration" for schedule defects (fixable by editing the document)
    and "runtime" for everything else.
    """
    result: Dict[str, Any] = {
        "success": False,
        "error": str(exc),
        "kind": "configuration" if isinstance(exc, InvalidScheduleError) else "runtime",
    }
    errors: Optional[List[str]] = getattr(exc, "errors", None)
    if isinstance(exc, InvalidScheduleError) and errors:
        result["errors"] = list(errors)
    return result
