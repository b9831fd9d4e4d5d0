"""
Rule evaluation engine for scheduled profile statuses.

Documents are validated once (validation.py), parsed into models (models.py) and
evaluated first-match-wins in the schedule's timezone (evaluator.py).
"""
from status_scheduler.schedule.client import StatusSetter
from status_scheduler.schedule.errors import (
    CredentialMissingError,
    InvalidScheduleError,
    InvalidTargetInstantError,
    InvalidTimezoneError,
    ScheduleError,
    SchedulerNotInitializedError,
    UnknownRuleTypeError,
    error_result,
)
from status_scheduler.schedule.evaluator import ScheduleEvaluator
from status_scheduler.schedule.models import (
    DatesRule,
    EveryNDaysRule,
    ScheduleDocument,
    ScheduleOptions,
    Status,
    WeeklyRule,
)
from status_scheduler.schedule.service import StatusScheduler, preview_schedule, run_scheduler
from status_scheduler.schedule.validation import quick_validate, validate_schedule

__all__ = [
    "StatusSetter",
    "CredentialMissingError",
    "InvalidScheduleError",
    "InvalidTargetInstantError",
    "InvalidTimezoneError",
    "ScheduleError",
    "SchedulerNotInitializedError",
    "UnknownRuleTypeError",
    "error_result",
    "ScheduleEvaluator",
    "DatesRule",
    "EveryNDaysRule",
    "ScheduleDocument",
    "ScheduleOptions",
    "Status",
    "WeeklyRule",
    "StatusScheduler",
    "preview_schedule",
    "run_scheduler",
    "quick_validate",
    "validate_schedule",
]
