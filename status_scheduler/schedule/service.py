"""
Scheduler facade: load + validate a schedule, evaluate it, and apply the result
through an injected StatusSetter.

Results:
- {"success": True, "action": "noChange", "message": ...}
- {"success": True, "action": "updateStatus", "rule": id, "status": {...}, "expiresAt": ISO}
- {"success": True, "action": "clear"}
Dry runs add "dryRun": True and never touch the status setter; preview adds "preview": True.
"""
import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from status_scheduler.config import settings
from status_scheduler.observability.redaction import LOG_LEVELS, configure_logging
from status_scheduler.schedule.client import StatusSetter
from status_scheduler.schedule.errors import (
    CredentialMissingError,
    InvalidScheduleError,
    InvalidTargetInstantError,
    SchedulerNotInitializedError,
)
from status_scheduler.schedule.evaluator import ScheduleEvaluator
from status_scheduler.schedule.expiration import compute_expiration
from status_scheduler.schedule.models import Rule, ScheduleDocument, document_from_dict, document_to_dict
from status_scheduler.schedule.storage import load_schedule
from status_scheduler.schedule.timeutil import (
    add_local_days,
    at_local_time,
    calendar_date,
    end_of_local_day,
    localize,
    start_of_local_day,
)
from status_scheduler.schedule.validation import validate_schedule

ScheduleSource = Union[str, Path, Dict[str, Any], ScheduleDocument]
TargetInstant = Union[None, str, date, datetime]


def _status_dict(rule: Rule) -> Dict[str, Any]:
    return rule.status.model_dump(mode="json", exclude_none=True)


class StatusScheduler:
    """Owns one validated schedule and turns evaluations into status changes."""

    def __init__(
        self,
        dry_run: bool = False,
        status_setter: Optional[StatusSetter] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        dry_run: evaluate normally but never call the status setter.
        status_setter: client that applies/clears the status (required for live runs).
        logger: logging port; defaults to this module's logger.
        """
        self.dry_run = dry_run
        self.status_setter = status_setter
        self.logger = logger or logging.getLogger(__name__)
        self._base_log_level = logger.level if logger is not None else logging.NOTSET
        self.schedule: Optional[ScheduleDocument] = None
        self._evaluator: Optional[ScheduleEvaluator] = None

    # --- setup ---

    def initialize(
        self,
        schedule_source: ScheduleSource,
        status_setter: Optional[StatusSetter] = None,
    ) -> ScheduleDocument:
        """
        Load (if given a path), validate and install a schedule.

        Raises InvalidScheduleError with the full error list when the document is invalid.
        Replaces any previously loaded schedule wholesale.
        """
        if isinstance(schedule_source, (str, Path)):
            data = load_schedule(schedule_source)
        elif isinstance(schedule_source, ScheduleDocument):
            data = document_to_dict(schedule_source)
        else:
            data = schedule_source

        validation = validate_schedule(data)
        if not validation.valid:
            self.logger.error("Schedule validation failed: %s", "; ".join(validation.errors))
            raise InvalidScheduleError(validation.errors)

        document = document_from_dict(data)
        evaluator = ScheduleEvaluator(document)
        self.schedule = document
        self._evaluator = evaluator
        if status_setter is not None:
            self.status_setter = status_setter

        options = document.options
        # logLevel applies per schedule; without it the logger goes back to its own level
        self.logger.setLevel(LOG_LEVELS[options.logLevel] if options.logLevel else self._base_log_level)
        configure_retry = getattr(self.status_setter, "configure_retry", None)
        if callable(configure_retry) and (
            options.retryAttempts is not None or options.retryDelayMs is not None
        ):
            configure_retry(options.retryAttempts, options.retryDelayMs)

        self.logger.info(
            "Scheduler initialized (timezone=%s, rules=%d, dry_run=%s)",
            document.timezone,
            len(document.rules),
            self.dry_run,
        )
        return document

    @property
    def retry_policy(self) -> Dict[str, Optional[int]]:
        options = self._require_schedule().options
        return {"retryAttempts": options.retryAttempts, "retryDelayMs": options.retryDelayMs}

    def _require_schedule(self) -> ScheduleDocument:
        if self.schedule is None or self._evaluator is None:
            raise SchedulerNotInitializedError("Scheduler not initialized. Call initialize() first.")
        return self.schedule

    @property
    def evaluator(self) -> ScheduleEvaluator:
        self._require_schedule()
        return self._evaluator

    # --- target instants ---

    def resolve_target(self, target: TargetInstant = None) -> datetime:
        """
        Turn a caller-supplied target into a local instant in the schedule's zone.

        None -> now; naive datetimes and naive ISO strings are wall-clock in the schedule
        zone; dates and date-only strings mean local midnight.
        """
        zone = self.evaluator.zone
        if target is None:
            return datetime.now(zone)
        if isinstance(target, datetime):
            return localize(target, zone)
        if isinstance(target, date):
            return localize(datetime.combine(target, time.min), zone)
        if isinstance(target, str):
            raw = target.strip()
            if raw.endswith("Z"):
                raw = raw[:-1] + "+00:00"
            try:
                parsed = datetime.fromisoformat(raw)
            except ValueError as e:
                raise InvalidTargetInstantError(f"Invalid target date: {target!r}") from e
            return localize(parsed, zone)
        raise InvalidTargetInstantError(f"Invalid target date: {target!r}")

    # --- operations ---

    async def run(self, target: TargetInstant = None) -> Dict[str, Any]:
        """Evaluate the schedule at target (default now) and apply the outcome."""
        document = self._require_schedule()
        local = self.resolve_target(target)

        self.logger.info(
            "Running scheduler (date=%s, timezone=%s, dry_run=%s)",
            local.isoformat(),
            document.timezone,
            self.dry_run,
        )

        matched = self._evaluator.find_matching_rule(local)
        if matched is None:
            if document.options.clearWhenNoMatch:
                return await self._clear_status()
            self.logger.info("No matching rules found, leaving status unchanged")
            return {
                "success": True,
                "action": "noChange",
                "message": "No matching rules found",
            }
        return await self._update_status(matched, local)

    async def preview(self, target: TargetInstant = None) -> Dict[str, Any]:
        """Run as a dry run; the previous dry-run flag is always restored."""
        previous = self.dry_run
        self.dry_run = True
        try:
            result = await self.run(target)
        finally:
            self.dry_run = previous
        return {**result, "preview": True}

    def get_upcoming_changes(
        self, days: Optional[int] = None, start: TargetInstant = None
    ) -> List[Dict[str, Any]]:
        """
        For each of the next `days` local calendar days (default settings.upcoming_days),
        the rule that owns the day.

        Each day is evaluated at its last instant so every time gate of that day is
        open. The first day is listed whole, so today's entries are included even when
        their executeAt has already passed. Never calls the status setter.
        """
        self._require_schedule()
        if days is None:
            days = settings.upcoming_days
        first_day = start_of_local_day(self.resolve_target(start))
        upcoming: List[Dict[str, Any]] = []
        for offset in range(max(days, 0)):
            day = add_local_days(first_day, offset)
            matched = self._evaluator.find_matching_rule(end_of_local_day(day))
            if matched is None:
                continue
            execute_at = at_local_time(day, matched.time) if matched.time else day
            upcoming.append(
                {
                    "date": calendar_date(day),
                    "time": matched.time,
                    "executeAt": execute_at.isoformat(),
                    "rule": matched,
                    "status": matched.status,
                }
            )
        return upcoming

    # --- status application ---

    def _live_setter(self) -> StatusSetter:
        if self.status_setter is None:
            raise CredentialMissingError(
                "No status setter configured. A credential is required for live updates."
            )
        return self.status_setter

    async def _update_status(self, rule: Rule, local: datetime) -> Dict[str, Any]:
        status = rule.status
        expires_at = compute_expiration(status, local)
        result = {
            "success": True,
            "action": "updateStatus",
            "rule": rule.id,
            "status": _status_dict(rule),
            "expiresAt": expires_at.isoformat(),
        }

        if self.dry_run:
            self.logger.info(
                "DRY RUN: Would update status (rule=%s, text=%s, icon=%s, expires_at=%s)",
                rule.id,
                status.text,
                status.icon,
                result["expiresAt"],
            )
            return {**result, "dryRun": True}

        setter = self._live_setter()
        try:
            await setter.set_status(status.text, status.icon, expires_at)
        except Exception as e:
            self.logger.error("Failed to update status: %s", e)
            raise
        self.logger.info("Status updated (rule=%s, text=%s, icon=%s)", rule.id, status.text, status.icon)
        return result

    async def _clear_status(self) -> Dict[str, Any]:
        if self.dry_run:
            self.logger.info("DRY RUN: Would clear status")
            return {"success": True, "action": "clear", "dryRun": True}

        setter = self._live_setter()
        try:
            await setter.clear_status()
        except Exception as e:
            self.logger.error("Failed to clear status: %s", e)
            raise
        self.logger.info("Status cleared")
        return {"success": True, "action": "clear"}


async def run_scheduler(
    schedule_source: Optional[ScheduleSource] = None,
    status_setter: Optional[StatusSetter] = None,
    dry_run: Optional[bool] = None,
    target: TargetInstant = None,
) -> Dict[str, Any]:
    """Create, initialize and run a scheduler; path and dry-run default to settings."""
    configure_logging(settings.log_level)
    scheduler = StatusScheduler(dry_run=settings.dry_run if dry_run is None else dry_run)
    scheduler.initialize(schedule_source or settings.schedule_path, status_setter)
    return await scheduler.run(target)


async def preview_schedule(
    schedule_source: Optional[ScheduleSource] = None,
    target: TargetInstant = None,
) -> Dict[str, Any]:
    """Dry-run preview of a schedule for target (default now)."""
    configure_logging(settings.log_level)
    scheduler = StatusScheduler(dry_run=True)
    scheduler.initialize(schedule_source or settings.schedule_path)
    return await scheduler.preview(target)
