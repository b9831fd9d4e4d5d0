"""
Single-rule predicate: does this rule apply at this local instant?

The optional rule.time is a once-per-day gate: the rule matches from that local
clock time until the end of the same calendar day.
"""
from datetime import datetime, timezone

from status_scheduler.schedule.errors import UnknownRuleTypeError
from status_scheduler.schedule.timeutil import (
    at_local_time,
    calendar_date,
    days_between,
    is_workday,
    weekday_token,
)


def time_gate_open(clock: str, local: datetime) -> bool:
    """True once `local` is at or past clock ("HH:MM") on its own calendar day."""
    gate = at_local_time(local, clock)
    # compare instants: same-zone datetimes compare by wall clock and ignore fold
    return local.astimezone(timezone.utc) >= gate.astimezone(timezone.utc) and gate.date() == local.date()


def _weekly_matches(rule, local: datetime) -> bool:
    if weekday_token(local) not in rule.days:
        return False
    if rule.onlyWeekdays:
        return is_workday(local)
    return True


def _every_n_days_matches(rule, local: datetime) -> bool:
    days_since_start = days_between(local, rule.startDate)
    if days_since_start < 0:
        return False
    if days_since_start % rule.intervalDays != 0:
        return False
    if rule.onlyWeekdays:
        return is_workday(local)
    return True


def _dates_matches(rule, local: datetime) -> bool:
    return calendar_date(local) in rule.dates


_DAY_MATCHERS = {
    "weekly": _weekly_matches,
    "everyNDays": _every_n_days_matches,
    "dates": _dates_matches,
}


def matches_day(rule, local: datetime) -> bool:
    """Type-specific calendar check only (no time gate)."""
    day_matcher = _DAY_MATCHERS.get(rule.type)
    if day_matcher is None:
        raise UnknownRuleTypeError(rule.type)
    return day_matcher(rule, local)


def matches(rule, local: datetime) -> bool:
    """
    Decide whether `rule` applies at `local` (already projected into the schedule zone).

    Raises UnknownRuleTypeError for a type the validator should have rejected.
    """
    if rule.type not in _DAY_MATCHERS:
        raise UnknownRuleTypeError(rule.type)
    if rule.time and not time_gate_open(rule.time, local):
        return False
    return matches_day(rule, local)
