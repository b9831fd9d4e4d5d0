"""
Human-readable rule summaries for CLI/UI listings.
"""
from datetime import datetime
from typing import Optional

from status_scheduler.schedule.matcher import matches_day
from status_scheduler.schedule.models import RULE_TYPES
from status_scheduler.schedule.timeutil import (
    WEEKDAY_TOKENS,
    add_local_days,
    calendar_date,
    days_between,
    get_zone,
    localize,
    start_of_local_day,
)

# Day-of-week patterns repeat every 7 days, so 7 candidates (days or intervals) suffice
_WEEK_DAYS = 7


def _at(rule) -> str:
    return f"at {rule.time}" if rule.time else "at start of day"


def describe_rule(rule) -> str:
    """One-line summary, e.g. "Every Mon, Wed at 09:00"."""
    if rule.type == "weekly":
        days = sorted(rule.days, key=WEEKDAY_TOKENS.index)
        text = "Every " + ", ".join(d.capitalize() for d in days)
    elif rule.type == "everyNDays":
        unit = "day" if rule.intervalDays == 1 else f"{rule.intervalDays} days"
        text = f"Every {unit} from {rule.startDate}"
    elif rule.type == "dates":
        text = "On " + ", ".join(sorted(rule.dates))
    else:
        return f"Unknown rule type: {rule.type}"
    if rule.time:
        text += f" {_at(rule)}"
    if getattr(rule, "onlyWeekdays", None):
        text += " (weekdays only)"
    return text


def _interval_offsets(rule, day: datetime):
    """Day offsets from `day` to the next 7 interval days (day itself included)."""
    days_since = days_between(day, rule.startDate)
    if days_since < 0:
        first = -days_since
    else:
        first = (rule.intervalDays - days_since % rule.intervalDays) % rule.intervalDays
    return (first + step * rule.intervalDays for step in range(_WEEK_DAYS))


def describe_next_execution(rule, timezone: str, now: Optional[datetime] = None) -> str:
    """
    "Next: Monday, Jan 08 at 09:00" for the first local day, today included,
    whose calendar criteria match. The time gate is not consulted.
    """
    if rule.type not in RULE_TYPES:
        return f"Unknown rule type: {rule.type}"
    zone = get_zone(timezone)
    local = localize(now or datetime.now(zone), zone)
    if rule.type == "dates":
        today = calendar_date(local)
        upcoming = sorted(d for d in rule.dates if d >= today)
        if not upcoming:
            return "No future dates scheduled"
        next_day = localize(datetime.fromisoformat(upcoming[0]), zone)
        return f"Next: {next_day.strftime('%A, %b %d')} {_at(rule)}"

    day = start_of_local_day(local)
    if rule.type == "everyNDays":
        offsets = _interval_offsets(rule, day)
    else:
        offsets = range(_WEEK_DAYS)
    try:
        for offset in offsets:
            candidate = add_local_days(day, offset)
            if matches_day(rule, candidate):
                return f"Next: {candidate.strftime('%A, %b %d')} {_at(rule)}"
    except OverflowError:
        # interval steps ran past the last representable date
        return "No future dates scheduled"
    return "No future dates scheduled"
