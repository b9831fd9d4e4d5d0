"""
Timezone-aware date helpers for rule evaluation.

Everything above this module works in calendar days and local clock times;
no caller subtracts raw durations, so DST shifts never produce off-by-one days.
"""
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from status_scheduler.schedule.errors import InvalidTimezoneError

WEEKDAY_TOKENS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
WORKDAY_TOKENS = WEEKDAY_TOKENS[:5]


def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name; raises InvalidTimezoneError if it does not exist."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidTimezoneError(name)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise InvalidTimezoneError(name) from e


def is_valid_timezone(name) -> bool:
    try:
        get_zone(name)
    except InvalidTimezoneError:
        return False
    return True


def _normalize(local: datetime) -> datetime:
    """Round-trip through UTC so wall times inside a DST gap land on a real instant."""
    return local.astimezone(dt_timezone.utc).astimezone(local.tzinfo)


def localize(instant: datetime, timezone: Union[str, ZoneInfo]) -> datetime:
    """
    Project an instant into the given zone.

    Naive datetimes are taken as wall-clock time in that zone.
    """
    zone = timezone if isinstance(timezone, ZoneInfo) else get_zone(timezone)
    if instant.tzinfo is None:
        return _normalize(instant.replace(tzinfo=zone))
    return instant.astimezone(zone)


def weekday_token(local: datetime) -> str:
    """Day token (mon..sun) of the local calendar day."""
    return WEEKDAY_TOKENS[local.weekday()]


def is_workday(local: datetime) -> bool:
    """True Monday through Friday."""
    return local.weekday() < 5


def calendar_date(local: datetime) -> str:
    """Local calendar date as YYYY-MM-DD."""
    return local.date().isoformat()


def days_between(local: datetime, start: Union[str, date]) -> int:
    """Whole calendar days from start (a local date) to the local day of `local`; negative before start."""
    start_day = date.fromisoformat(start) if isinstance(start, str) else start
    return (local.date() - start_day).days


def parse_clock(value: str):
    """Split "HH:MM" into (hour, minute)."""
    hours, minutes = value.split(":")
    return int(hours), int(minutes)


def at_local_time(local: datetime, clock: str) -> datetime:
    """The instant at clock ("HH:MM") on the same local calendar day as `local`."""
    hour, minute = parse_clock(clock)
    candidate = datetime.combine(local.date(), time(hour, minute), tzinfo=local.tzinfo)
    return _normalize(candidate)


def start_of_local_day(local: datetime) -> datetime:
    return _normalize(datetime.combine(local.date(), time.min, tzinfo=local.tzinfo))


def end_of_local_day(local: datetime) -> datetime:
    """Last representable instant (23:59:59.999999) of the local calendar day."""
    return _normalize(datetime.combine(local.date(), time.max, tzinfo=local.tzinfo))


def add_local_days(local: datetime, days: int) -> datetime:
    """Same wall-clock time `days` calendar days later (not days * 24h)."""
    shifted = datetime.combine(local.date() + timedelta(days=days), local.timetz())
    return _normalize(shifted)
