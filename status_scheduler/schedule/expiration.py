"""
Expiry instant for an applied status.

expireHour set -> that hour today, unless it has already passed (then end of day).
expireHour absent -> end of the local day.
"""
from datetime import datetime, timezone

from status_scheduler.schedule.models import Status
from status_scheduler.schedule.timeutil import at_local_time, end_of_local_day


def compute_expiration(status: Status, local: datetime) -> datetime:
    """Never returns an instant before `local`."""
    if status.expireHour is None:
        return end_of_local_day(local)
    candidate = at_local_time(local, f"{status.expireHour:02d}:00")
    if candidate.astimezone(timezone.utc) <= local.astimezone(timezone.utc):
        return end_of_local_day(local)
    return candidate
