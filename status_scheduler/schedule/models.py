"""
Schedule document and rule models.

Contract:
- version: 1 (schema gate)
- timezone: IANA zone name
- rules: weekly (days) | everyNDays (startDate + intervalDays) | dates (ISO dates), first match wins
- status: text + icon (:short_code: or Unicode) + optional expireHour (0-23)
- options: clearWhenNoMatch, logLevel, retryAttempts, retryDelayMs

Models are only built from documents that already passed validate_schedule().
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from status_scheduler.schedule.errors import InvalidScheduleError

DayToken = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


class Status(BaseModel):
    """Payload applied to the profile when a rule matches."""
    text: str = Field(..., min_length=1, max_length=100)
    icon: str  # :short_code: or a Unicode glyph
    expireHour: Optional[int] = Field(None, ge=0, le=23)


# --- Rule kinds ---

class _RuleBase(BaseModel):
    id: Optional[str] = None
    time: Optional[str] = Field(None, pattern=r"^([01][0-9]|2[0-3]):[0-5][0-9]$")  # HH:MM local
    status: Status
    enabled: Optional[bool] = None
    model_config = {"extra": "allow"}


class WeeklyRule(_RuleBase):
    """Match on the listed days of the week."""
    type: Literal["weekly"] = "weekly"
    days: List[DayToken] = Field(..., min_length=1)
    onlyWeekdays: Optional[bool] = None


class EveryNDaysRule(_RuleBase):
    """Match every intervalDays calendar days counted from startDate (day 0 included)."""
    type: Literal["everyNDays"] = "everyNDays"
    startDate: str  # YYYY-MM-DD
    intervalDays: int = Field(..., ge=1)
    onlyWeekdays: Optional[bool] = None


class DatesRule(_RuleBase):
    """Match on the listed calendar dates."""
    type: Literal["dates"] = "dates"
    dates: List[str] = Field(..., min_length=1)  # YYYY-MM-DD


Rule = Annotated[Union[WeeklyRule, EveryNDaysRule, DatesRule], Field(discriminator="type")]

RULE_TYPES = ("weekly", "everyNDays", "dates")


class ScheduleOptions(BaseModel):
    clearWhenNoMatch: bool = False
    logLevel: Optional[Literal["error", "warn", "info", "debug"]] = None
    retryAttempts: Optional[int] = Field(None, ge=0)
    retryDelayMs: Optional[int] = Field(None, ge=0)


class ScheduleDocument(BaseModel):
    """Root configuration: ordered rules evaluated in the schedule's timezone."""
    version: Literal[1] = 1
    timezone: str
    rules: List[Rule] = Field(..., min_length=1)
    options: ScheduleOptions = Field(default_factory=ScheduleOptions)


def document_to_dict(document: ScheduleDocument) -> Dict[str, Any]:
    """Serialize a document for JSON storage (rule order preserved)."""
    return document.model_dump(mode="json", exclude_none=True)


def document_from_dict(data: Dict[str, Any]) -> ScheduleDocument:
    """
    Build a ScheduleDocument from plain data that already passed validation.

    A null options section is treated as absent. Any pydantic rejection is
    reported as InvalidScheduleError so callers see one error type for bad documents.
    """
    payload = dict(data)
    if payload.get("options") is None:
        payload.pop("options", None)
    try:
        return ScheduleDocument.model_validate(payload)
    except ValidationError as e:
        messages = []
        for err in e.errors():
            location = ".".join(str(part) for part in err.get("loc", ()))
            messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
        raise InvalidScheduleError(messages) from e
