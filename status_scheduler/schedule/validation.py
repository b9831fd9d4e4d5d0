"""
Validation rules for schedule documents.

- validate_schedule never raises: every defect is collected into ValidationResult.errors
- messages carry their location ("Rule 2: ...", "Rule 2: Status: ...", "Options: ...")
- version must be 1, timezone must resolve, rules must be a non-empty list
- rule ids must be unique across the document
- quick_validate is a shallow presence check for fast UI feedback
"""
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List

from status_scheduler.schedule.models import RULE_TYPES
from status_scheduler.schedule.timeutil import WEEKDAY_TOKENS, is_valid_timezone

LOG_LEVEL_NAMES = ("error", "warn", "info", "debug")
MAX_STATUS_TEXT = 100

_TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$", re.ASCII)
_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
_SHORT_CODE_PATTERN = re.compile(r"^:[a-z0-9_+-]+:$", re.ASCII)


@dataclass
class ValidationResult:
    """Outcome of validating a schedule document."""
    valid: bool
    errors: List[str] = field(default_factory=list)


def _is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true is not a number here
    return isinstance(value, int) and not isinstance(value, bool)


def _present(container: dict, key: str) -> bool:
    return container.get(key) is not None


def _duplicates(items: List[Any]) -> List[Any]:
    """Values that occur more than once, in first-repeat order, each reported once."""
    seen: List[Any] = []
    repeated: List[Any] = []
    for item in items:
        if item in seen:
            if item not in repeated:
                repeated.append(item)
        else:
            seen.append(item)
    return repeated


def is_valid_time(value: Any) -> bool:
    """HH:MM, 24-hour."""
    return isinstance(value, str) and bool(_TIME_PATTERN.match(value))


def is_valid_iso_date(value: Any) -> bool:
    """YYYY-MM-DD that survives a parse/serialize round trip (rejects 2024-13-01, 2023-02-29)."""
    if not isinstance(value, str) or not _ISO_DATE_PATTERN.match(value):
        return False
    try:
        return date.fromisoformat(value).isoformat() == value
    except ValueError:
        return False


def is_valid_icon(icon: Any) -> bool:
    """
    :short_code: icons must be well-formed; anything else not wrapped in colons
    is accepted as a Unicode glyph.
    """
    if not isinstance(icon, str) or not icon.strip():
        return False
    if _SHORT_CODE_PATTERN.match(icon):
        return True
    if icon.startswith(":") or icon.endswith(":"):
        return False
    return True


def validate_status(status: Any) -> List[str]:
    if not isinstance(status, dict):
        return ["Status must be an object"]
    errors: List[str] = []

    text = status.get("text")
    if text is None or text == "":
        errors.append("Status must specify text")
    elif not isinstance(text, str):
        errors.append("Status text must be a string")
    elif len(text) > MAX_STATUS_TEXT:
        errors.append(f"Status text must be {MAX_STATUS_TEXT} characters or less")

    icon = status.get("icon")
    if icon is None or icon == "":
        errors.append("Status must specify icon")
    elif not isinstance(icon, str):
        errors.append("Status icon must be a string")
    elif not is_valid_icon(icon):
        errors.append(
            f"Invalid icon format: {icon}. Must be a Unicode emoji or a :short_code: icon"
        )

    if _present(status, "expireHour"):
        hour = status["expireHour"]
        if not _is_int(hour) or hour < 0 or hour > 23:
            errors.append("expireHour must be an integer between 0 and 23")
    return errors


def _validate_only_weekdays(rule: dict) -> List[str]:
    if _present(rule, "onlyWeekdays") and not isinstance(rule["onlyWeekdays"], bool):
        return ["onlyWeekdays must be a boolean"]
    return []


def _validate_weekly(rule: dict) -> List[str]:
    errors: List[str] = []
    days = rule.get("days")
    if not isinstance(days, list):
        errors.append("Weekly rule must have a days array")
    else:
        invalid = [str(d) for d in days if d not in WEEKDAY_TOKENS]
        if invalid:
            errors.append(f"Invalid days: {', '.join(invalid)}. Must be: {', '.join(WEEKDAY_TOKENS)}")
        if not days:
            errors.append("Weekly rule must specify at least one day")
        if _duplicates(days):
            errors.append("Weekly rule contains duplicate days")
    errors.extend(_validate_only_weekdays(rule))
    return errors


def _validate_every_n_days(rule: dict) -> List[str]:
    errors: List[str] = []
    start = rule.get("startDate")
    if start is None or start == "":
        errors.append("Interval rule must specify startDate")
    elif not is_valid_iso_date(start):
        errors.append(f"Invalid startDate format: {start}. Must be YYYY-MM-DD")

    interval = rule.get("intervalDays")
    if interval is None:
        errors.append("Interval rule must specify intervalDays")
    elif not _is_int(interval) or interval < 1:
        errors.append("intervalDays must be a positive integer")
    errors.extend(_validate_only_weekdays(rule))
    return errors


def _validate_dates(rule: dict) -> List[str]:
    dates = rule.get("dates")
    if not isinstance(dates, list):
        return ["Date rule must have a dates array"]
    errors: List[str] = []
    if not dates:
        errors.append("Date rule must specify at least one date")
    invalid = [str(d) for d in dates if not is_valid_iso_date(d)]
    if invalid:
        errors.append(f"Invalid date formats: {', '.join(invalid)}. Must be YYYY-MM-DD")
    if _duplicates(dates):
        errors.append("Date rule contains duplicate dates")
    return errors


_TYPE_VALIDATORS = {
    "weekly": _validate_weekly,
    "everyNDays": _validate_every_n_days,
    "dates": _validate_dates,
}


def validate_rule(rule: Any) -> List[str]:
    """Return every defect of a single rule (unprefixed; validate_schedule adds "Rule N: ")."""
    if not isinstance(rule, dict):
        return ["Rule must be an object"]
    errors: List[str] = []

    if _present(rule, "id") and not isinstance(rule["id"], str):
        errors.append("Rule ID must be a string")

    rule_type = rule.get("type")
    if rule_type is None or rule_type == "":
        errors.append("Rule must specify a type")
    elif rule_type not in RULE_TYPES:
        errors.append(f"Invalid rule type: {rule_type}. Must be 'weekly', 'everyNDays', or 'dates'")

    if _present(rule, "time") and not is_valid_time(rule["time"]):
        errors.append(f"Invalid time format: {rule['time']}. Must be HH:MM format")

    if _present(rule, "enabled") and not isinstance(rule["enabled"], bool):
        errors.append("enabled must be a boolean")

    if not _present(rule, "status"):
        errors.append("Rule must specify a status")
    else:
        errors.extend(f"Status: {e}" for e in validate_status(rule["status"]))

    type_validator = _TYPE_VALIDATORS.get(rule_type) if isinstance(rule_type, str) else None
    if type_validator is not None:
        errors.extend(type_validator(rule))
    return errors


def validate_options(options: Any) -> List[str]:
    if not isinstance(options, dict):
        return ["Options must be an object"]
    errors: List[str] = []
    if _present(options, "clearWhenNoMatch") and not isinstance(options["clearWhenNoMatch"], bool):
        errors.append("clearWhenNoMatch must be a boolean")
    if _present(options, "logLevel") and options["logLevel"] not in LOG_LEVEL_NAMES:
        errors.append(
            f"Invalid logLevel: {options['logLevel']}. Must be one of: {', '.join(LOG_LEVEL_NAMES)}"
        )
    for key in ("retryAttempts", "retryDelayMs"):
        if _present(options, key):
            value = options[key]
            if not _is_int(value) or value < 0:
                errors.append(f"{key} must be a non-negative integer")
    return errors


def validate_schedule(document: Any) -> ValidationResult:
    """
    Validate a complete schedule document.

    Never raises; returns every defect found, in document order.
    """
    if not isinstance(document, dict):
        return ValidationResult(valid=False, errors=["Schedule must be an object"])
    errors: List[str] = []

    version = document.get("version")
    if not (_is_int(version) and version == 1):
        errors.append("Schedule version must be 1")

    tz = document.get("timezone")
    if tz is None or tz == "":
        errors.append("Schedule must specify a timezone")
    elif not is_valid_timezone(tz):
        errors.append(f"Invalid timezone: {tz}")

    rules = document.get("rules")
    if not isinstance(rules, list):
        errors.append("Schedule must contain a rules array")
    elif not rules:
        errors.append("Schedule must contain at least one rule")
    else:
        for index, rule in enumerate(rules, start=1):
            errors.extend(f"Rule {index}: {e}" for e in validate_rule(rule))
        ids = [r["id"] for r in rules if isinstance(r, dict) and isinstance(r.get("id"), str) and r["id"]]
        repeated = _duplicates(ids)
        if repeated:
            errors.append(f"Duplicate rule IDs found: {', '.join(repeated)}")

    if _present(document, "options"):
        errors.extend(f"Options: {e}" for e in validate_options(document["options"]))

    return ValidationResult(valid=not errors, errors=errors)


def quick_validate(document: Any) -> ValidationResult:
    """Shallow check: timezone present, rules present, each rule has a type, status text and icon."""
    if document is None:
        return ValidationResult(valid=False, errors=["No schedule provided"])
    if not isinstance(document, dict):
        return ValidationResult(valid=False, errors=["Schedule must be an object"])
    errors: List[str] = []
    if not document.get("timezone"):
        errors.append("Missing timezone")
    rules = document.get("rules")
    if not isinstance(rules, list) or not rules:
        errors.append("No rules defined")
    if isinstance(rules, list):
        for index, rule in enumerate(rules, start=1):
            rule = rule if isinstance(rule, dict) else {}
            status = rule.get("status") if isinstance(rule.get("status"), dict) else {}
            if not rule.get("type"):
                errors.append(f"Rule {index}: Missing type")
            if not status.get("text"):
                errors.append(f"Rule {index}: Missing status text")
            if not status.get("icon"):
                errors.append(f"Rule {index}: Missing status icon")
    return ValidationResult(valid=not errors, errors=errors)
