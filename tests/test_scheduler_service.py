"""
Integration tests for the scheduler facade with an in-memory status setter.
"""
import asyncio
import logging

import pytest

from status_scheduler.config import settings
from status_scheduler.schedule.client import StatusSetter
from status_scheduler.schedule.errors import (
    CredentialMissingError,
    InvalidScheduleError,
    InvalidTargetInstantError,
    SchedulerNotInitializedError,
    error_result,
)
from status_scheduler.schedule.models import document_to_dict
from status_scheduler.schedule.service import StatusScheduler, preview_schedule, run_scheduler
from status_scheduler.schedule.storage import save_schedule


class RecordingStatusSetter(StatusSetter):
    """Keeps every call in memory; optionally fails."""

    def __init__(self, fail_with=None):
        self.calls = []
        self.fail_with = fail_with

    async def set_status(self, text, icon, expires_at=None):
        self.calls.append(("set", text, icon, expires_at))
        if self.fail_with:
            raise self.fail_with

    async def clear_status(self):
        self.calls.append(("clear",))
        if self.fail_with:
            raise self.fail_with


def _schedule(**options):
    doc = {
        "version": 1,
        "timezone": "America/Los_Angeles",
        "rules": [
            {
                "id": "weekday-work",
                "type": "weekly",
                "days": ["mon", "tue", "wed", "thu", "fri"],
                "time": "09:00",
                "status": {"text": "Working", "icon": ":computer:", "expireHour": 17},
            }
        ],
    }
    if options:
        doc["options"] = options
    return doc


def test_end_to_end_update_status():
    setter = RecordingStatusSetter()
    scheduler = StatusScheduler(status_setter=setter)
    scheduler.initialize(_schedule())
    result = asyncio.run(scheduler.run("2024-01-08T10:00:00"))
    assert result["success"] is True
    assert result["action"] == "updateStatus"
    assert result["rule"] == "weekday-work"
    assert result["status"] == {"text": "Working", "icon": ":computer:", "expireHour": 17}
    assert result["expiresAt"] == "2024-01-08T17:00:00-08:00"
    assert "dryRun" not in result
    assert len(setter.calls) == 1
    kind, text, icon, expires_at = setter.calls[0]
    assert (kind, text, icon) == ("set", "Working", ":computer:")
    assert expires_at.isoformat() == "2024-01-08T17:00:00-08:00"


def test_before_time_gate_is_no_change():
    setter = RecordingStatusSetter()
    scheduler = StatusScheduler(status_setter=setter)
    scheduler.initialize(_schedule())
    result = asyncio.run(scheduler.run("2024-01-08T08:00:00"))
    assert result == {"success": True, "action": "noChange", "message": "No matching rules found"}
    assert setter.calls == []


def test_clear_when_no_match():
    setter = RecordingStatusSetter()
    scheduler = StatusScheduler(status_setter=setter)
    scheduler.initialize(_schedule(clearWhenNoMatch=True))
    result = asyncio.run(scheduler.run("2024-01-06T12:00:00"))
    assert result == {"success": True, "action": "clear"}
    assert setter.calls == [("clear",)]


def test_dry_run_never_calls_setter():
    setter = RecordingStatusSetter()
    scheduler = StatusScheduler(dry_run=True, status_setter=setter)
    scheduler.initialize(_schedule(clearWhenNoMatch=True))
    updated = asyncio.run(scheduler.run("2024-01-08T10:00:00"))
    cleared = asyncio.run(scheduler.run("2024-01-06T10:00:00"))
    assert updated["dryRun"] is True
    assert updated["action"] == "updateStatus"
    assert cleared == {"success": True, "action": "clear", "dryRun": True}
    assert setter.calls == []


def test_preview_forces_dry_run_and_restores_flag():
    setter = RecordingStatusSetter()
    scheduler = StatusScheduler(dry_run=False, status_setter=setter)
    scheduler.initialize(_schedule())
    result = asyncio.run(scheduler.preview("2024-01-08T10:00:00"))
    assert result["preview"] is True
    assert result["dryRun"] is True
    assert setter.calls == []
    assert scheduler.dry_run is False


def test_preview_restores_flag_on_error():
    scheduler = StatusScheduler(dry_run=False, status_setter=RecordingStatusSetter())
    scheduler.initialize(_schedule())
    with pytest.raises(InvalidTargetInstantError):
        asyncio.run(scheduler.preview("not-a-date"))
    assert scheduler.dry_run is False


def test_preview_works_without_setter():
    scheduler = StatusScheduler()
    scheduler.initialize(_schedule())
    result = asyncio.run(scheduler.preview("2024-01-08T10:00:00"))
    assert result["action"] == "updateStatus"


def test_live_run_without_setter_fails():
    scheduler = StatusScheduler(dry_run=False)
    scheduler.initialize(_schedule())
    with pytest.raises(CredentialMissingError):
        asyncio.run(scheduler.run("2024-01-08T10:00:00"))


def test_live_clear_without_setter_fails():
    scheduler = StatusScheduler(dry_run=False)
    scheduler.initialize(_schedule(clearWhenNoMatch=True))
    with pytest.raises(CredentialMissingError):
        asyncio.run(scheduler.run("2024-01-06T10:00:00"))


def test_setter_failure_propagates_unchanged():
    setter = RecordingStatusSetter(fail_with=RuntimeError("profile API down"))
    scheduler = StatusScheduler(status_setter=setter)
    scheduler.initialize(_schedule())
    with pytest.raises(RuntimeError, match="profile API down"):
        asyncio.run(scheduler.run("2024-01-08T10:00:00"))
    assert len(setter.calls) == 1


def test_initialize_rejects_invalid_schedule():
    scheduler = StatusScheduler()
    doc = _schedule()
    doc["version"] = 2
    doc["rules"][0]["days"] = []
    with pytest.raises(InvalidScheduleError) as excinfo:
        scheduler.initialize(doc)
    assert "Schedule version must be 1" in excinfo.value.errors
    assert "Rule 1: Weekly rule must specify at least one day" in excinfo.value.errors
    assert scheduler.schedule is None


def test_operations_require_initialize():
    scheduler = StatusScheduler(dry_run=True)
    with pytest.raises(SchedulerNotInitializedError):
        asyncio.run(scheduler.run())
    with pytest.raises(SchedulerNotInitializedError):
        scheduler.get_upcoming_changes(7)


def test_invalid_target_instants():
    scheduler = StatusScheduler(dry_run=True)
    scheduler.initialize(_schedule())
    for bad in ("2024-13-45", "yesterday", 12345):
        with pytest.raises(InvalidTargetInstantError):
            asyncio.run(scheduler.run(bad))


def test_target_instant_forms():
    scheduler = StatusScheduler(dry_run=True)
    scheduler.initialize(_schedule())
    # 18:00Z is 10:00 in Los Angeles
    assert asyncio.run(scheduler.run("2024-01-08T18:00:00Z"))["action"] == "updateStatus"
    # date-only means local midnight, before the 09:00 gate
    assert asyncio.run(scheduler.run("2024-01-08"))["action"] == "noChange"


def test_upcoming_changes():
    scheduler = StatusScheduler(dry_run=False, status_setter=RecordingStatusSetter())
    scheduler.initialize(_schedule())
    upcoming = scheduler.get_upcoming_changes(7, start="2024-01-06T12:00:00")
    assert [u["date"] for u in upcoming] == [
        "2024-01-08",
        "2024-01-09",
        "2024-01-10",
        "2024-01-11",
        "2024-01-12",
    ]
    first = upcoming[0]
    assert first["time"] == "09:00"
    assert first["executeAt"] == "2024-01-08T09:00:00-08:00"
    assert first["rule"].id == "weekday-work"
    assert first["status"].text == "Working"
    assert scheduler.status_setter.calls == []


def test_upcoming_changes_empty_window():
    scheduler = StatusScheduler(dry_run=True)
    scheduler.initialize(
        {
            "version": 1,
            "timezone": "Europe/London",
            "rules": [
                {"id": "xmas", "type": "dates", "dates": ["2030-12-25"], "status": {"text": "Xmas", "icon": "🎄"}}
            ],
        }
    )
    assert scheduler.get_upcoming_changes(7, start="2030-01-01") == []
    assert scheduler.get_upcoming_changes(0, start="2030-12-25") == []
    upcoming = scheduler.get_upcoming_changes(3, start="2030-12-24")
    assert len(upcoming) == 1
    assert upcoming[0]["time"] is None
    assert upcoming[0]["executeAt"] == "2030-12-25T00:00:00+00:00"


def test_retry_options_passed_to_setter():
    setter = RecordingStatusSetter()
    scheduler = StatusScheduler(status_setter=setter)
    scheduler.initialize(_schedule(retryAttempts=3, retryDelayMs=500))
    assert setter.retry_attempts == 3
    assert setter.retry_delay_ms == 500
    assert scheduler.retry_policy == {"retryAttempts": 3, "retryDelayMs": 500}


def test_log_level_option_applies_to_injected_logger():
    port = logging.getLogger("status_scheduler.tests.port")
    scheduler = StatusScheduler(dry_run=True, logger=port)
    scheduler.initialize(_schedule(logLevel="warn"))
    assert port.level == logging.WARNING


def test_initialize_from_file(tmp_path):
    path = tmp_path / "schedule.json"
    save_schedule(path, _schedule())
    scheduler = StatusScheduler(dry_run=True)
    document = scheduler.initialize(path)
    assert document.rules[0].id == "weekday-work"
    scheduler.initialize(str(path))
    assert scheduler.schedule.timezone == "America/Los_Angeles"


def test_initialize_from_missing_file(tmp_path):
    with pytest.raises(InvalidScheduleError, match="not found"):
        StatusScheduler().initialize(tmp_path / "missing.json")


def test_reinitialize_replaces_schedule():
    scheduler = StatusScheduler(dry_run=True)
    first = scheduler.initialize(_schedule())
    second = scheduler.initialize(scheduler.schedule)
    assert second is not first
    assert document_to_dict(second) == document_to_dict(first)
    assert scheduler.schedule is second


def test_convenience_functions(tmp_path):
    path = tmp_path / "schedule.json"
    save_schedule(path, _schedule())
    preview = asyncio.run(preview_schedule(path, "2024-01-08T10:00:00"))
    assert preview["preview"] is True
    assert preview["action"] == "updateStatus"

    setter = RecordingStatusSetter()
    result = asyncio.run(run_scheduler(path, setter, dry_run=False, target="2024-01-09T09:00:00"))
    assert result["action"] == "updateStatus"
    assert setter.calls[0][1] == "Working"


def test_error_result_envelope():
    config_error = error_result(InvalidScheduleError(["Schedule version must be 1"]))
    assert config_error["success"] is False
    assert config_error["kind"] == "configuration"
    assert config_error["errors"] == ["Schedule version must be 1"]

    runtime_error = error_result(CredentialMissingError("no setter"))
    assert runtime_error == {"success": False, "error": "no setter", "kind": "runtime"}


def test_upcoming_window_defaults_to_settings(monkeypatch):
    monkeypatch.setattr(settings, "upcoming_days", 3)
    scheduler = StatusScheduler(dry_run=True)
    scheduler.initialize(_schedule())
    # Sat, Sun, Mon
    upcoming = scheduler.get_upcoming_changes(start="2024-01-06")
    assert [u["date"] for u in upcoming] == ["2024-01-08"]


def test_log_level_resets_when_next_schedule_has_none():
    port = logging.getLogger("status_scheduler.tests.reset_port")
    port.setLevel(logging.NOTSET)
    scheduler = StatusScheduler(dry_run=True, logger=port)
    scheduler.initialize(_schedule(logLevel="error"))
    assert port.level == logging.ERROR
    scheduler.initialize(_schedule())
    assert port.level == logging.NOTSET


def test_log_level_on_default_logger_does_not_leak_between_schedulers():
    first = StatusScheduler(dry_run=True)
    first.initialize(_schedule(logLevel="warn"))
    assert first.logger.level == logging.WARNING
    second = StatusScheduler(dry_run=True)
    second.initialize(_schedule())
    assert second.logger is first.logger
    assert second.logger.level == logging.NOTSET


def test_upcoming_changes_include_today_after_its_gate():
    scheduler = StatusScheduler(dry_run=True)
    scheduler.initialize(_schedule())
    upcoming = scheduler.get_upcoming_changes(1, start="2024-01-08T15:00:00")
    assert len(upcoming) == 1
    assert upcoming[0]["executeAt"] == "2024-01-08T09:00:00-08:00"
