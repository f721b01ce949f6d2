"""Unit tests for mediawatch.notifications.quiet_hours.

Tests cover:
- Disabled or incomplete windows
- Overnight and same-day windows with inclusive bounds
- Timezone conversion and the UTC fallback
- Severity gating with and without override_critical
- Event-type severity resolution
"""

from datetime import datetime, timezone

import pytest

from mediawatch.notifications.models import (
    NotificationEventType,
    NotificationSeverity,
    QuietHoursPreferences,
)
from mediawatch.notifications.quiet_hours import (
    is_quiet_time,
    local_time,
    should_send,
    should_send_event,
)
from tests.factories.notifications import make_quiet_hours


def at(hour: int, minute: int = 0, month: int = 6) -> datetime:
    return datetime(2024, month, 15, hour, minute, tzinfo=timezone.utc)


@pytest.mark.unit
class TestIsQuietTimeGuards:
    """Windows that can never be quiet."""

    @pytest.mark.parametrize("hour", [0, 2, 7, 12, 23])
    def test_disabled_is_never_quiet(self, hour):
        prefs = make_quiet_hours(enabled=False)

        assert is_quiet_time(prefs, at(hour)) is False

    def test_missing_start_is_never_quiet(self):
        prefs = make_quiet_hours(start=None)

        assert is_quiet_time(prefs, at(2)) is False

    def test_missing_end_is_never_quiet(self):
        prefs = make_quiet_hours(end=None)

        assert is_quiet_time(prefs, at(2)) is False

    def test_defaults_are_disabled(self):
        assert is_quiet_time(QuietHoursPreferences(), at(2)) is False


@pytest.mark.unit
class TestOvernightWindow:
    """23:00-07:00 UTC wraps over midnight."""

    @pytest.mark.parametrize(
        "hour,minute,expected",
        [
            (2, 0, True),
            (23, 0, True),
            (7, 0, True),
            (0, 0, True),
            (22, 0, False),
            (22, 59, False),
            (7, 1, False),
            (10, 0, False),
            (12, 0, False),
        ],
    )
    def test_overnight_window(self, hour, minute, expected):
        prefs = make_quiet_hours(start="23:00", end="07:00")

        assert is_quiet_time(prefs, at(hour, minute)) is expected


@pytest.mark.unit
class TestSameDayWindow:
    """01:00-06:00 UTC stays within one day."""

    @pytest.mark.parametrize(
        "hour,minute,expected",
        [
            (3, 0, True),
            (1, 0, True),
            (6, 0, True),
            (0, 30, False),
            (6, 1, False),
            (8, 0, False),
        ],
    )
    def test_same_day_window(self, hour, minute, expected):
        prefs = make_quiet_hours(start="01:00", end="06:00")

        assert is_quiet_time(prefs, at(hour, minute)) is expected


@pytest.mark.unit
class TestTimezones:
    """Local wall-clock conversion."""

    def test_new_york_evening_is_quiet(self):
        # 03:00 UTC in June is 23:00 EDT
        prefs = make_quiet_hours(start="22:00", end="06:00", timezone_name="America/New_York")

        assert local_time(prefs, at(3)) == "23:00"
        assert is_quiet_time(prefs, at(3)) is True

    def test_new_york_morning_is_not_quiet(self):
        # 12:00 UTC in June is 08:00 EDT
        prefs = make_quiet_hours(start="22:00", end="06:00", timezone_name="America/New_York")

        assert is_quiet_time(prefs, at(12)) is False

    def test_london_follows_daylight_saving(self):
        prefs = make_quiet_hours(start="23:00", end="07:00", timezone_name="Europe/London")

        # 22:30 UTC is 23:30 BST in June but 22:30 GMT in January
        assert is_quiet_time(prefs, at(22, 30, month=6)) is True
        assert is_quiet_time(prefs, at(22, 30, month=1)) is False

    def test_invalid_timezone_falls_back_to_utc(self):
        prefs = make_quiet_hours(start="23:00", end="07:00", timezone_name="Invalid/Zone")

        assert local_time(prefs, at(2)) == "02:00"
        assert is_quiet_time(prefs, at(2)) is True
        assert is_quiet_time(prefs, at(12)) is False

    def test_naive_datetime_is_treated_as_utc(self):
        prefs = make_quiet_hours(start="23:00", end="07:00")

        assert is_quiet_time(prefs, datetime(2024, 6, 15, 2, 0)) is True

    def test_defaults_to_current_time(self):
        prefs = make_quiet_hours(enabled=False)

        assert is_quiet_time(prefs) is False
        assert len(local_time(prefs)) == 5


@pytest.mark.unit
class TestShouldSend:
    """Severity gating inside and outside the window."""

    @pytest.mark.parametrize("severity", list(NotificationSeverity))
    def test_outside_quiet_hours_everything_is_sent(self, severity):
        prefs = make_quiet_hours(start="23:00", end="07:00")

        assert should_send(prefs, severity, at(12)) is True

    def test_high_severity_sent_with_override(self):
        prefs = make_quiet_hours(override_critical=True)

        assert should_send(prefs, NotificationSeverity.HIGH, at(2)) is True

    def test_high_severity_suppressed_without_override(self):
        prefs = make_quiet_hours(override_critical=False)

        assert should_send(prefs, NotificationSeverity.HIGH, at(2)) is False

    @pytest.mark.parametrize("override", [True, False])
    @pytest.mark.parametrize(
        "severity", [NotificationSeverity.LOW, NotificationSeverity.WARNING]
    )
    def test_lower_severities_always_suppressed(self, severity, override):
        prefs = make_quiet_hours(override_critical=override)

        assert should_send(prefs, severity, at(2)) is False

    @pytest.mark.parametrize("severity", list(NotificationSeverity))
    def test_disabled_sends_every_severity(self, severity):
        prefs = make_quiet_hours(enabled=False)

        assert should_send(prefs, severity, at(2)) is True


@pytest.mark.unit
class TestShouldSendEvent:
    """Event-type flavoured gating."""

    @pytest.mark.parametrize("event_type", list(NotificationEventType))
    def test_outside_quiet_hours_every_event_is_sent(self, event_type):
        prefs = make_quiet_hours()

        assert should_send_event(prefs, event_type, now=at(12)) is True

    def test_server_down_breaks_through_quiet_hours(self):
        prefs = make_quiet_hours()

        assert should_send_event(prefs, NotificationEventType.SERVER_DOWN, now=at(2)) is True

    @pytest.mark.parametrize(
        "event_type",
        [NotificationEventType.SESSION_STARTED, NotificationEventType.SESSION_STOPPED],
    )
    def test_sessions_suppressed_during_quiet_hours(self, event_type):
        prefs = make_quiet_hours()

        assert should_send_event(prefs, event_type, now=at(2)) is False

    def test_violation_uses_explicit_severity(self):
        prefs = make_quiet_hours()

        assert (
            should_send_event(
                prefs,
                NotificationEventType.VIOLATION_DETECTED,
                severity=NotificationSeverity.HIGH,
                now=at(2),
            )
            is True
        )
        assert (
            should_send_event(prefs, NotificationEventType.VIOLATION_DETECTED, now=at(2))
            is False
        )
