"""Quiet hours evaluation.

Pure functions over a QuietHoursPreferences snapshot and an instant. The
window is compared at minute resolution in the configured timezone, both
ends inclusive; a start later than the end wraps over midnight.

Usage:
    from mediawatch.notifications.quiet_hours import should_send

    if should_send(settings.quiet_hours, NotificationSeverity.HIGH):
        ...
"""

from datetime import datetime, timezone
from typing import Optional

import pytz

from mediawatch.logging import get_module_logger
from mediawatch.notifications.models import (
    EVENT_SEVERITY,
    NotificationEventType,
    NotificationSeverity,
    QuietHoursPreferences,
)

logger = get_module_logger()


def _to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def _resolve_timezone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning("quiet_hours_unknown_timezone", timezone=name, fallback="UTC")
        return pytz.utc


def local_time(prefs: QuietHoursPreferences, now: Optional[datetime] = None) -> str:
    """Wall-clock time ("HH:MM") in the configured timezone.

    Args:
        prefs: Quiet hours preferences (only ``timezone`` is read)
        now: Instant to convert. Defaults to the current time; naive values
            are taken as UTC.

    Returns:
        Local time formatted as "HH:MM"
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return now.astimezone(_resolve_timezone(prefs.timezone)).strftime("%H:%M")


def is_quiet_time(prefs: QuietHoursPreferences, now: Optional[datetime] = None) -> bool:
    """Check whether ``now`` falls inside the quiet hours window.

    Returns False when quiet hours are disabled or either bound is unset.
    """
    if not prefs.enabled or not prefs.start or not prefs.end:
        return False

    current = _to_minutes(local_time(prefs, now))
    start = _to_minutes(prefs.start)
    end = _to_minutes(prefs.end)

    if start <= end:
        return start <= current <= end
    return current >= start or current <= end


def should_send(
    prefs: QuietHoursPreferences,
    severity: NotificationSeverity,
    now: Optional[datetime] = None,
) -> bool:
    """Decide whether a notification of ``severity`` may be delivered now.

    Outside quiet hours everything is sent. Inside, only high severity gets
    through, and only when ``override_critical`` is set.
    """
    if not is_quiet_time(prefs, now):
        return True
    return severity == NotificationSeverity.HIGH and prefs.override_critical


def should_send_event(
    prefs: QuietHoursPreferences,
    event_type: NotificationEventType,
    severity: Optional[NotificationSeverity] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Event-type flavoured ``should_send``.

    Args:
        prefs: Quiet hours preferences
        event_type: Event being considered
        severity: Explicit severity, for events that carry their own
            (violations). Defaults to the fixed event severity.
        now: Instant to evaluate at

    Returns:
        True if the event may be delivered
    """
    resolved = severity if severity is not None else EVENT_SEVERITY[event_type]
    return should_send(prefs, resolved, now)
