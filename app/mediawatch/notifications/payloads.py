"""Payload builders.

Turn an event context into the immutable NotificationPayload handed to
agents. The generic title and message are what the in-app toast shows;
other channels render their own text from the context.
"""

from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

from mediawatch.notifications.errors import UnhandledContextError
from mediawatch.notifications.formatters import (
    format_new_device,
    format_trust_score_changed,
    get_user_display_name,
)
from mediawatch.notifications.models import (
    EVENT_SEVERITY,
    ActiveSession,
    NewDeviceContext,
    NotificationContext,
    NotificationEventType,
    NotificationPayload,
    NotificationSeverity,
    ServerContext,
    SessionContext,
    TrustScoreChangedContext,
    Violation,
    ViolationContext,
)


def resolve_severity(context: NotificationContext) -> NotificationSeverity:
    """Severity for a context.

    Violations carry their own severity and a falling trust score is a
    warning while a rising one is low; every other event uses the fixed map.
    """
    if isinstance(context, ViolationContext):
        return context.violation.severity
    if isinstance(context, TrustScoreChangedContext):
        return NotificationSeverity.WARNING if context.decreased else NotificationSeverity.LOW
    return EVENT_SEVERITY[context.type]


def _violation_text(ctx: ViolationContext) -> Tuple[str, str]:
    user_name = get_user_display_name(ctx.violation.user)
    return "Violation Detected", f"User {user_name} triggered a rule violation"


def _session_started_text(ctx: SessionContext) -> Tuple[str, str]:
    return "Stream Started", f"{get_user_display_name(ctx.session.user)} started streaming"


def _session_stopped_text(ctx: SessionContext) -> Tuple[str, str]:
    return "Stream Stopped", f"{get_user_display_name(ctx.session.user)} stopped streaming"


def _server_down_text(ctx: ServerContext) -> Tuple[str, str]:
    return "Server Offline", f"{ctx.server_name} is not responding"


def _server_up_text(ctx: ServerContext) -> Tuple[str, str]:
    return "Server Online", f"{ctx.server_name} is back online"


def _new_device_text(ctx: NewDeviceContext) -> Tuple[str, str]:
    return "New Device Detected", format_new_device(ctx.user_name, ctx.device_name, ctx.location)


def _trust_score_text(ctx: TrustScoreChangedContext) -> Tuple[str, str]:
    return "Trust Score Changed", format_trust_score_changed(ctx)


TEXT_BUILDERS: Dict[NotificationEventType, Callable[..., Tuple[str, str]]] = {
    NotificationEventType.VIOLATION_DETECTED: _violation_text,
    NotificationEventType.SESSION_STARTED: _session_started_text,
    NotificationEventType.SESSION_STOPPED: _session_stopped_text,
    NotificationEventType.SERVER_DOWN: _server_down_text,
    NotificationEventType.SERVER_UP: _server_up_text,
    NotificationEventType.NEW_DEVICE: _new_device_text,
    NotificationEventType.TRUST_SCORE_CHANGED: _trust_score_text,
}


def build_payload(
    context: NotificationContext,
    timestamp: Optional[datetime] = None,
    event_type: Optional[NotificationEventType] = None,
) -> NotificationPayload:
    """Wrap a context into a NotificationPayload.

    Args:
        context: Event context; the generic text is rendered from it
        timestamp: Payload time. Defaults to now (UTC).
        event_type: Event being dispatched. Defaults to ``context.type``.
            When it differs, severity follows the event's fixed map entry
            and agents fail the send instead of rendering the context.

    Raises:
        UnhandledContextError: If no text builder exists for the variant.
    """
    builder = TEXT_BUILDERS.get(context.type)
    if builder is None:
        raise UnhandledContextError(f"No payload builder for {context.type}")

    event = NotificationEventType(event_type or context.type)
    if event == context.type:
        severity = resolve_severity(context)
    else:
        severity = EVENT_SEVERITY[event]

    title, message = builder(context)
    return NotificationPayload(
        event_type=event,
        context=context,
        severity=severity,
        title=title,
        message=message,
        timestamp=timestamp or datetime.now(timezone.utc),
    )


def from_violation(violation: Violation) -> NotificationPayload:
    return build_payload(ViolationContext(violation=violation))


def from_session_started(session: ActiveSession) -> NotificationPayload:
    return build_payload(
        SessionContext(type=NotificationEventType.SESSION_STARTED, session=session)
    )


def from_session_stopped(session: ActiveSession) -> NotificationPayload:
    return build_payload(
        SessionContext(type=NotificationEventType.SESSION_STOPPED, session=session)
    )


def from_server_down(server_name: str, server_type: Optional[str] = None) -> NotificationPayload:
    return build_payload(
        ServerContext(
            type=NotificationEventType.SERVER_DOWN,
            server_name=server_name,
            server_type=server_type,
        )
    )


def from_server_up(server_name: str, server_type: Optional[str] = None) -> NotificationPayload:
    return build_payload(
        ServerContext(
            type=NotificationEventType.SERVER_UP,
            server_name=server_name,
            server_type=server_type,
        )
    )


def from_new_device(
    user_name: str,
    device_name: str,
    platform: Optional[str] = None,
    location: Optional[str] = None,
) -> NotificationPayload:
    return build_payload(
        NewDeviceContext(
            user_name=user_name,
            device_name=device_name,
            platform=platform,
            location=location,
        )
    )


def from_trust_score_changed(
    user_name: str,
    previous_score: int,
    new_score: int,
    reason: Optional[str] = None,
) -> NotificationPayload:
    return build_payload(
        TrustScoreChangedContext(
            user_name=user_name,
            previous_score=previous_score,
            new_score=new_score,
            reason=reason,
        )
    )
