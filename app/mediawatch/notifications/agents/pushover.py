"""Pushover agent: form-encoded POST to the Pushover messages API."""

from typing import Dict, Optional

from mediawatch.configuration import Settings, get_settings
from mediawatch.notifications.agents.base import NotificationAgent, PayloadBuilder
from mediawatch.notifications.formatters import (
    format_new_device,
    format_session_started,
    format_session_stopped,
    format_trust_score_changed,
    format_violation_message,
)
from mediawatch.notifications.models import (
    NotificationEventType,
    NotificationPayload,
    NotificationSettings,
    NotificationSeverity,
    RoutingChannel,
    WebhookFormat,
)
from mediawatch.notifications.transport import post_form

# Pushover priorities: -1 quiet, 0 normal, 1 high (bypasses the device's
# own quiet hours).
SEVERITY_PRIORITY: Dict[NotificationSeverity, str] = {
    NotificationSeverity.HIGH: "1",
    NotificationSeverity.WARNING: "0",
    NotificationSeverity.LOW: "-1",
}


class PushoverAgent(NotificationAgent):
    """Pushover notification agent.

    Selected by webhook format ``pushover``; needs both the user key and the
    application token. Messages are ``title``/``message``/``priority`` form
    fields; the credentials are added at delivery time.
    """

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__(settings)
        self._api_url = (settings or get_settings()).notifications.PUSHOVER_API_URL

    @property
    def name(self) -> str:
        return "pushover"

    @property
    def display_name(self) -> str:
        return "Pushover"

    @property
    def routing_channel(self) -> RoutingChannel:
        return RoutingChannel.WEBHOOK

    def should_send(self, event_type, settings: NotificationSettings) -> bool:
        return (
            settings.webhook_format == WebhookFormat.PUSHOVER
            and bool(settings.pushover_user_key)
            and bool(settings.pushover_api_token)
        )

    def missing_configuration(self, settings: NotificationSettings) -> Optional[str]:
        if not settings.pushover_user_key or not settings.pushover_api_token:
            return "Pushover credentials not configured"
        return None

    def payload_builders(self) -> Dict[NotificationEventType, PayloadBuilder]:
        return {
            NotificationEventType.VIOLATION_DETECTED: self._violation,
            NotificationEventType.SESSION_STARTED: self._session_started,
            NotificationEventType.SESSION_STOPPED: self._session_stopped,
            NotificationEventType.SERVER_DOWN: self._server_down,
            NotificationEventType.SERVER_UP: self._server_up,
            NotificationEventType.NEW_DEVICE: self._new_device,
            NotificationEventType.TRUST_SCORE_CHANGED: self._trust_score_changed,
        }

    def build_test_message(self, settings: NotificationSettings) -> Dict[str, str]:
        return _params("Test Notification", self.test_body, "-1")

    def deliver(self, message: Dict[str, str], settings: NotificationSettings) -> None:
        form = {
            "token": settings.pushover_api_token,
            "user": settings.pushover_user_key,
            **message,
        }
        post_form(self._api_url, form, label="Pushover API", timeout=self._timeout)

    def _violation(self, payload: NotificationPayload, settings) -> Dict[str, str]:
        violation = payload.context.violation
        return _params(
            "Violation Detected",
            format_violation_message(violation),
            SEVERITY_PRIORITY[violation.severity],
        )

    def _session_started(self, payload: NotificationPayload, settings) -> Dict[str, str]:
        return _params("Stream Started", format_session_started(payload.context.session), "-1")

    def _session_stopped(self, payload: NotificationPayload, settings) -> Dict[str, str]:
        return _params("Stream Ended", format_session_stopped(payload.context.session), "-1")

    def _server_down(self, payload: NotificationPayload, settings) -> Dict[str, str]:
        return _params("Server Offline", f"{payload.context.server_name} is not responding", "1")

    def _server_up(self, payload: NotificationPayload, settings) -> Dict[str, str]:
        return _params("Server Online", f"{payload.context.server_name} is back online", "1")

    def _new_device(self, payload: NotificationPayload, settings) -> Dict[str, str]:
        ctx = payload.context
        return _params(
            "New Device Detected",
            format_new_device(ctx.user_name, ctx.device_name, ctx.location),
            "0",
        )

    def _trust_score_changed(self, payload: NotificationPayload, settings) -> Dict[str, str]:
        ctx = payload.context
        return _params(
            "Trust Score Changed",
            format_trust_score_changed(ctx),
            "0" if ctx.decreased else "-1",
        )


def _params(title: str, message: str, priority: str) -> Dict[str, str]:
    return {"title": title, "message": message, "priority": priority}
