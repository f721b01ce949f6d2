"""Ntfy agent: JSON publish to ntfy.sh or a self-hosted ntfy server."""

from typing import Dict, List, Optional, TypedDict

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
from mediawatch.notifications.transport import post_json


class NtfyMessage(TypedDict):
    topic: str
    title: str
    message: str
    priority: int
    tags: List[str]


SEVERITY_PRIORITY: Dict[NotificationSeverity, int] = {
    NotificationSeverity.HIGH: 5,
    NotificationSeverity.WARNING: 4,
    NotificationSeverity.LOW: 3,
}


class NtfyAgent(NotificationAgent):
    """Ntfy notification agent.

    Uses the custom webhook URL when its format is ``ntfy``. Priorities use
    ntfy's 1-5 scale; an optional access token is sent as a bearer header.
    The topic defaults to the lower-cased app name.
    """

    @property
    def name(self) -> str:
        return "ntfy"

    @property
    def display_name(self) -> str:
        return "Ntfy"

    @property
    def routing_channel(self) -> RoutingChannel:
        return RoutingChannel.WEBHOOK

    def should_send(self, event_type, settings: NotificationSettings) -> bool:
        return settings.webhook_format == WebhookFormat.NTFY and bool(
            settings.custom_webhook_url
        )

    def missing_configuration(self, settings: NotificationSettings) -> Optional[str]:
        if not settings.custom_webhook_url:
            return "Custom webhook URL not configured"
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

    def build_test_message(self, settings: NotificationSettings) -> NtfyMessage:
        return self._message(settings, "Test Notification", self.test_body, 3)

    def deliver(self, message: NtfyMessage, settings: NotificationSettings) -> None:
        headers = {}
        if settings.ntfy_auth_token:
            headers["Authorization"] = f"Bearer {settings.ntfy_auth_token}"
        post_json(
            settings.custom_webhook_url,
            message,
            label="Ntfy webhook",
            timeout=self._timeout,
            headers=headers,
        )

    def _message(
        self, settings: NotificationSettings, title: str, message: str, priority: int
    ) -> NtfyMessage:
        tag = self._app_name.lower()
        return {
            "topic": settings.ntfy_topic or tag,
            "title": title,
            "message": message,
            "priority": priority,
            "tags": [tag],
        }

    def _violation(self, payload: NotificationPayload, settings) -> NtfyMessage:
        violation = payload.context.violation
        return self._message(
            settings,
            "Violation Detected",
            format_violation_message(violation),
            SEVERITY_PRIORITY[violation.severity],
        )

    def _session_started(self, payload: NotificationPayload, settings) -> NtfyMessage:
        return self._message(
            settings, "Stream Started", format_session_started(payload.context.session), 3
        )

    def _session_stopped(self, payload: NotificationPayload, settings) -> NtfyMessage:
        return self._message(
            settings, "Stream Ended", format_session_stopped(payload.context.session), 3
        )

    def _server_down(self, payload: NotificationPayload, settings) -> NtfyMessage:
        return self._message(
            settings,
            "Server Offline",
            f"{payload.context.server_name} is not responding",
            5,
        )

    def _server_up(self, payload: NotificationPayload, settings) -> NtfyMessage:
        return self._message(
            settings, "Server Online", f"{payload.context.server_name} is back online", 4
        )

    def _new_device(self, payload: NotificationPayload, settings) -> NtfyMessage:
        ctx = payload.context
        return self._message(
            settings,
            "New Device Detected",
            format_new_device(ctx.user_name, ctx.device_name, ctx.location),
            4,
        )

    def _trust_score_changed(self, payload: NotificationPayload, settings) -> NtfyMessage:
        ctx = payload.context
        return self._message(
            settings,
            "Trust Score Changed",
            format_trust_score_changed(ctx),
            4 if ctx.decreased else 3,
        )
