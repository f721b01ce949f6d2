"""Apprise agent: ``{title, body, type}`` posted to an Apprise API endpoint."""

from typing import Dict, Literal, Optional, TypedDict

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

AppriseType = Literal["info", "success", "warning", "failure"]


class AppriseMessage(TypedDict):
    title: str
    body: str
    type: AppriseType


SEVERITY_TYPE: Dict[NotificationSeverity, AppriseType] = {
    NotificationSeverity.HIGH: "failure",
    NotificationSeverity.WARNING: "warning",
    NotificationSeverity.LOW: "info",
}


def _message(title: str, body: str, kind: AppriseType) -> AppriseMessage:
    return {"title": title, "body": body, "type": kind}


class AppriseAgent(NotificationAgent):
    """Apprise notification agent, selected by webhook format ``apprise``."""

    @property
    def name(self) -> str:
        return "apprise"

    @property
    def display_name(self) -> str:
        return "Apprise"

    @property
    def routing_channel(self) -> RoutingChannel:
        return RoutingChannel.WEBHOOK

    def should_send(self, event_type, settings: NotificationSettings) -> bool:
        return settings.webhook_format == WebhookFormat.APPRISE and bool(
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

    def build_test_message(self, settings: NotificationSettings) -> AppriseMessage:
        return _message("Test Notification", self.test_body, "info")

    def deliver(self, message: AppriseMessage, settings: NotificationSettings) -> None:
        post_json(
            settings.custom_webhook_url,
            message,
            label="Apprise webhook",
            timeout=self._timeout,
        )

    def _violation(self, payload: NotificationPayload, settings) -> AppriseMessage:
        violation = payload.context.violation
        return _message(
            "Violation Detected",
            format_violation_message(violation),
            SEVERITY_TYPE[violation.severity],
        )

    def _session_started(self, payload: NotificationPayload, settings) -> AppriseMessage:
        return _message("Stream Started", format_session_started(payload.context.session), "info")

    def _session_stopped(self, payload: NotificationPayload, settings) -> AppriseMessage:
        return _message("Stream Ended", format_session_stopped(payload.context.session), "info")

    def _server_down(self, payload: NotificationPayload, settings) -> AppriseMessage:
        return _message(
            "Server Offline", f"{payload.context.server_name} is not responding", "failure"
        )

    def _server_up(self, payload: NotificationPayload, settings) -> AppriseMessage:
        return _message("Server Online", f"{payload.context.server_name} is back online", "success")

    def _new_device(self, payload: NotificationPayload, settings) -> AppriseMessage:
        ctx = payload.context
        return _message(
            "New Device Detected",
            format_new_device(ctx.user_name, ctx.device_name, ctx.location),
            "warning",
        )

    def _trust_score_changed(self, payload: NotificationPayload, settings) -> AppriseMessage:
        ctx = payload.context
        return _message(
            "Trust Score Changed",
            format_trust_score_changed(ctx),
            "warning" if ctx.decreased else "info",
        )
