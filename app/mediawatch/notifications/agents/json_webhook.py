"""Generic JSON webhook agent.

Posts ``{event, timestamp, data}`` where ``data`` is the structured event
context, for consumers that want machine-readable events instead of text.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, TypedDict

from mediawatch.notifications.agents.base import NotificationAgent, PayloadBuilder
from mediawatch.notifications.formatters import (
    get_media_display,
    get_playback_type,
    get_user_display_name,
)
from mediawatch.notifications.models import (
    NotificationEventType,
    NotificationPayload,
    NotificationSettings,
    RoutingChannel,
    WebhookFormat,
)
from mediawatch.notifications.transport import post_json


class JsonWebhookMessage(TypedDict):
    event: str
    timestamp: str
    data: Dict[str, Any]


def _user(server_user_id: str, user) -> Dict[str, Any]:
    return {
        "id": server_user_id,
        "username": user.username,
        "display_name": get_user_display_name(user),
    }


class JsonWebhookAgent(NotificationAgent):
    """JSON webhook agent.

    The default dialect for the custom webhook URL: it sends when the
    format is ``json`` or has never been chosen.
    """

    @property
    def name(self) -> str:
        return "json-webhook"

    @property
    def display_name(self) -> str:
        return "JSON Webhook"

    @property
    def routing_channel(self) -> RoutingChannel:
        return RoutingChannel.WEBHOOK

    def should_send(self, event_type, settings: NotificationSettings) -> bool:
        return bool(settings.custom_webhook_url) and settings.webhook_format in (
            WebhookFormat.JSON,
            None,
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
            NotificationEventType.SERVER_DOWN: self._server,
            NotificationEventType.SERVER_UP: self._server,
            NotificationEventType.NEW_DEVICE: self._new_device,
            NotificationEventType.TRUST_SCORE_CHANGED: self._trust_score_changed,
        }

    def build_message(
        self, payload: NotificationPayload, settings: NotificationSettings
    ) -> JsonWebhookMessage:
        return {
            "event": payload.event_type.value,
            "timestamp": payload.timestamp.isoformat(),
            "data": super().build_message(payload, settings),
        }

    def build_test_message(self, settings: NotificationSettings) -> JsonWebhookMessage:
        return {
            "event": "test",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": {"message": self.test_body},
        }

    def deliver(self, message: JsonWebhookMessage, settings: NotificationSettings) -> None:
        post_json(
            settings.custom_webhook_url,
            message,
            label="JSON webhook",
            timeout=self._timeout,
        )

    def _violation(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        violation = payload.context.violation
        return {
            "user": _user(violation.server_user_id, violation.user),
            "rule": {
                "id": violation.rule_id,
                "type": violation.rule.type.value,
                "name": violation.rule.name,
            },
            "violation": {
                "id": violation.id,
                "severity": violation.severity.value,
                "details": dict(violation.data),
            },
        }

    def _session_started(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        session = payload.context.session
        title, subtitle = get_media_display(session)
        return {
            "user": _user(session.server_user_id, session.user),
            "media": {
                "title": title,
                "subtitle": subtitle,
                "type": session.media_type,
                "year": session.year,
            },
            "playback": {
                "type": get_playback_type(session),
                "quality": session.quality,
                "player": session.product or session.player_name,
            },
            "location": {"city": session.geo_city, "country": session.geo_country},
        }

    def _session_stopped(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        session = payload.context.session
        title, subtitle = get_media_display(session)
        return {
            "user": _user(session.server_user_id, session.user),
            "media": {"title": title, "subtitle": subtitle, "type": session.media_type},
            "session": {"duration_ms": session.duration_ms},
        }

    def _server(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        ctx = payload.context
        return {"server_name": ctx.server_name, "server_type": ctx.server_type}

    def _new_device(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        ctx = payload.context
        return {
            "user_name": ctx.user_name,
            "device_name": ctx.device_name,
            "platform": ctx.platform,
            "location": ctx.location,
        }

    def _trust_score_changed(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        ctx = payload.context
        return {
            "user_name": ctx.user_name,
            "previous_score": ctx.previous_score,
            "new_score": ctx.new_score,
            "reason": ctx.reason,
        }
