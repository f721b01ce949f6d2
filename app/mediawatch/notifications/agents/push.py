"""Native push agent: one message per registered device token."""

from typing import Any, Dict, List, Optional, TypedDict

from mediawatch.configuration import Settings, get_settings
from mediawatch.logging import get_module_logger
from mediawatch.notifications.agents.base import NotificationAgent, PayloadBuilder
from mediawatch.notifications.errors import NotificationError
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
)
from mediawatch.notifications.transport import post_json

logger = get_module_logger()

# Gateway limit on messages per request.
PUSH_BATCH_SIZE = 100


class PushMessage(TypedDict):
    to: str
    title: str
    body: str
    priority: str
    data: Dict[str, Any]


class PushAgent(NotificationAgent):
    """Push gateway agent for the mobile app.

    Builders produce a token-less ``{title, body, data}`` template; delivery
    fans it out into one message per device token and posts them in batches
    of at most PUSH_BATCH_SIZE.
    The gateway answers 200 with per-message tickets, so rejected tickets
    are checked separately from the HTTP status.
    """

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__(settings)
        self._api_url = (settings or get_settings()).notifications.PUSH_API_URL

    @property
    def name(self) -> str:
        return "push"

    @property
    def display_name(self) -> str:
        return "Mobile Push"

    @property
    def routing_channel(self) -> RoutingChannel:
        return RoutingChannel.PUSH

    def should_send(self, event_type, settings: NotificationSettings) -> bool:
        return bool(settings.push_tokens)

    def missing_configuration(self, settings: NotificationSettings) -> Optional[str]:
        if not settings.push_tokens:
            return "No mobile devices registered for push notifications"
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
    ) -> List[PushMessage]:
        template = super().build_message(payload, settings)
        priority = "high" if payload.severity == NotificationSeverity.HIGH else "default"
        data = {"event": payload.event_type.value, **template.pop("data", {})}
        return [
            {"to": token, "priority": priority, "data": data, **template}
            for token in settings.push_tokens
        ]

    def build_test_message(self, settings: NotificationSettings) -> List[PushMessage]:
        return [
            {
                "to": token,
                "title": "Test Notification",
                "body": self.test_body,
                "priority": "default",
                "data": {"event": "test"},
            }
            for token in settings.push_tokens
        ]

    def deliver(self, message: List[PushMessage], settings: NotificationSettings) -> None:
        errors: List[str] = []
        for start in range(0, len(message), PUSH_BATCH_SIZE):
            batch = message[start : start + PUSH_BATCH_SIZE]
            response = post_json(
                self._api_url,
                batch,
                label="Push gateway",
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
            tickets = response.json().get("data", [])
            errors.extend(
                t.get("message", "unknown error") for t in tickets if t.get("status") == "error"
            )

        if errors:
            logger.warning(
                "push_tickets_rejected",
                rejected=len(errors),
                total=len(message),
            )
            raise NotificationError(f"Push gateway rejected {len(errors)} message(s): {errors[0]}")

    def _violation(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        violation = payload.context.violation
        return {
            "title": "Violation Detected",
            "body": format_violation_message(violation),
            "data": {"violation_id": violation.id},
        }

    def _session_started(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        session = payload.context.session
        return {
            "title": "Stream Started",
            "body": format_session_started(session),
            "data": {"session_id": session.id},
        }

    def _session_stopped(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        session = payload.context.session
        return {
            "title": "Stream Ended",
            "body": format_session_stopped(session),
            "data": {"session_id": session.id},
        }

    def _server(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        return {
            "title": payload.title,
            "body": payload.message,
            "data": {"server_name": payload.context.server_name},
        }

    def _new_device(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        ctx = payload.context
        return {
            "title": "New Device Detected",
            "body": format_new_device(ctx.user_name, ctx.device_name, ctx.location),
            "data": {},
        }

    def _trust_score_changed(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        return {
            "title": "Trust Score Changed",
            "body": format_trust_score_changed(payload.context),
            "data": {},
        }
