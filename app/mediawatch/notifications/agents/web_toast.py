"""In-app toast agent.

Hands the generic title and message to a publisher supplied by the
realtime layer (typically a websocket broadcast). With no publisher wired
in the agent stays silent.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from mediawatch.configuration import Settings
from mediawatch.notifications.agents.base import NotificationAgent, PayloadBuilder
from mediawatch.notifications.models import (
    NotificationEventType,
    NotificationPayload,
    NotificationSettings,
    NotificationSeverity,
    RoutingChannel,
)

ToastPublisher = Callable[[str, Dict[str, Any]], None]

TOAST_TOPIC = "notification:toast"


class WebToastAgent(NotificationAgent):
    def __init__(
        self,
        settings: Optional[Settings] = None,
        publisher: Optional[ToastPublisher] = None,
        topic: str = TOAST_TOPIC,
    ):
        super().__init__(settings)
        self._publisher = publisher
        self._topic = topic

    @property
    def name(self) -> str:
        return "web-toast"

    @property
    def display_name(self) -> str:
        return "Web Toast"

    @property
    def routing_channel(self) -> RoutingChannel:
        return RoutingChannel.WEB_TOAST

    def should_send(self, event_type, settings: NotificationSettings) -> bool:
        return self._publisher is not None

    def missing_configuration(self, settings: NotificationSettings) -> Optional[str]:
        if self._publisher is None:
            return "Toast publisher not configured"
        return None

    def payload_builders(self) -> Dict[NotificationEventType, PayloadBuilder]:
        # The payload's generic text is already what the toast shows.
        return {event_type: self._toast for event_type in NotificationEventType}

    def build_test_message(self, settings: NotificationSettings) -> Dict[str, Any]:
        return {
            "event": "test",
            "title": "Test Notification",
            "message": self.test_body,
            "severity": NotificationSeverity.LOW.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def deliver(self, message: Dict[str, Any], settings: NotificationSettings) -> None:
        self._publisher(self._topic, message)

    def _toast(self, payload: NotificationPayload, settings) -> Dict[str, Any]:
        return {
            "event": payload.event_type.value,
            "title": payload.title,
            "message": payload.message,
            "severity": payload.severity.value,
            "timestamp": payload.timestamp.isoformat(),
        }
