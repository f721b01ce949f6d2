"""Exceptions raised inside agents.

None of these cross the agent boundary: NotificationAgent converts them into
failed SendResult/TestResult values.
"""

from typing import Optional


class NotificationError(Exception):
    """Base class for notification delivery errors."""


class AgentNotConfiguredError(NotificationError):
    """Channel credentials or URL are missing."""


class WebhookDeliveryError(NotificationError):
    """External endpoint answered with a non-success status."""

    def __init__(self, label: str, status_code: int, body: Optional[str] = None):
        self.label = label
        self.status_code = status_code
        self.body = body or ""
        super().__init__(f"{label} failed: {status_code} {self.body}".strip())


class UnhandledContextError(NotificationError):
    """An agent has no payload builder for a context variant."""


class ContextMismatchError(NotificationError):
    """The payload context was recorded for a different event type."""
