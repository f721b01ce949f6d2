"""Notification agent abstract base class.

All agent implementations (Discord, ntfy, Apprise, Pushover, JSON webhook,
native push, web toast) implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from mediawatch.configuration import Settings, get_settings
from mediawatch.logging import get_module_logger
from mediawatch.notifications.errors import (
    AgentNotConfiguredError,
    ContextMismatchError,
    UnhandledContextError,
)
from mediawatch.notifications.models import (
    NotificationEventType,
    NotificationPayload,
    NotificationSettings,
    RoutingChannel,
    SendResult,
    TestResult,
)

logger = get_module_logger()

PayloadBuilder = Callable[[NotificationPayload, NotificationSettings], Any]


class NotificationAgent(ABC):
    """Abstract base class for notification agents.

    Each agent delivers through one external channel. Agents are created
    once at process start and hold no per-call state: everything a send
    needs arrives in ``(payload, settings)``.

    ``send`` and ``send_test`` never raise. Missing configuration, transport
    errors and rejected requests all come back as failed results carrying
    the error message.

    Example Implementation:
        class NtfyAgent(NotificationAgent):

            @property
            def name(self) -> str:
                return "ntfy"

            def payload_builders(self):
                return {NotificationEventType.SERVER_DOWN: self._server_down, ...}

            def deliver(self, message, settings):
                post_json(settings.custom_webhook_url, message, "Ntfy webhook", self._timeout)
    """

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the agent.

        Args:
            settings: Application settings (timeouts, app name). Defaults to
                get_settings().
        """
        app_settings = settings or get_settings()
        self._timeout = app_settings.notifications.REQUEST_TIMEOUT_SECONDS
        self._app_name = app_settings.APP_NAME

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique agent identifier used in results and logs."""

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name shown in the settings UI."""

    @property
    @abstractmethod
    def routing_channel(self) -> RoutingChannel:
        """Routing column that gates this agent."""

    @abstractmethod
    def should_send(
        self, event_type: NotificationEventType, settings: NotificationSettings
    ) -> bool:
        """Check whether this agent is configured and selected.

        Local gating only; time of day is the dispatcher's concern.

        Args:
            event_type: Event being dispatched
            settings: Current notification settings

        Returns:
            True if the agent should attempt delivery
        """

    @abstractmethod
    def payload_builders(self) -> Dict[NotificationEventType, PayloadBuilder]:
        """Channel-native message builder per event type.

        Must cover every NotificationEventType.
        """

    @abstractmethod
    def missing_configuration(self, settings: NotificationSettings) -> Optional[str]:
        """Describe missing credentials, or None when the agent can send."""

    @abstractmethod
    def build_test_message(self, settings: NotificationSettings) -> Any:
        """Fixed message used by ``send_test``."""

    @abstractmethod
    def deliver(self, message: Any, settings: NotificationSettings) -> None:
        """Perform the external call.

        Raises:
            NotificationError: Delivery was rejected.
            requests.RequestException: Network errors and timeouts.
        """

    def build_message(
        self, payload: NotificationPayload, settings: NotificationSettings
    ) -> Any:
        """Render ``payload`` in this agent's wire format.

        Raises:
            ContextMismatchError: The context belongs to another event type.
            UnhandledContextError: No builder exists for the context variant.
        """
        context_type = NotificationEventType(payload.context.type)
        if context_type != payload.event_type:
            raise ContextMismatchError(
                f"{self.name} cannot render a {context_type.value} context "
                f"for a {payload.event_type.value} event"
            )

        builder = self.payload_builders().get(context_type)
        if builder is None:
            raise UnhandledContextError(
                f"{self.name} has no payload builder for {context_type.value}"
            )
        return builder(payload, settings)

    def ensure_configured(self, settings: NotificationSettings) -> None:
        """Raise when ``missing_configuration`` reports a problem.

        Raises:
            AgentNotConfiguredError: Credentials or URL are missing.
        """
        problem = self.missing_configuration(settings)
        if problem:
            raise AgentNotConfiguredError(problem)

    def send(
        self, payload: NotificationPayload, settings: NotificationSettings
    ) -> SendResult:
        """Send a notification.

        Args:
            payload: Notification payload
            settings: Current notification settings

        Returns:
            SendResult for this agent; failures are values, never exceptions
        """
        try:
            self.ensure_configured(settings)
            self.deliver(self.build_message(payload, settings), settings)
        except AgentNotConfiguredError as e:
            logger.warning("agent_not_configured", agent=self.name, error=str(e))
            return SendResult.failed(self.name, str(e))
        except Exception as e:
            logger.error(
                "agent_send_failed",
                agent=self.name,
                event_type=payload.event_type.value,
                error=str(e),
                exc_info=True,
            )
            return SendResult.failed(self.name, str(e) or type(e).__name__)

        logger.info(
            "agent_send_succeeded",
            agent=self.name,
            event_type=payload.event_type.value,
        )
        return SendResult.ok(self.name)

    def send_test(self, settings: NotificationSettings) -> TestResult:
        """Send a fixed test message through the same transport as ``send``.

        Returns:
            TestResult whose error string is shown to the operator as-is
        """
        try:
            self.ensure_configured(settings)
            self.deliver(self.build_test_message(settings), settings)
        except Exception as e:
            logger.warning("agent_test_failed", agent=self.name, error=str(e))
            return TestResult.failed(str(e) or type(e).__name__)

        logger.info("agent_test_succeeded", agent=self.name)
        return TestResult.ok()

    @property
    def test_body(self) -> str:
        return f"This is a test notification from {self._app_name}"
