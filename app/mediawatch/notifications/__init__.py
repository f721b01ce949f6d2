"""Notification dispatch engine.

Delivers media-server events (streams, server health, violations, new
devices, trust score changes) through every configured channel:
Discord, ntfy, Apprise, Pushover, a generic JSON webhook, mobile push and
the in-app toast.

Usage:
    from mediawatch.notifications import (
        NotificationDispatcher,
        NotificationSettings,
        default_routing_table,
    )

    dispatcher = NotificationDispatcher()
    settings = NotificationSettings(discord_webhook_url="https://discord.com/api/webhooks/...")

    results = dispatcher.notify_server_down("Main Plex", settings, default_routing_table())
    failed = [r for r in results if not r.success]
"""

# Models
from mediawatch.notifications.models import (
    EVENT_SEVERITY,
    ActiveSession,
    ChannelRouting,
    NewDeviceContext,
    NotificationContext,
    NotificationEventType,
    NotificationPayload,
    NotificationSettings,
    NotificationSeverity,
    QuietHoursPreferences,
    RoutingChannel,
    RoutingTable,
    RuleType,
    SendResult,
    ServerContext,
    SessionContext,
    SessionUser,
    TestResult,
    TrustScoreChangedContext,
    Violation,
    ViolationContext,
    ViolationRule,
    WebhookFormat,
    build_routing_table,
    default_routing_table,
)

# Errors
from mediawatch.notifications.errors import (
    AgentNotConfiguredError,
    ContextMismatchError,
    NotificationError,
    UnhandledContextError,
    WebhookDeliveryError,
)

# Quiet hours
from mediawatch.notifications.quiet_hours import (
    is_quiet_time,
    should_send,
    should_send_event,
)

# Payloads
from mediawatch.notifications.payloads import build_payload, resolve_severity

# Agents
from mediawatch.notifications.agents import NotificationAgent, create_all_agents

# Dispatcher
from mediawatch.notifications.dispatcher import NotificationDispatcher

__all__ = [
    # Models
    "EVENT_SEVERITY",
    "ActiveSession",
    "ChannelRouting",
    "NewDeviceContext",
    "NotificationContext",
    "NotificationEventType",
    "NotificationPayload",
    "NotificationSettings",
    "NotificationSeverity",
    "QuietHoursPreferences",
    "RoutingChannel",
    "RoutingTable",
    "RuleType",
    "SendResult",
    "ServerContext",
    "SessionContext",
    "SessionUser",
    "TestResult",
    "TrustScoreChangedContext",
    "Violation",
    "ViolationContext",
    "ViolationRule",
    "WebhookFormat",
    "build_routing_table",
    "default_routing_table",
    # Errors
    "AgentNotConfiguredError",
    "ContextMismatchError",
    "NotificationError",
    "UnhandledContextError",
    "WebhookDeliveryError",
    # Quiet hours
    "is_quiet_time",
    "should_send",
    "should_send_event",
    # Payloads
    "build_payload",
    "resolve_severity",
    # Agents
    "NotificationAgent",
    "create_all_agents",
    # Dispatcher
    "NotificationDispatcher",
]
