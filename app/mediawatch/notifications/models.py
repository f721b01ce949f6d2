"""Notification system core models.

Platform-agnostic records consumed by the dispatcher and its agents.
Producers (the poller, the session sync) build a context for one event;
the dispatcher wraps it in an immutable NotificationPayload and hands the
same instance to every eligible agent.

Uses Pydantic BaseModel for:
- Discriminated union of event contexts (one variant per event type)
- Frozen snapshots of settings and routing for the duration of a dispatch
- Validation of quiet-hours "HH:MM" values
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, Iterable, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class NotificationEventType(str, Enum):
    """Closed set of events upstream producers may emit.

    Adding a member requires a severity entry, a routing row, a builder in
    every agent and a payload builder.
    """

    SESSION_STARTED = "session_started"
    SESSION_STOPPED = "session_stopped"
    SERVER_DOWN = "server_down"
    SERVER_UP = "server_up"
    NEW_DEVICE = "new_device"
    TRUST_SCORE_CHANGED = "trust_score_changed"
    VIOLATION_DETECTED = "violation_detected"


class NotificationSeverity(str, Enum):
    """Coarse urgency used for quiet-hours suppression and channel priority."""

    LOW = "low"
    WARNING = "warning"
    HIGH = "high"


# Fixed policy. Violations carry their own severity; the entry here is the
# fallback used when a caller asks about the event type alone.
EVENT_SEVERITY: Dict[NotificationEventType, NotificationSeverity] = {
    NotificationEventType.SESSION_STARTED: NotificationSeverity.LOW,
    NotificationEventType.SESSION_STOPPED: NotificationSeverity.LOW,
    NotificationEventType.SERVER_DOWN: NotificationSeverity.HIGH,
    NotificationEventType.SERVER_UP: NotificationSeverity.LOW,
    NotificationEventType.NEW_DEVICE: NotificationSeverity.WARNING,
    NotificationEventType.TRUST_SCORE_CHANGED: NotificationSeverity.WARNING,
    NotificationEventType.VIOLATION_DETECTED: NotificationSeverity.WARNING,
}


class WebhookFormat(str, Enum):
    """Dialect spoken by the custom webhook URL."""

    JSON = "json"
    NTFY = "ntfy"
    APPRISE = "apprise"
    PUSHOVER = "pushover"


class RoutingChannel(str, Enum):
    """Routing column an agent is gated by."""

    DISCORD = "discord"
    WEBHOOK = "webhook"
    WEB_TOAST = "web_toast"
    PUSH = "push"


class RuleType(str, Enum):
    """Rule families that can raise a violation."""

    IMPOSSIBLE_TRAVEL = "impossible_travel"
    SIMULTANEOUS_LOCATIONS = "simultaneous_locations"
    DEVICE_VELOCITY = "device_velocity"
    CONCURRENT_STREAMS = "concurrent_streams"
    GEO_RESTRICTION = "geo_restriction"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Domain records referenced by contexts
# ---------------------------------------------------------------------------


class SessionUser(_Record):
    """Media server account, optionally linked to a named identity."""

    id: str
    username: str
    identity_name: Optional[str] = None


class ActiveSession(_Record):
    """Playback session as reported by the media server sync."""

    id: str
    server_user_id: str
    user: SessionUser
    media_type: str = "movie"
    media_title: str
    grandparent_title: Optional[str] = None
    season_number: Optional[int] = None
    episode_number: Optional[int] = None
    year: Optional[int] = None
    is_transcode: bool = False
    video_decision: Optional[str] = None
    audio_decision: Optional[str] = None
    duration_ms: Optional[int] = None
    quality: Optional[str] = None
    product: Optional[str] = None
    player_name: Optional[str] = None
    geo_city: Optional[str] = None
    geo_country: Optional[str] = None


class ViolationRule(_Record):
    id: str
    name: str
    type: RuleType


class Violation(_Record):
    """Rule violation together with the user and rule that produced it."""

    id: str
    rule_id: str
    server_user_id: str
    severity: NotificationSeverity
    data: Dict[str, Any] = Field(default_factory=dict)
    user: SessionUser
    rule: ViolationRule


# ---------------------------------------------------------------------------
# Contexts (tagged union keyed by ``type``)
# ---------------------------------------------------------------------------


class ViolationContext(_Record):
    type: Literal[NotificationEventType.VIOLATION_DETECTED] = (
        NotificationEventType.VIOLATION_DETECTED
    )
    violation: Violation


class SessionContext(_Record):
    type: Literal[
        NotificationEventType.SESSION_STARTED, NotificationEventType.SESSION_STOPPED
    ]
    session: ActiveSession


class ServerContext(_Record):
    type: Literal[NotificationEventType.SERVER_DOWN, NotificationEventType.SERVER_UP]
    server_name: str
    server_type: Optional[Literal["plex", "jellyfin", "emby"]] = None


class NewDeviceContext(_Record):
    type: Literal[NotificationEventType.NEW_DEVICE] = NotificationEventType.NEW_DEVICE
    user_name: str
    device_name: str
    platform: Optional[str] = None
    location: Optional[str] = None


class TrustScoreChangedContext(_Record):
    type: Literal[NotificationEventType.TRUST_SCORE_CHANGED] = (
        NotificationEventType.TRUST_SCORE_CHANGED
    )
    user_name: str
    previous_score: int
    new_score: int
    reason: Optional[str] = None

    @property
    def decreased(self) -> bool:
        return self.new_score < self.previous_score


NotificationContext = Annotated[
    Union[
        ViolationContext,
        SessionContext,
        ServerContext,
        NewDeviceContext,
        TrustScoreChangedContext,
    ],
    Field(discriminator="type"),
]


class NotificationPayload(_Record):
    """Unit handed to every agent for one event.

    Attributes:
        event_type: Event being dispatched; routing and quiet hours follow it
        context: Event-specific data used to render channel messages. Agents
            refuse to render a context recorded for a different event.
        severity: Resolved severity (violation and trust-score aware)
        title: Generic human-readable title
        message: Generic human-readable body
        timestamp: When the payload was built (timezone aware)
    """

    event_type: NotificationEventType
    context: NotificationContext
    severity: NotificationSeverity
    title: str
    message: str
    timestamp: datetime


# ---------------------------------------------------------------------------
# Settings and routing snapshots
# ---------------------------------------------------------------------------

_HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class QuietHoursPreferences(_Record):
    """User configured suppression window.

    Attributes:
        enabled: Master switch; when False nothing is ever suppressed
        start: Window start as "HH:MM" local time (inclusive)
        end: Window end as "HH:MM" local time (inclusive)
        timezone: IANA timezone name, unknown names fall back to UTC
        override_critical: Deliver high severity events inside the window
    """

    enabled: bool = False
    start: Optional[str] = Field(default=None, pattern=_HHMM_PATTERN)
    end: Optional[str] = Field(default=None, pattern=_HHMM_PATTERN)
    timezone: str = "UTC"
    override_critical: bool = True


class NotificationSettings(_Record):
    """Per-installation channel configuration, read once per dispatch.

    Credentials and URLs stay None until the operator configures them.
    """

    discord_webhook_url: Optional[str] = None
    custom_webhook_url: Optional[str] = None
    webhook_format: Optional[WebhookFormat] = None
    ntfy_topic: Optional[str] = None
    ntfy_auth_token: Optional[str] = None
    pushover_user_key: Optional[str] = None
    pushover_api_token: Optional[str] = None
    push_tokens: Tuple[str, ...] = ()
    quiet_hours: QuietHoursPreferences = Field(default_factory=QuietHoursPreferences)


class ChannelRouting(_Record):
    """Which channels are enabled for one event type."""

    event_type: NotificationEventType
    discord_enabled: bool = True
    webhook_enabled: bool = True
    web_toast_enabled: bool = True
    push_enabled: bool = True

    def is_enabled(self, channel: RoutingChannel) -> bool:
        return {
            RoutingChannel.DISCORD: self.discord_enabled,
            RoutingChannel.WEBHOOK: self.webhook_enabled,
            RoutingChannel.WEB_TOAST: self.web_toast_enabled,
            RoutingChannel.PUSH: self.push_enabled,
        }[channel]


RoutingTable = Mapping[NotificationEventType, ChannelRouting]


def build_routing_table(rows: Iterable[ChannelRouting]) -> Dict[NotificationEventType, ChannelRouting]:
    """Index routing rows by event type; later rows win."""
    return {row.event_type: row for row in rows}


def default_routing_table() -> Dict[NotificationEventType, ChannelRouting]:
    """Routing with every channel enabled for every event type."""
    return build_routing_table(
        ChannelRouting(event_type=event_type) for event_type in NotificationEventType
    )


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class SendResult(BaseModel):
    """Outcome of one delivery attempt through one agent.

    Attributes:
        success: Whether the channel accepted the message
        agent: Agent name, for logging and audit
        error: Human-readable failure reason when success is False
    """

    __test__ = False

    success: bool
    agent: str
    error: Optional[str] = None

    @classmethod
    def ok(cls, agent: str) -> "SendResult":
        return cls(success=True, agent=agent)

    @classmethod
    def failed(cls, agent: str, error: str) -> "SendResult":
        return cls(success=False, agent=agent, error=error)


class TestResult(BaseModel):
    """Outcome of a connectivity test; the error string is shown verbatim."""

    __test__ = False

    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "TestResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "TestResult":
        return cls(success=False, error=error)
