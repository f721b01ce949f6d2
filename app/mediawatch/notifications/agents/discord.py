"""Discord agent: rich embeds posted to a Discord webhook."""

from typing import Dict, List, Optional, TypedDict

from mediawatch.notifications.agents.base import NotificationAgent, PayloadBuilder
from mediawatch.notifications.formatters import (
    EmbedField,
    format_duration,
    format_violation_details,
    get_media_display,
    get_playback_type,
    get_rule_display_name,
    get_severity_info,
    get_user_display_name,
    trust_score_direction,
)
from mediawatch.notifications.models import (
    NotificationEventType,
    NotificationPayload,
    NotificationSettings,
    RoutingChannel,
)
from mediawatch.notifications.transport import post_json

BLUE = 0x3498DB
GRAY = 0x95A5A6
RED = 0xFF0000
GREEN = 0x2ECC71
ORANGE = 0xF39C12
SOFT_RED = 0xE74C3C


class DiscordEmbed(TypedDict, total=False):
    title: str
    description: str
    color: int
    fields: List[EmbedField]
    timestamp: str


def _field(name: str, value: str, inline: bool = True) -> EmbedField:
    return {"name": name, "value": value, "inline": inline}


class DiscordAgent(NotificationAgent):
    """Discord webhook agent.

    Every event renders as a single embed. The webhook is posted with the
    app name as the bot username and the payload timestamp on the embed.
    """

    @property
    def name(self) -> str:
        return "discord"

    @property
    def display_name(self) -> str:
        return "Discord"

    @property
    def routing_channel(self) -> RoutingChannel:
        return RoutingChannel.DISCORD

    def should_send(self, event_type, settings: NotificationSettings) -> bool:
        return bool(settings.discord_webhook_url)

    def missing_configuration(self, settings: NotificationSettings) -> Optional[str]:
        if not settings.discord_webhook_url:
            return "Discord webhook URL not configured"
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

    def build_message(self, payload: NotificationPayload, settings: NotificationSettings):
        embed = super().build_message(payload, settings)
        embed["timestamp"] = payload.timestamp.isoformat()
        return self._webhook_body(embed)

    def build_test_message(self, settings: NotificationSettings):
        return self._webhook_body(
            {"title": "Test Notification", "description": self.test_body, "color": BLUE}
        )

    def deliver(self, message, settings: NotificationSettings) -> None:
        post_json(
            settings.discord_webhook_url,
            message,
            label="Discord webhook",
            timeout=self._timeout,
        )

    def _webhook_body(self, embed: DiscordEmbed) -> dict:
        return {"username": self._app_name, "embeds": [embed]}

    def _violation(self, payload: NotificationPayload, settings) -> DiscordEmbed:
        violation = payload.context.violation
        severity_label, color = get_severity_info(violation.severity)
        return {
            "title": "Sharing Violation Detected",
            "color": color,
            "fields": [
                _field("User", get_user_display_name(violation.user)),
                _field("Rule", get_rule_display_name(violation.rule.type)),
                _field("Severity", severity_label),
                *format_violation_details(violation.rule.type, violation.data),
            ],
        }

    def _session_started(self, payload: NotificationPayload, settings) -> DiscordEmbed:
        session = payload.context.session
        media_title, subtitle = get_media_display(session)

        fields = [
            _field("User", get_user_display_name(session.user)),
            _field("Media", media_title),
        ]
        if subtitle:
            fields.append(_field("Episode", subtitle))
        fields.append(_field("Playback", get_playback_type(session)))
        if session.geo_city and session.geo_country:
            fields.append(_field("Location", f"{session.geo_city}, {session.geo_country}"))
        fields.append(_field("Player", session.product or session.player_name or "Unknown"))

        return {"title": "Stream Started", "color": BLUE, "fields": fields}

    def _session_stopped(self, payload: NotificationPayload, settings) -> DiscordEmbed:
        session = payload.context.session
        media_title, subtitle = get_media_display(session)

        fields = [
            _field("User", get_user_display_name(session.user)),
            _field("Media", media_title),
        ]
        if subtitle:
            fields.append(_field("Episode", subtitle))
        duration = format_duration(session.duration_ms) if session.duration_ms else "Unknown"
        fields.append(_field("Duration", duration))

        return {"title": "Stream Ended", "color": GRAY, "fields": fields}

    def _server_down(self, payload: NotificationPayload, settings) -> DiscordEmbed:
        return {
            "title": "Server Connection Lost",
            "description": f"Lost connection to {payload.context.server_name}",
            "color": RED,
        }

    def _server_up(self, payload: NotificationPayload, settings) -> DiscordEmbed:
        return {
            "title": "Server Back Online",
            "description": f"{payload.context.server_name} is back online",
            "color": GREEN,
        }

    def _new_device(self, payload: NotificationPayload, settings) -> DiscordEmbed:
        ctx = payload.context
        fields = [_field("User", ctx.user_name), _field("Device", ctx.device_name)]
        if ctx.platform:
            fields.append(_field("Platform", ctx.platform))
        if ctx.location:
            fields.append(_field("Location", ctx.location))
        return {"title": "New Device Detected", "color": ORANGE, "fields": fields}

    def _trust_score_changed(self, payload: NotificationPayload, settings) -> DiscordEmbed:
        ctx = payload.context
        fields = [
            _field("User", ctx.user_name),
            _field("Previous Score", str(ctx.previous_score)),
            _field("New Score", str(ctx.new_score)),
        ]
        if ctx.reason:
            fields.append(_field("Reason", ctx.reason, inline=False))
        return {
            "title": f"Trust Score {trust_score_direction(ctx).capitalize()}",
            "color": SOFT_RED if ctx.decreased else GREEN,
            "fields": fields,
        }
