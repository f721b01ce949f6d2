"""Human-readable text shared by every agent.

Keeping the wording here means a stream or violation reads the same in
Discord, ntfy, Pushover and the in-app toast.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, TypedDict

from mediawatch.notifications.models import (
    ActiveSession,
    NotificationSeverity,
    RuleType,
    SessionUser,
    TrustScoreChangedContext,
    Violation,
)


class EmbedField(TypedDict):
    name: str
    value: str
    inline: bool


def format_duration(ms: int) -> str:
    """Format milliseconds as "1h 5m", "3m 20s" or "45s"."""
    seconds = ms // 1000
    minutes = seconds // 60
    hours = minutes // 60

    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def get_media_display(session: ActiveSession) -> Tuple[str, Optional[str]]:
    """Title and subtitle for a session, matching the UI card.

    Episodes show the series as title and "S01 E02 · Episode" as subtitle;
    everything else shows the media title and the year.
    """
    if session.media_type == "episode" and session.grandparent_title:
        episode_info = ""
        if session.season_number and session.episode_number:
            episode_info = (
                f"S{session.season_number:02d} E{session.episode_number:02d}"
            )
        subtitle = (
            f"{episode_info} · {session.media_title}"
            if episode_info
            else session.media_title
        )
        return session.grandparent_title, subtitle

    return session.media_title, str(session.year) if session.year else None


def get_media_line(session: ActiveSession) -> str:
    """Single line "Title - Subtitle" used in plain text bodies."""
    title, subtitle = get_media_display(session)
    return f"{title} - {subtitle}" if subtitle else title


def get_playback_type(session: ActiveSession) -> str:
    if session.is_transcode:
        return "Transcode"
    if session.video_decision == "copy" or session.audio_decision == "copy":
        return "Direct Stream"
    return "Direct Play"


def get_user_display_name(user: SessionUser) -> str:
    """Prefer the linked identity name over the raw server username."""
    return user.identity_name or user.username


def format_session_started(session: ActiveSession) -> str:
    return f"{get_user_display_name(session.user)} started watching {get_media_line(session)}"


def format_session_stopped(session: ActiveSession) -> str:
    duration = f" ({format_duration(session.duration_ms)})" if session.duration_ms else ""
    return (
        f"{get_user_display_name(session.user)} finished watching "
        f"{get_media_line(session)}{duration}"
    )


def format_new_device(user_name: str, device_name: str, location: Optional[str]) -> str:
    location_str = f" from {location}" if location else ""
    return f"{user_name} connected from a new device: {device_name}{location_str}"


def trust_score_direction(ctx: TrustScoreChangedContext) -> str:
    return "decreased" if ctx.decreased else "increased"


def format_trust_score_changed(ctx: TrustScoreChangedContext) -> str:
    reason = f": {ctx.reason}" if ctx.reason else ""
    return (
        f"{ctx.user_name}'s trust score {trust_score_direction(ctx)} "
        f"from {ctx.previous_score} to {ctx.new_score}{reason}"
    )


# ---------------------------------------------------------------------------
# Violations
# ---------------------------------------------------------------------------

RULE_DISPLAY_NAMES: Dict[RuleType, str] = {
    RuleType.IMPOSSIBLE_TRAVEL: "Impossible Travel",
    RuleType.SIMULTANEOUS_LOCATIONS: "Simultaneous Locations",
    RuleType.DEVICE_VELOCITY: "Device Velocity",
    RuleType.CONCURRENT_STREAMS: "Concurrent Streams",
    RuleType.GEO_RESTRICTION: "Geo Restriction",
}

SEVERITY_INFO: Dict[NotificationSeverity, Tuple[str, int]] = {
    NotificationSeverity.HIGH: ("High", 0xE74C3C),
    NotificationSeverity.WARNING: ("Warning", 0xF39C12),
    NotificationSeverity.LOW: ("Low", 0x3498DB),
}


def _km(value: Any) -> str:
    return f"{float(value):.0f} km"


def _kmh(value: Any) -> str:
    return f"{float(value):.0f} km/h"


def _listing(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


# (data key, field label, value formatter) per rule type
_RULE_DETAILS: Dict[RuleType, List[Tuple[str, str, Callable[[Any], str]]]] = {
    RuleType.IMPOSSIBLE_TRAVEL: [
        ("from_location", "From", str),
        ("to_location", "To", str),
        ("distance_km", "Distance", _km),
        ("speed_kmh", "Speed", _kmh),
    ],
    RuleType.SIMULTANEOUS_LOCATIONS: [
        ("locations", "Locations", _listing),
        ("distance_km", "Distance", _km),
    ],
    RuleType.DEVICE_VELOCITY: [
        ("unique_ips", "Unique IPs", str),
        ("window_hours", "Window", lambda v: f"{v}h"),
    ],
    RuleType.CONCURRENT_STREAMS: [
        ("active_streams", "Active Streams", str),
        ("max_streams", "Limit", str),
    ],
    RuleType.GEO_RESTRICTION: [
        ("country", "Country", str),
        ("mode", "Mode", str),
    ],
}


def get_rule_display_name(rule_type: RuleType) -> str:
    return RULE_DISPLAY_NAMES[rule_type]


def get_severity_info(severity: NotificationSeverity) -> Tuple[str, int]:
    """Label and embed colour for a severity."""
    return SEVERITY_INFO[severity]


def format_violation_details(rule_type: RuleType, data: Dict[str, Any]) -> List[EmbedField]:
    """Embed fields for the rule-specific details present in ``data``.

    Unknown keys are ignored; a free-form ``reason`` is always appended.
    """
    fields: List[EmbedField] = []
    for key, label, render in _RULE_DETAILS[rule_type]:
        value = data.get(key)
        if value is None:
            continue
        fields.append({"name": label, "value": render(value), "inline": True})

    if data.get("reason"):
        fields.append({"name": "Reason", "value": str(data["reason"]), "inline": False})
    return fields


def format_violation_message(violation: Violation) -> str:
    """One-paragraph description of a violation for plain text channels."""
    user_name = get_user_display_name(violation.user)
    rule_name = get_rule_display_name(violation.rule.type)
    message = f"{user_name} triggered {rule_name} ({violation.rule.name})"

    details = format_violation_details(violation.rule.type, violation.data)
    if details:
        message += ": " + ", ".join(f"{f['name']}: {f['value']}" for f in details)
    return message
