"""Unit tests for mediawatch.notifications.formatters."""

import pytest

from mediawatch.notifications.formatters import (
    RULE_DISPLAY_NAMES,
    format_duration,
    format_new_device,
    format_session_started,
    format_session_stopped,
    format_trust_score_changed,
    format_violation_details,
    format_violation_message,
    get_media_display,
    get_media_line,
    get_playback_type,
    get_severity_info,
    get_user_display_name,
)
from mediawatch.notifications.models import (
    NotificationSeverity,
    RuleType,
    TrustScoreChangedContext,
)
from tests.factories.notifications import make_session, make_user, make_violation


@pytest.mark.unit
class TestFormatDuration:
    @pytest.mark.parametrize(
        "ms,expected",
        [
            (0, "0s"),
            (45_000, "45s"),
            (200_000, "3m 20s"),
            (3_900_000, "1h 5m"),
            (7_200_000, "2h 0m"),
            (60_000, "1m 0s"),
        ],
    )
    def test_format_duration(self, ms, expected):
        assert format_duration(ms) == expected


@pytest.mark.unit
class TestMediaDisplay:
    def test_episode_uses_series_and_episode_code(self):
        session = make_session(
            media_type="episode",
            media_title="Pilot",
            grandparent_title="Breaking Bad",
            season_number=1,
            episode_number=2,
        )

        assert get_media_display(session) == ("Breaking Bad", "S01 E02 · Pilot")
        assert get_media_line(session) == "Breaking Bad - S01 E02 · Pilot"

    def test_episode_without_numbers_uses_episode_title(self):
        session = make_session(
            media_type="episode", media_title="Pilot", grandparent_title="Breaking Bad"
        )

        assert get_media_display(session) == ("Breaking Bad", "Pilot")

    def test_movie_uses_year(self):
        session = make_session(media_title="Inception", year=2010)

        assert get_media_display(session) == ("Inception", "2010")

    def test_movie_without_year(self):
        session = make_session(media_title="Inception")

        assert get_media_display(session) == ("Inception", None)
        assert get_media_line(session) == "Inception"


@pytest.mark.unit
class TestPlaybackType:
    def test_transcode(self):
        assert get_playback_type(make_session(is_transcode=True)) == "Transcode"

    @pytest.mark.parametrize(
        "video,audio", [("copy", "direct play"), ("direct play", "copy"), ("copy", "copy")]
    )
    def test_direct_stream(self, video, audio):
        session = make_session(video_decision=video, audio_decision=audio)

        assert get_playback_type(session) == "Direct Stream"

    def test_direct_play(self):
        assert get_playback_type(make_session()) == "Direct Play"


@pytest.mark.unit
class TestUserAndMessages:
    def test_identity_name_preferred(self):
        assert get_user_display_name(make_user(identity_name="Alice Smith")) == "Alice Smith"

    def test_username_fallback(self):
        assert get_user_display_name(make_user(username="alice")) == "alice"

    def test_session_started_message(self):
        session = make_session(media_title="Inception", year=2010)

        assert format_session_started(session) == "alice started watching Inception - 2010"

    def test_session_stopped_message_with_duration(self):
        session = make_session(media_title="Inception", duration_ms=3_900_000)

        assert format_session_stopped(session) == "alice finished watching Inception (1h 5m)"

    def test_session_stopped_message_without_duration(self):
        assert format_session_stopped(make_session()) == "alice finished watching Inception"

    def test_new_device_message(self):
        assert (
            format_new_device("bob", "Roku", "Berlin, DE")
            == "bob connected from a new device: Roku from Berlin, DE"
        )
        assert format_new_device("bob", "Roku", None) == "bob connected from a new device: Roku"

    def test_trust_score_message(self):
        down = TrustScoreChangedContext(
            user_name="bob", previous_score=80, new_score=60, reason="impossible travel"
        )
        up = TrustScoreChangedContext(user_name="bob", previous_score=60, new_score=70)

        assert (
            format_trust_score_changed(down)
            == "bob's trust score decreased from 80 to 60: impossible travel"
        )
        assert format_trust_score_changed(up) == "bob's trust score increased from 60 to 70"


@pytest.mark.unit
class TestViolationFormatters:
    def test_every_rule_type_has_display_name(self):
        assert set(RULE_DISPLAY_NAMES) == set(RuleType)

    def test_severity_info(self):
        assert get_severity_info(NotificationSeverity.HIGH) == ("High", 0xE74C3C)
        assert get_severity_info(NotificationSeverity.WARNING) == ("Warning", 0xF39C12)
        assert get_severity_info(NotificationSeverity.LOW) == ("Low", 0x3498DB)

    def test_impossible_travel_details(self):
        fields = format_violation_details(
            RuleType.IMPOSSIBLE_TRAVEL,
            {
                "from_location": "Paris",
                "to_location": "Tokyo",
                "distance_km": 9712.4,
                "speed_kmh": 4856.2,
            },
        )

        assert [(f["name"], f["value"]) for f in fields] == [
            ("From", "Paris"),
            ("To", "Tokyo"),
            ("Distance", "9712 km"),
            ("Speed", "4856 km/h"),
        ]
        assert all(f["inline"] for f in fields)

    def test_missing_keys_are_skipped_and_reason_appended(self):
        fields = format_violation_details(
            RuleType.SIMULTANEOUS_LOCATIONS,
            {"locations": ["Paris", "Tokyo"], "reason": "two cities", "unknown": 1},
        )

        assert fields[0] == {"name": "Locations", "value": "Paris, Tokyo", "inline": True}
        assert fields[-1] == {"name": "Reason", "value": "two cities", "inline": False}
        assert len(fields) == 2

    @pytest.mark.parametrize("rule_type", list(RuleType))
    def test_empty_data_gives_no_fields(self, rule_type):
        assert format_violation_details(rule_type, {}) == []

    def test_violation_message(self):
        violation = make_violation(
            rule_type=RuleType.CONCURRENT_STREAMS,
            data={"active_streams": 3, "max_streams": 2},
        )

        assert format_violation_message(violation) == (
            "alice triggered Concurrent Streams (Max 2 streams): "
            "Active Streams: 3, Limit: 2"
        )

    def test_violation_message_without_details(self):
        violation = make_violation(rule_type=RuleType.GEO_RESTRICTION, data={})

        assert format_violation_message(violation) == (
            "alice triggered Geo Restriction (Max 2 streams)"
        )
