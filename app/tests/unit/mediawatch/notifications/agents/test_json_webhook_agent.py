"""Unit tests for JsonWebhookAgent."""

from unittest.mock import patch

import pytest

from mediawatch.notifications.agents.json_webhook import JsonWebhookAgent
from mediawatch.notifications.models import NotificationEventType, WebhookFormat
from tests.factories.notifications import FIXED_NOW, make_payload, make_webhook_settings

POST = "mediawatch.notifications.transport.requests.post"


@pytest.fixture
def agent(app_settings):
    return JsonWebhookAgent(app_settings)


@pytest.mark.unit
class TestJsonWebhookGating:
    @pytest.mark.parametrize("webhook_format", [WebhookFormat.JSON, None])
    def test_json_or_unset_format(self, agent, webhook_format):
        settings = make_webhook_settings(webhook_format=webhook_format)

        assert agent.should_send(NotificationEventType.NEW_DEVICE, settings) is True

    @pytest.mark.parametrize(
        "webhook_format", [WebhookFormat.NTFY, WebhookFormat.APPRISE, WebhookFormat.PUSHOVER]
    )
    def test_other_dialects_skip(self, agent, webhook_format):
        settings = make_webhook_settings(webhook_format=webhook_format)

        assert agent.should_send(NotificationEventType.NEW_DEVICE, settings) is False


@pytest.mark.unit
class TestJsonWebhookMessages:
    def test_envelope(self, agent):
        message = agent.build_message(
            make_payload(NotificationEventType.SERVER_DOWN), make_webhook_settings()
        )

        assert message == {
            "event": "server_down",
            "timestamp": FIXED_NOW.isoformat(),
            "data": {"server_name": "Main Plex", "server_type": "plex"},
        }

    def test_violation_data(self, agent):
        data = agent.build_message(
            make_payload(NotificationEventType.VIOLATION_DETECTED), make_webhook_settings()
        )["data"]

        assert data["user"] == {
            "id": "server-user-1",
            "username": "alice",
            "display_name": "alice",
        }
        assert data["rule"] == {
            "id": "rule-1",
            "type": "concurrent_streams",
            "name": "Max 2 streams",
        }
        assert data["violation"]["severity"] == "warning"
        assert data["violation"]["details"] == {"active_streams": 3, "max_streams": 2}

    def test_session_started_data(self, agent):
        data = agent.build_message(
            make_payload(NotificationEventType.SESSION_STARTED), make_webhook_settings()
        )["data"]

        assert data["media"] == {
            "title": "Inception",
            "subtitle": "2010",
            "type": "movie",
            "year": 2010,
        }
        assert data["playback"]["type"] == "Direct Play"
        assert data["location"] == {"city": None, "country": None}

    def test_session_stopped_data(self, agent):
        data = agent.build_message(
            make_payload(NotificationEventType.SESSION_STOPPED), make_webhook_settings()
        )["data"]

        assert data["session"] == {"duration_ms": 3_900_000}

    def test_new_device_and_trust_score_data(self, agent):
        settings = make_webhook_settings()

        device = agent.build_message(make_payload(NotificationEventType.NEW_DEVICE), settings)
        trust = agent.build_message(
            make_payload(NotificationEventType.TRUST_SCORE_CHANGED), settings
        )

        assert device["data"]["device_name"] == "Roku"
        assert device["data"]["platform"] == "Roku OS"
        assert trust["data"] == {
            "user_name": "alice",
            "previous_score": 80,
            "new_score": 60,
            "reason": "shared account",
        }


@pytest.mark.unit
class TestJsonWebhookSend:
    @patch(POST)
    def test_send(self, mock_post, agent, ok_response):
        mock_post.return_value = ok_response

        result = agent.send(make_payload(), make_webhook_settings(url="https://hook.test/x"))

        assert result.success is True
        assert mock_post.call_args.args[0] == "https://hook.test/x"
        assert mock_post.call_args.kwargs["json"]["event"] == "server_down"

    @patch(POST)
    def test_rejected(self, mock_post, agent, error_response_factory):
        mock_post.return_value = error_response_factory(502, "")

        result = agent.send(make_payload(), make_webhook_settings())

        assert result.error == "JSON webhook failed: 502"

    @patch(POST)
    def test_send_test(self, mock_post, agent, ok_response):
        mock_post.return_value = ok_response

        assert agent.send_test(make_webhook_settings()).success is True
        body = mock_post.call_args.kwargs["json"]
        assert body["event"] == "test"
        assert body["data"] == {"message": "This is a test notification from MediaWatch"}
