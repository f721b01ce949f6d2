"""Unit tests for the shared HTTP transport."""

from unittest.mock import patch

import pytest
import requests

from mediawatch.notifications.errors import NotificationError, WebhookDeliveryError
from mediawatch.notifications.transport import post_form, post_json

POST = "mediawatch.notifications.transport.requests.post"


@pytest.mark.unit
class TestPostJson:
    @patch(POST)
    def test_posts_json_with_headers(self, mock_post, ok_response):
        mock_post.return_value = ok_response

        response = post_json(
            "https://hook.test",
            {"a": 1},
            label="Test webhook",
            timeout=3.0,
            headers={"Authorization": "Bearer t"},
        )

        assert response is ok_response
        mock_post.assert_called_once_with(
            "https://hook.test",
            json={"a": 1},
            headers={"Content-Type": "application/json", "Authorization": "Bearer t"},
            timeout=3.0,
        )

    @pytest.mark.parametrize("status_code", [200, 201, 204, 299])
    def test_any_2xx_is_success(self, ok_response, status_code):
        ok_response.status_code = status_code

        with patch(POST, return_value=ok_response):
            assert post_json("https://hook.test", {}, "Test webhook", 1.0) is ok_response

    @patch(POST)
    def test_non_2xx_raises_with_status_and_body(self, mock_post, error_response_factory):
        mock_post.return_value = error_response_factory(404, "Unknown Webhook")

        with pytest.raises(WebhookDeliveryError) as exc_info:
            post_json("https://hook.test", {}, "Discord webhook", 1.0)

        error = exc_info.value
        assert str(error) == "Discord webhook failed: 404 Unknown Webhook"
        assert error.status_code == 404
        assert error.label == "Discord webhook"
        assert isinstance(error, NotificationError)

    @patch(POST)
    def test_empty_body_has_no_trailing_space(self, mock_post, error_response_factory):
        mock_post.return_value = error_response_factory(500, "")

        with pytest.raises(WebhookDeliveryError, match=r"^Ntfy webhook failed: 500$"):
            post_json("https://hook.test", {}, "Ntfy webhook", 1.0)

    @patch(POST)
    def test_network_errors_propagate(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(requests.ConnectionError):
            post_json("https://hook.test", {}, "Ntfy webhook", 1.0)


@pytest.mark.unit
class TestPostForm:
    @patch(POST)
    def test_posts_form_encoded(self, mock_post, ok_response):
        mock_post.return_value = ok_response

        post_form("https://form.test", {"k": "v"}, label="Pushover API", timeout=2.0)

        mock_post.assert_called_once_with(
            "https://form.test",
            data={"k": "v"},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=2.0,
        )

    @patch(POST)
    def test_non_2xx_raises(self, mock_post, error_response_factory):
        mock_post.return_value = error_response_factory(429, "rate limited")

        with pytest.raises(WebhookDeliveryError, match="Pushover API failed: 429 rate limited"):
            post_form("https://form.test", {}, "Pushover API", 2.0)
