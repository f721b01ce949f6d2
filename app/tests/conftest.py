"""Shared fixtures for the notification engine tests."""

from unittest.mock import Mock

import pytest
import structlog

from mediawatch.notifications.models import default_routing_table
from tests.factories.notifications import (
    FIXED_NOW,
    make_app_settings,
    make_notification_settings,
    make_session,
    make_violation,
    make_webhook_settings,
)


@pytest.fixture(autouse=True)
def clean_log_context():
    """Keep structlog context vars from leaking between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def app_settings():
    return make_app_settings()


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def notification_settings_factory():
    """Factory for NotificationSettings snapshots."""
    return make_notification_settings


@pytest.fixture
def webhook_settings_factory():
    """Factory for settings with the custom webhook configured."""
    return make_webhook_settings


@pytest.fixture
def session_factory():
    return make_session


@pytest.fixture
def violation_factory():
    return make_violation


@pytest.fixture
def routing():
    """Routing table with every channel enabled for every event."""
    return default_routing_table()


@pytest.fixture
def ok_response():
    """Mock 200 response from an HTTP endpoint."""
    response = Mock()
    response.status_code = 200
    response.text = ""
    response.json.return_value = {}
    return response


@pytest.fixture
def error_response_factory():
    """Factory for non-2xx mock responses."""

    def _factory(status_code: int = 500, text: str = "Internal Server Error"):
        response = Mock()
        response.status_code = status_code
        response.text = text
        return response

    return _factory
