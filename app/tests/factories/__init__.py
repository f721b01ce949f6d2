"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    FIXED_NOW,
    make_app_settings,
    make_context,
    make_notification_settings,
    make_payload,
    make_quiet_hours,
    make_routing,
    make_session,
    make_user,
    make_violation,
    make_webhook_settings,
)

__all__ = [
    "FIXED_NOW",
    "make_app_settings",
    "make_context",
    "make_notification_settings",
    "make_payload",
    "make_quiet_hours",
    "make_routing",
    "make_session",
    "make_user",
    "make_violation",
    "make_webhook_settings",
]
