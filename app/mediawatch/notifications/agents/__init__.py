"""Notification agents and the default registry.

Agents are built once at process start and shared by every dispatch.
"""

from typing import List, Optional

from mediawatch.configuration import Settings
from mediawatch.notifications.agents.apprise import AppriseAgent
from mediawatch.notifications.agents.base import NotificationAgent, PayloadBuilder
from mediawatch.notifications.agents.discord import DiscordAgent
from mediawatch.notifications.agents.json_webhook import JsonWebhookAgent
from mediawatch.notifications.agents.ntfy import NtfyAgent
from mediawatch.notifications.agents.push import PushAgent
from mediawatch.notifications.agents.pushover import PushoverAgent
from mediawatch.notifications.agents.web_toast import ToastPublisher, WebToastAgent


def create_all_agents(
    settings: Optional[Settings] = None,
    toast_publisher: Optional[ToastPublisher] = None,
) -> List[NotificationAgent]:
    """Build the default agent set in registry order.

    Args:
        settings: Application settings passed to every agent
        toast_publisher: Realtime publisher for the in-app toast agent

    Returns:
        discord, ntfy, apprise, pushover, json-webhook, push, web-toast
    """
    return [
        DiscordAgent(settings),
        NtfyAgent(settings),
        AppriseAgent(settings),
        PushoverAgent(settings),
        JsonWebhookAgent(settings),
        PushAgent(settings),
        WebToastAgent(settings, publisher=toast_publisher),
    ]


__all__ = [
    "NotificationAgent",
    "PayloadBuilder",
    "DiscordAgent",
    "NtfyAgent",
    "AppriseAgent",
    "PushoverAgent",
    "JsonWebhookAgent",
    "PushAgent",
    "WebToastAgent",
    "ToastPublisher",
    "create_all_agents",
]
