"""Notification dispatch settings."""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from mediawatch.configuration.base import InfrastructureSettings


class NotificationDispatchSettings(InfrastructureSettings):
    """Runtime limits and endpoints for the notification dispatcher.

    Environment Variables:
        NOTIFICATION_REQUEST_TIMEOUT_SECONDS: HTTP timeout for one agent request
        NOTIFICATION_DISPATCH_TIMEOUT_SECONDS: Upper bound on waiting for a fan-out
        NOTIFICATION_MAX_WORKERS: Thread pool size used for concurrent delivery
        NOTIFICATION_PUSHOVER_API_URL: Pushover messages endpoint
        NOTIFICATION_PUSH_API_URL: Native push gateway endpoint

    Example:
        ```python
        from mediawatch.configuration import get_settings

        settings = get_settings()

        timeout = settings.notifications.REQUEST_TIMEOUT_SECONDS
        workers = settings.notifications.MAX_WORKERS
        ```
    """

    REQUEST_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    DISPATCH_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    MAX_WORKERS: int = Field(default=8, gt=0)
    PUSHOVER_API_URL: str = "https://api.pushover.net/1/messages.json"
    PUSH_API_URL: str = "https://exp.host/--/api/v2/push/send"

    model_config = SettingsConfigDict(
        env_prefix="NOTIFICATION_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )
