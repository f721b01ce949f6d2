"""Configuration module - public API.

Centralized configuration management using Pydantic BaseSettings.

Exports:
    get_settings: Cached Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)
    NotificationDispatchSettings: Dispatcher limits and endpoints

Example:
    ```python
    from mediawatch.configuration import get_settings

    settings = get_settings()
    log_level = settings.LOG_LEVEL
    workers = settings.notifications.MAX_WORKERS
    ```
"""

from mediawatch.configuration.notifications import NotificationDispatchSettings
from mediawatch.configuration.settings import Settings, get_settings

__all__ = ["Settings", "NotificationDispatchSettings", "get_settings"]
