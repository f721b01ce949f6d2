"""MediaWatch configuration settings - main aggregator."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from mediawatch.configuration.notifications import NotificationDispatchSettings


class Settings(BaseSettings):
    """MediaWatch configuration settings - main aggregator.

    Environment Variables:
        PREFIX: Environment prefix for non-production deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        APP_NAME: Name shown in outbound notifications

    Example:
        ```python
        from mediawatch.configuration import get_settings

        settings = get_settings()

        if settings.is_production:
            ...
        timeout = settings.notifications.REQUEST_TIMEOUT_SECONDS
        ```
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    APP_NAME: str = "MediaWatch"

    notifications: NotificationDispatchSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            "notifications": NotificationDispatchSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide Settings instance."""
    return Settings()
