"""PrepPath resilience settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from preppath.configuration.network import NetworkSettings
from preppath.configuration.retry import RetrySettings


class Settings(BaseSettings):
    """Resilience layer configuration settings - main aggregator.

    Environment Variables:
        ENVIRONMENT: Deployment environment name (default: development)
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        ```python
        from preppath.configuration import settings

        max_retries = settings.retry.max_retries
        probe_url = settings.network.probe_url

        if settings.is_production:
            ...
        ```
    """

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    retry: RetrySettings
    network: NetworkSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if ENVIRONMENT is "production", False otherwise.
        """
        return self.ENVIRONMENT.lower() == "production"

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            "retry": RetrySettings,
            "network": NetworkSettings,
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


# Create the singleton settings instance
settings = Settings()
