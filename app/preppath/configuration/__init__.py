"""Configuration module - public API.

Centralized configuration for the resilience layer using Pydantic
BaseSettings, one section per component.

Exports:
    settings: Singleton Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)
    RetrySettings: Retry executor settings class
    NetworkSettings: Network monitor settings class
"""

from preppath.configuration.settings import Settings, settings
from preppath.configuration.retry import RetrySettings
from preppath.configuration.network import NetworkSettings

__all__ = ["Settings", "settings", "RetrySettings", "NetworkSettings"]
