"""Network monitor configuration."""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from preppath.configuration import NetworkSettings

ConnectionCallback = Callable[[], Union[None, Awaitable[None]]]

DEFAULT_PROBE_URL = "https://www.google.com/favicon.ico"


@dataclass
class NetworkMonitorConfig:
    """Configuration for a NetworkMonitor.

    Attributes:
        on_connection_lost: Called once per online -> offline transition
        on_connection_restored: Called once per offline -> online transition
        slow_connection_threshold_ms: Probe latency at or above which the
            connection is classified as slow
        retry_interval_ms: Delay between automatic reconnect probes
        max_retries: Automatic reconnect probes before auto-probing stops
        probe_url: Resource fetched by the default HTTP latency probe
        probe_timeout_ms: Timeout for a single latency probe
    """

    on_connection_lost: Optional[ConnectionCallback] = None
    on_connection_restored: Optional[ConnectionCallback] = None
    slow_connection_threshold_ms: float = 3000
    retry_interval_ms: float = 5000
    max_retries: int = 3
    probe_url: str = DEFAULT_PROBE_URL
    probe_timeout_ms: float = 5000

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.slow_connection_threshold_ms <= 0:
            raise ValueError("slow_connection_threshold_ms must be greater than 0")
        if self.retry_interval_ms <= 0:
            raise ValueError("retry_interval_ms must be greater than 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be at least 0")
        if self.probe_timeout_ms <= 0:
            raise ValueError("probe_timeout_ms must be greater than 0")

    @classmethod
    def from_settings(
        cls, settings: NetworkSettings, **overrides: Any
    ) -> "NetworkMonitorConfig":
        """Build a config from NetworkSettings, with keyword overrides."""
        values = {
            "slow_connection_threshold_ms": settings.slow_connection_threshold_ms,
            "retry_interval_ms": settings.retry_interval_ms,
            "max_retries": settings.max_retries,
            "probe_url": settings.probe_url,
            "probe_timeout_ms": settings.probe_timeout_ms,
        }
        values.update(overrides)
        return cls(**values)
