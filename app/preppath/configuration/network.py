"""Network monitor settings."""

from pydantic import Field

from preppath.configuration.base import ResilienceSettingsBase


class NetworkSettings(ResilienceSettingsBase):
    """Default configuration for the network monitor.

    Environment Variables:
        NETWORK_SLOW_CONNECTION_THRESHOLD_MS: Probe round-trip above which the
            connection is classified as slow (default: 3000ms)
        NETWORK_RETRY_INTERVAL_MS: Delay between reconnect probes while
            offline (default: 5000ms)
        NETWORK_MAX_RETRIES: Reconnect probes before auto-probing stops
            (default: 3)
        NETWORK_PROBE_URL: Resource requested by the latency probe
        NETWORK_PROBE_TIMEOUT_MS: Timeout for a single latency probe
            (default: 5000ms)
    """

    slow_connection_threshold_ms: float = Field(
        default=3000,
        alias="NETWORK_SLOW_CONNECTION_THRESHOLD_MS",
        gt=0,
        description="Probe latency threshold for a slow connection (milliseconds)",
    )
    retry_interval_ms: float = Field(
        default=5000,
        alias="NETWORK_RETRY_INTERVAL_MS",
        gt=0,
        description="Delay between automatic reconnect probes (milliseconds)",
    )
    max_retries: int = Field(
        default=3,
        alias="NETWORK_MAX_RETRIES",
        ge=0,
        description="Automatic reconnect probes before giving up",
    )
    probe_url: str = Field(
        default="https://www.google.com/favicon.ico",
        alias="NETWORK_PROBE_URL",
        description="Small resource fetched with HEAD to measure latency",
    )
    probe_timeout_ms: float = Field(
        default=5000,
        alias="NETWORK_PROBE_TIMEOUT_MS",
        gt=0,
        description="Timeout for a single latency probe (milliseconds)",
    )
