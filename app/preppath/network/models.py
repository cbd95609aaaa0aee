"""Network status models."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class ConnectionType(str, Enum):
    """Physical connection type reported by the platform."""

    WIFI = "wifi"
    CELLULAR = "cellular"
    UNKNOWN = "unknown"

    @classmethod
    def from_platform(cls, value: Optional[str]) -> "ConnectionType":
        if value == cls.WIFI.value:
            return cls.WIFI
        if value == cls.CELLULAR.value:
            return cls.CELLULAR
        return cls.UNKNOWN


@dataclass(frozen=True)
class NetworkStatus:
    """Observable connectivity snapshot published by a NetworkMonitor.

    Fields:
        is_online: Platform reports a usable connection
        is_slow_connection: Last latency probe exceeded the threshold.
            Always False while offline.
        connection_type: wifi, cellular or unknown
        retry_count: Consecutive reconnect probes since the connection was lost
    """

    is_online: bool = True
    is_slow_connection: bool = False
    connection_type: ConnectionType = ConnectionType.UNKNOWN
    retry_count: int = 0

    def evolve(self, **changes) -> "NetworkStatus":
        return replace(self, **changes)
