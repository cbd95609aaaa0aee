"""Network status monitoring.

Architecture:
- NetworkStatus / ConnectionType: observable connectivity snapshot
- NetworkMonitorConfig: callbacks, thresholds and reconnect timing
- ConnectivitySource: platform online flag and change events
- LatencyProbe / HttpLatencyProbe: round-trip measurement for slow-link detection
- NetworkMonitor: state machine with bounded auto-reconnect
- SharedNetworkMonitor: one monitor shared by many consumers

Usage:
    from preppath.network import ManualConnectivitySource, NetworkMonitor

    source = ManualConnectivitySource(online=True)
    async with NetworkMonitor(source=source) as monitor:
        monitor.subscribe(lambda status: print(status))
"""

from preppath.network.config import DEFAULT_PROBE_URL, NetworkMonitorConfig
from preppath.network.models import ConnectionType, NetworkStatus
from preppath.network.monitor import NetworkMonitor
from preppath.network.probes import HttpLatencyProbe, LatencyProbe
from preppath.network.shared import MonitorSubscription, SharedNetworkMonitor
from preppath.network.sources import (
    CHANGE,
    OFFLINE,
    ONLINE,
    ConnectivitySource,
    ManualConnectivitySource,
)

__all__ = [
    # Models
    "ConnectionType",
    "NetworkStatus",
    # Configuration
    "NetworkMonitorConfig",
    "DEFAULT_PROBE_URL",
    # Sources
    "ConnectivitySource",
    "ManualConnectivitySource",
    "ONLINE",
    "OFFLINE",
    "CHANGE",
    # Probes
    "LatencyProbe",
    "HttpLatencyProbe",
    # Monitor
    "NetworkMonitor",
    "SharedNetworkMonitor",
    "MonitorSubscription",
]
