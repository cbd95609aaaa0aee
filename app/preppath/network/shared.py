"""Shared network monitor with reference-counted lifecycle.

One monitor gives every consumer the same view of connectivity. The
first attach() constructs and starts it; the last detach() stops it and
drops the instance, so a later attach() starts a fresh one.

Usage:
    shared = SharedNetworkMonitor(lambda: NetworkMonitor(config, source=source))

    subscription = await shared.attach(render_network_banner)
    ...
    await subscription.detach()
"""

import asyncio
from typing import Callable, Optional

from preppath.logging import get_module_logger
from preppath.network.models import NetworkStatus
from preppath.network.monitor import NetworkMonitor
from preppath.resilience.observable import Listener

logger = get_module_logger()


class MonitorSubscription:
    """Handle returned by SharedNetworkMonitor.attach()."""

    def __init__(
        self,
        owner: "SharedNetworkMonitor",
        monitor: NetworkMonitor,
        unsubscribe: Optional[Callable[[], None]],
    ) -> None:
        self._owner = owner
        self.monitor = monitor
        self._unsubscribe = unsubscribe
        self._detached = False

    @property
    def status(self) -> NetworkStatus:
        return self.monitor.status

    @property
    def detached(self) -> bool:
        return self._detached

    async def retry_connection(self) -> None:
        await self.monitor.retry_connection()

    async def detach(self) -> None:
        """Stop receiving updates. Idempotent."""
        if self._detached:
            return
        self._detached = True
        if self._unsubscribe is not None:
            self._unsubscribe()
        await self._owner._release()


class SharedNetworkMonitor:
    """Owns a single NetworkMonitor shared by any number of consumers.

    Attributes:
        factory: Zero-argument callable building a new NetworkMonitor
    """

    def __init__(self, factory: Callable[[], NetworkMonitor]) -> None:
        self.factory = factory
        self._monitor: Optional[NetworkMonitor] = None
        self._consumers = 0
        self._lock = asyncio.Lock()

    @property
    def consumer_count(self) -> int:
        return self._consumers

    @property
    def monitor(self) -> Optional[NetworkMonitor]:
        return self._monitor

    async def attach(self, listener: Optional[Listener] = None) -> MonitorSubscription:
        """Attach a consumer, starting the monitor on first use.

        Args:
            listener: Optional callable receiving every NetworkStatus change

        Returns:
            MonitorSubscription for reading status and detaching
        """
        async with self._lock:
            if self._monitor is None:
                monitor = self.factory()
                await monitor.start()
                self._monitor = monitor
                logger.info("shared_network_monitor_created")
            self._consumers += 1
            monitor = self._monitor

        unsubscribe = monitor.subscribe(listener) if listener is not None else None
        return MonitorSubscription(self, monitor, unsubscribe)

    async def _release(self) -> None:
        async with self._lock:
            self._consumers -= 1
            if self._consumers > 0 or self._monitor is None:
                return
            monitor = self._monitor
            self._monitor = None
            await monitor.stop()
            logger.info("shared_network_monitor_disposed")
