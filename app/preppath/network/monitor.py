"""Network monitor with latency classification and bounded auto-reconnect.

States:
    Online-Fast: online, last probe under slow_connection_threshold_ms
    Online-Slow: online, last probe at or over the threshold (or failed)
    Offline(n): offline after n automatic reconnect probes

Transitions:
    online event      -> probe latency, classify, retry_count=0, cancel the
                         reconnect timer, on_connection_restored() if offline
    offline event     -> Offline(0), on_connection_lost() if online, restart
                         the reconnect cycle after retry_interval_ms
    reconnect probe   -> platform online and probe completes: online
                         transition. Otherwise Offline(n+1), rescheduled
                         while n+1 < max_retries
    retry_connection  -> retry_count=0 and an immediate re-check

The monitor never raises for probe failures or for exceptions raised by
consumer callbacks; both are logged.

Connectivity sources must emit events on the event loop thread the monitor
was started on.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Coroutine, Optional, Set

from preppath.logging import get_module_logger
from preppath.network.config import NetworkMonitorConfig
from preppath.network.models import ConnectionType, NetworkStatus
from preppath.network.probes import HttpLatencyProbe, LatencyProbe
from preppath.network.sources import CHANGE, OFFLINE, ONLINE, ConnectivitySource
from preppath.resilience.observable import Listener, StatePublisher

logger = get_module_logger()

Sleep = Callable[[float], Awaitable[Any]]


class NetworkMonitor:
    """Tracks connectivity and drives reconnect probes while offline.

    Attributes:
        config: NetworkMonitorConfig with callbacks and timing
        source: Optional platform connectivity source
        probe: Latency probe used to classify connection quality
    """

    def __init__(
        self,
        config: Optional[NetworkMonitorConfig] = None,
        *,
        source: Optional[ConnectivitySource] = None,
        probe: Optional[LatencyProbe] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the monitor.

        Args:
            config: Optional NetworkMonitorConfig. If not provided, uses defaults.
            source: Platform connectivity source. Without one the platform
                is assumed online and no events are received.
            probe: Latency probe. Defaults to an HttpLatencyProbe against
                config.probe_url.
            sleep: Coroutine function used for the reconnect timer (seconds)
        """
        self.config = config or NetworkMonitorConfig()
        self.source = source
        self.probe = probe or HttpLatencyProbe(
            self.config.probe_url, timeout_ms=self.config.probe_timeout_ms
        )
        self._sleep = sleep
        self._publisher: StatePublisher[NetworkStatus] = StatePublisher(
            NetworkStatus(
                is_online=self._platform_online(),
                connection_type=self._platform_connection_type(),
            ),
            name="network_monitor",
        )
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._event_tasks: Set[asyncio.Task] = set()
        self._transition = 0
        self._started = False
        self.log = logger.bind(monitor="network")

    @property
    def status(self) -> NetworkStatus:
        return self._publisher.state

    @property
    def started(self) -> bool:
        return self._started

    @property
    def reconnect_pending(self) -> bool:
        task = self._reconnect_task
        return task is not None and not task.done()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Subscribe to NetworkStatus changes. Returns an unsubscribe callable."""
        return self._publisher.subscribe(listener)

    async def start(self) -> None:
        """Attach platform listeners and establish the initial state."""
        if self._started:
            return
        self._started = True
        self._loop = asyncio.get_running_loop()

        if self.source is not None:
            self.source.add_listener(ONLINE, self._on_online_event)
            self.source.add_listener(OFFLINE, self._on_offline_event)
            self.source.add_listener(CHANGE, self._on_change_event)

        self.log.info("network_monitor_started", is_online=self.status.is_online)

        if self._platform_online():
            await self.handle_online()
        else:
            self._publish(is_online=False, is_slow_connection=False, retry_count=0)
            self._schedule_reconnect()

    async def stop(self) -> None:
        """Detach listeners and cancel the reconnect timer and pending handlers."""
        if not self._started:
            return
        self._started = False

        if self.source is not None:
            self.source.remove_listener(ONLINE, self._on_online_event)
            self.source.remove_listener(OFFLINE, self._on_offline_event)
            self.source.remove_listener(CHANGE, self._on_change_event)

        pending = [task for task in self._event_tasks if not task.done()]
        reconnect = self._reconnect_task
        self._reconnect_task = None
        if reconnect is not None and not reconnect.done():
            pending.append(reconnect)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._event_tasks.clear()

        self.log.info("network_monitor_stopped")

    async def __aenter__(self) -> "NetworkMonitor":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def drain(self) -> None:
        """Wait until event handling scheduled by the source has finished."""
        while self._event_tasks:
            await asyncio.gather(*list(self._event_tasks), return_exceptions=True)

    async def handle_online(self) -> None:
        """Handle an online signal: probe, classify and restore."""
        self._transition += 1
        token = self._transition

        latency_ms = await self._measure()

        if token != self._transition:
            self.log.debug("online_transition_superseded")
            return

        await self._apply_online(latency_ms)

    async def handle_offline(self) -> None:
        """Handle an offline signal: enter Offline(0) and start reconnecting."""
        self._transition += 1
        token = self._transition
        was_online = self.status.is_online

        self._cancel_reconnect()
        self._publish(is_online=False, is_slow_connection=False, retry_count=0)

        if was_online:
            self.log.warning("connection_lost")
            await self._notify(self.config.on_connection_lost, "on_connection_lost")
            if token != self._transition:
                return

        self._schedule_reconnect()

    async def retry_connection(self) -> None:
        """Reset the reconnect counter and re-check connectivity immediately."""
        self.log.info("manual_reconnect_requested")
        self._publish(retry_count=0)

        if self._platform_online():
            await self.handle_online()
        else:
            await self.handle_offline()

    def _platform_online(self) -> bool:
        if self.source is None:
            return True
        online = self.source.is_online()
        return True if online is None else bool(online)

    def _platform_connection_type(self) -> ConnectionType:
        if self.source is None:
            return ConnectionType.UNKNOWN
        return ConnectionType.from_platform(self.source.connection_type())

    def _publish(self, **changes: Any) -> None:
        self._publisher.publish(self.status.evolve(**changes))

    async def _measure(self) -> Optional[float]:
        try:
            return await self.probe.measure()
        except Exception as e:
            self.log.warning(
                "latency_probe_error",
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

    async def _apply_online(self, latency_ms: Optional[float]) -> None:
        was_online = self.status.is_online
        is_slow = (
            latency_ms is None
            or latency_ms >= self.config.slow_connection_threshold_ms
        )

        self._cancel_reconnect()
        self._publish(
            is_online=True,
            is_slow_connection=is_slow,
            connection_type=self._platform_connection_type(),
            retry_count=0,
        )

        if not was_online:
            self.log.info(
                "connection_restored",
                latency_ms=latency_ms,
                is_slow_connection=is_slow,
            )
            await self._notify(
                self.config.on_connection_restored, "on_connection_restored"
            )

    def _schedule_reconnect(self) -> None:
        if self._loop is None or not self._started:
            return
        self._reconnect_task = self._loop.create_task(self._reconnect_loop())

    def _cancel_reconnect(self) -> None:
        task = self._reconnect_task
        self._reconnect_task = None
        if task is None or task.done():
            return
        # The loop itself may be the caller when a probe finds us back online.
        if task is asyncio.current_task():
            return
        task.cancel()

    async def _reconnect_loop(self) -> None:
        interval_seconds = self.config.retry_interval_ms / 1000

        while True:
            await self._sleep(interval_seconds)
            token = self._transition

            status = self.status
            if status.is_online or status.retry_count >= self.config.max_retries:
                return

            if self._platform_online():
                latency_ms = await self._measure()
                if token != self._transition:
                    # A platform event arrived during the check and owns the state.
                    self.log.debug("reconnect_probe_superseded")
                    continue
                if latency_ms is not None:
                    await self._apply_online(latency_ms)
                    return

            retry_count = self.status.retry_count + 1
            self._publish(retry_count=retry_count)
            self.log.info(
                "reconnect_probe_failed",
                retry_count=retry_count,
                max_retries=self.config.max_retries,
            )

            if retry_count >= self.config.max_retries:
                self.log.warning("reconnect_attempts_exhausted", retry_count=retry_count)
                return

    def _on_online_event(self) -> None:
        self._spawn(self.handle_online())

    def _on_offline_event(self) -> None:
        self._spawn(self.handle_offline())

    def _on_change_event(self) -> None:
        if self._platform_online():
            self._spawn(self.handle_online())

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        if self._loop is None or not self._started:
            coro.close()
            return
        task = self._loop.create_task(coro)
        self._event_tasks.add(task)
        task.add_done_callback(self._event_tasks.discard)

    async def _notify(self, callback: Optional[Callable[[], Any]], name: str) -> None:
        if callback is None:
            return
        try:
            result = callback()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.log.error(
                "network_callback_failed",
                callback=name,
                error=str(e),
                exc_info=True,
            )
