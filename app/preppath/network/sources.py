"""Platform connectivity sources.

A ConnectivitySource reports the platform's online flag and connection type
and notifies listeners of ``online``, ``offline`` and ``change`` events. The
monitor treats a missing source, or one that cannot report (``None``), as
online.
"""

from typing import Callable, Dict, List, Optional, Protocol

ONLINE = "online"
OFFLINE = "offline"
CHANGE = "change"

CONNECTIVITY_EVENTS = (ONLINE, OFFLINE, CHANGE)

EventListener = Callable[[], None]


class ConnectivitySource(Protocol):
    """Interface for platform connectivity signals."""

    def is_online(self) -> Optional[bool]:
        """Current online flag, or None if the platform cannot report one."""
        ...

    def connection_type(self) -> Optional[str]:
        """Connection type ("wifi", "cellular", ...) or None if unknown."""
        ...

    def add_listener(self, event: str, listener: EventListener) -> None:
        ...

    def remove_listener(self, event: str, listener: EventListener) -> None:
        ...


class ManualConnectivitySource:
    """In-process connectivity source driven by the embedding application.

    Useful where connectivity is learned out of band (an OS hook, a
    supervisor process, a test) and pushed in with ``set_online``.

    Example:
        source = ManualConnectivitySource(online=True, connection_type="wifi")
        monitor = NetworkMonitor(source=source)
        await monitor.start()

        source.set_online(False)  # fires "offline" listeners
    """

    def __init__(
        self, online: Optional[bool] = True, connection_type: Optional[str] = None
    ) -> None:
        self._online = online
        self._connection_type = connection_type
        self._listeners: Dict[str, List[EventListener]] = {
            event: [] for event in CONNECTIVITY_EVENTS
        }

    def is_online(self) -> Optional[bool]:
        return self._online

    def connection_type(self) -> Optional[str]:
        return self._connection_type

    def add_listener(self, event: str, listener: EventListener) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown connectivity event: {event}")
        self._listeners[event].append(listener)

    def remove_listener(self, event: str, listener: EventListener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def set_online(self, online: bool, notify: bool = True) -> None:
        """Update the online flag and fire the matching event on a transition.

        With ``notify=False`` the flag changes silently, as when the platform
        misses a transition and only a later poll notices it.
        """
        changed = online != self._online
        self._online = online
        if changed and notify:
            self._emit(ONLINE if online else OFFLINE)

    def set_connection_type(self, connection_type: Optional[str]) -> None:
        """Update the connection type and fire ``change`` if it differs."""
        changed = connection_type != self._connection_type
        self._connection_type = connection_type
        if changed:
            self._emit(CHANGE)

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners[event]):
            listener()
