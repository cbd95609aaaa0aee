"""Observable state holder shared by the executor and the network monitor.

Listeners are called synchronously, in subscription order, every time a new
state is published. A listener that raises is logged and skipped so the
remaining listeners still see the transition.
"""

from typing import Callable, Generic, List, TypeVar

from preppath.logging import get_module_logger

logger = get_module_logger()

StateT = TypeVar("StateT")
Listener = Callable[[StateT], None]


class StatePublisher(Generic[StateT]):
    """Holds the current state snapshot and notifies subscribers on change."""

    def __init__(self, initial: StateT, name: str = "state") -> None:
        self._state = initial
        self._listeners: List[Listener] = []
        self.name = name

    @property
    def state(self) -> StateT:
        return self._state

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, state: StateT) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(
                    "state_listener_failed",
                    publisher=self.name,
                    listener=getattr(listener, "__name__", "unknown"),
                    error=str(e),
                )
