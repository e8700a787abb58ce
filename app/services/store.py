"""Dispatch container around a reducer.

A ``Store`` holds the current state of one reducer and applies actions in
dispatch order. Observers run after each committed action with the previous
and next state; actions they dispatch are queued and applied once the current
one has been fully observed, so reductions never interleave.
"""
from collections import deque
from typing import Callable, Deque, Generic, List, TypeVar

from app.core.logging import get_logger

logger = get_logger(__name__)

S = TypeVar("S")

Reducer = Callable[[S, object], S]
Observer = Callable[[S, S, object], None]


class StoreClosedError(RuntimeError):
    """Raised by ``Store.dispatch`` when the store has been closed."""


class Store(Generic[S]):
    """State container with serialised dispatch and change observers.

    Example:
        >>> store = Store(reduce_interactive, InteractiveState(), name="interactive")
        >>> store.dispatch(AddPoints(points=50))
        >>> store.state.gamification.points
        50
    """

    def __init__(self, reducer: Reducer, initial_state: S, name: str = "store"):
        self._reducer = reducer
        self._state = initial_state
        self._observers: List[Observer] = []
        self._pending: Deque[object] = deque()
        self._dispatching = False
        self._closed = False
        self.name = name

    @property
    def state(self) -> S:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it."""
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def dispatch(self, action: object) -> None:
        if self._closed:
            raise StoreClosedError(f"{self.name} store is closed")

        self._pending.append(action)
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._pending and not self._closed:
                self._apply(self._pending.popleft())
        finally:
            self._dispatching = False
            self._pending.clear()

    def close(self) -> None:
        """Stop accepting actions and drop all observers."""
        self._closed = True
        self._observers.clear()
        logger.debug(f"{self.name} store closed")

    def _apply(self, action: object) -> None:
        previous = self._state
        self._state = self._reducer(previous, action)
        if self._state is previous:
            return
        for observer in list(self._observers):
            try:
                observer(previous, self._state, action)
            except Exception as e:
                logger.error(
                    f"{self.name} observer failed: {e}",
                    extra={"action": getattr(action, "type", type(action).__name__)},
                    exc_info=True
                )
