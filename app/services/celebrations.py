"""Automatic removal of celebrations once their duration has elapsed."""
from typing import Callable, Dict, Optional

from app.core.logging import get_logger
from app.domain.actions import RemoveCelebration
from app.domain.interactive import Celebration
from app.domain.state import InteractiveState
from app.infrastructure.scheduler import Scheduler, TaskHandle
from app.services.store import Store

logger = get_logger(__name__)


class CelebrationExpiry:
    """Schedules a RemoveCelebration for every celebration with a positive duration.

    Celebrations with a duration of zero or less stay until dismissed. A
    celebration dismissed before it expires has its timer cancelled.
    """

    def __init__(self, store: Store, scheduler: Scheduler):
        self.store = store
        self.scheduler = scheduler
        self._timers: Dict[str, TaskHandle] = {}
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> int:
        return len(self._timers)

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_change)
        for celebration in self.store.state.celebrations:
            self._schedule(celebration)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.cancel_all()

    def cancel_all(self) -> None:
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    def _on_change(self, previous: InteractiveState, current: InteractiveState, action: object) -> None:
        if previous.celebrations is current.celebrations:
            return
        current_ids = {c.id for c in current.celebrations}
        for celebration_id in [cid for cid in self._timers if cid not in current_ids]:
            self._timers.pop(celebration_id).cancel()
        for celebration in current.celebrations:
            self._schedule(celebration)

    def _schedule(self, celebration: Celebration) -> None:
        if not celebration.auto_expires or celebration.id in self._timers:
            return
        self._timers[celebration.id] = self.scheduler.call_later(
            celebration.duration / 1000,
            lambda: self._expire(celebration.id),
        )

    def _expire(self, celebration_id: str) -> None:
        self._timers.pop(celebration_id, None)
        if self.store.closed:
            return
        logger.debug(f"Celebration expired: {celebration_id}")
        self.store.dispatch(RemoveCelebration(celebration_id=celebration_id))
