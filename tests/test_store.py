"""Tests for the dispatch container."""
import pytest

from app.domain import actions as a
from app.domain.state import InteractiveState
from app.services.interactive_reducer import reduce_interactive
from app.services.store import Store, StoreClosedError


@pytest.fixture
def store():
    return Store(reduce_interactive, InteractiveState(), name="interactive")


class TestDispatch:
    """Test dispatch and observers."""

    def test_dispatch_updates_state(self, store):
        store.dispatch(a.AddPoints(points=50))

        assert store.state.gamification.points == 50

    def test_observer_sees_previous_and_next_state(self, store):
        seen = []
        store.subscribe(lambda prev, cur, action: seen.append((prev.gamification.points, cur.gamification.points, action.type)))

        store.dispatch(a.AddPoints(points=50))

        assert seen == [(0, 50, "add_points")]

    def test_unchanged_state_does_not_notify(self, store):
        seen = []
        store.subscribe(lambda prev, cur, action: seen.append(action))

        store.dispatch(a.RemoveCelebration(celebration_id="missing"))

        assert seen == []

    def test_reentrant_dispatch_is_queued(self, store):
        """An action dispatched by an observer runs after all observers saw the current one."""
        order = []

        def first(prev, cur, action):
            order.append(("first", action.type))
            if isinstance(action, a.AddPoints):
                store.dispatch(a.UpdateStreak(streak=1))

        def second(prev, cur, action):
            order.append(("second", action.type))

        store.subscribe(first)
        store.subscribe(second)
        store.dispatch(a.AddPoints(points=10))

        assert order == [
            ("first", "add_points"),
            ("second", "add_points"),
            ("first", "update_streak"),
            ("second", "update_streak"),
        ]
        assert store.state.gamification.streak == 1

    def test_failing_observer_does_not_stop_others(self, store):
        seen = []

        def broken(prev, cur, action):
            raise RuntimeError("observer bug")

        store.subscribe(broken)
        store.subscribe(lambda prev, cur, action: seen.append(action.type))
        store.dispatch(a.AddPoints(points=10))

        assert seen == ["add_points"]
        assert store.state.gamification.points == 10

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(lambda prev, cur, action: seen.append(action))

        unsubscribe()
        store.dispatch(a.AddPoints(points=10))

        assert seen == []


class TestClose:
    """Test closing the store."""

    def test_dispatch_after_close_raises(self, store):
        store.close()

        assert store.closed
        with pytest.raises(StoreClosedError):
            store.dispatch(a.AddPoints(points=10))

    def test_close_drops_observers(self, store):
        seen = []
        store.subscribe(lambda prev, cur, action: seen.append(action))

        store.close()

        assert seen == []
        assert store.state.gamification.points == 0
