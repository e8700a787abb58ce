"""Tests for the simulated live feed and mentor replies."""
import random
from unittest.mock import Mock

import pytest

from app.domain import actions as a
from app.domain.interactive import ChatMessage
from app.domain.state import InteractiveState
from app.services.interactive_reducer import reduce_interactive
from app.services.simulation import (
    LIVE_EVENT_TEMPLATES,
    MENTOR_REPLIES,
    LiveEventFeed,
    MentorReplySimulator,
)
from app.services.store import Store


@pytest.fixture
def store():
    return Store(reduce_interactive, InteractiveState(), name="interactive")


class TestLiveEventFeed:
    """Test the periodic live event source."""

    def test_tick_below_probability_adds_event(self, store, scheduler):
        rng = Mock()
        rng.random.return_value = 0.1
        rng.choice.side_effect = lambda seq: seq[0]
        feed = LiveEventFeed(store, scheduler, probability=0.3, rng=rng)

        event = feed.tick()

        assert event is not None
        assert event.title == LIVE_EVENT_TEMPLATES[0]["title"]
        assert store.state.live_events == [event]

    def test_tick_above_probability_adds_nothing(self, store, scheduler):
        rng = Mock()
        rng.random.return_value = 0.3
        feed = LiveEventFeed(store, scheduler, probability=0.3, rng=rng)

        assert feed.tick() is None
        assert store.state.live_events == []

    def test_runs_every_interval(self, store, scheduler):
        feed = LiveEventFeed(store, scheduler, interval=10, probability=1.0, rng=random.Random(7))
        feed.start()

        scheduler.advance(35)

        assert len(store.state.live_events) == 3
        assert feed.running

    def test_stop_cancels_timer(self, store, scheduler):
        feed = LiveEventFeed(store, scheduler, interval=10, probability=1.0, rng=random.Random(7))
        feed.start()
        feed.stop()

        scheduler.advance(100)

        assert store.state.live_events == []
        assert not feed.running

    def test_feed_never_exceeds_buffer(self, store, scheduler):
        feed = LiveEventFeed(store, scheduler, interval=1, probability=1.0, rng=random.Random(7))
        feed.start()

        scheduler.advance(50)

        assert len(store.state.live_events) == 10


class TestMentorReplySimulator:
    """Test canned mentor replies."""

    @pytest.fixture
    def simulator(self, store, scheduler):
        names = {"1": "Priya Singh"}
        sim = MentorReplySimulator(
            store,
            scheduler,
            current_user_id=lambda: "user-001",
            mentor_name=names.get,
            min_delay=2.0,
            max_delay=5.0,
            rng=random.Random(3),
        )
        sim.attach()
        return sim

    def _send(self, store, receiver_id="1", sender_id="user-001"):
        message = ChatMessage(sender_id=sender_id, receiver_id=receiver_id, message="How do I start?")
        store.dispatch(a.AddChatMessage(message=message))
        return message

    def test_reply_arrives_after_delay(self, store, scheduler, simulator):
        message = self._send(store)

        assert store.state.typing_indicators == {"1": True}
        scheduler.advance(1.9)
        assert len(store.state.chat_messages) == 1

        scheduler.advance(3.2)

        assert store.state.typing_indicators == {"1": False}
        reply = store.state.chat_messages[-1]
        assert reply.sender_id == "1"
        assert reply.sender_name == "Priya Singh"
        assert reply.receiver_id == message.sender_id
        assert reply.message in MENTOR_REPLIES
        assert simulator.pending == 0

    def test_unknown_mentor_gets_no_reply(self, store, scheduler, simulator):
        self._send(store, receiver_id="99")

        scheduler.advance(10)

        assert len(store.state.chat_messages) == 1
        assert store.state.typing_indicators == {}

    def test_mentor_replies_do_not_trigger_replies(self, store, scheduler, simulator):
        self._send(store)
        scheduler.advance(10)

        assert len(store.state.chat_messages) == 2
        assert simulator.pending == 0

    def test_cancel_all_drops_pending_reply(self, store, scheduler, simulator):
        self._send(store)

        simulator.cancel_all()
        scheduler.advance(10)

        assert len(store.state.chat_messages) == 1

    def test_cancel_all_clears_typing_indicator(self, store, scheduler, simulator):
        self._send(store)
        self._send(store)
        assert store.state.typing_indicators == {"1": True}

        simulator.cancel_all()

        assert store.state.typing_indicators == {"1": False}
        assert simulator.pending == 0

    def test_cancel_all_after_close_leaves_store_alone(self, store, scheduler, simulator):
        self._send(store)
        store.close()

        simulator.cancel_all()

        assert simulator.pending == 0
        assert store.state.typing_indicators == {"1": True}
