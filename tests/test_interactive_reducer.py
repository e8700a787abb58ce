"""Tests for the interactive state reducer."""
import pytest

from app.domain import actions as a
from app.domain.interactive import (
    Celebration,
    CelebrationType,
    ChatMessage,
    GamificationStats,
    LiveEvent,
    LiveEventType,
)
from app.domain.state import InteractiveState
from app.services.gamification import get_badge_for_milestone
from app.services.interactive_reducer import LIVE_EVENT_CAPACITY, reduce_interactive


def _with_points(points: int) -> InteractiveState:
    stats = GamificationStats(points=points, level=points // 1000 + 1)
    return InteractiveState(gamification=stats)


def _celebrations_of(state: InteractiveState, kind: CelebrationType):
    return [c for c in state.celebrations if c.type == kind]


class TestPoints:
    """Test points, levels and level-up celebrations."""

    def test_points_accumulate(self):
        state = reduce_interactive(InteractiveState(), a.AddPoints(points=100))
        state = reduce_interactive(state, a.AddPoints(points=50))

        assert state.gamification.points == 150
        assert state.gamification.level == 1
        assert state.celebrations == []

    def test_crossing_level_boundary_celebrates_once(self):
        """950 + 100 points reaches level 2 with exactly one level-up celebration."""
        state = reduce_interactive(_with_points(950), a.AddPoints(points=100, celebration_id="c-1"))

        assert state.gamification.points == 1050
        assert state.gamification.level == 2
        level_ups = _celebrations_of(state, CelebrationType.LEVEL_UP)
        assert len(level_ups) == 1
        assert level_ups[0].id == "c-1"
        assert "level 2" in level_ups[0].message

    def test_jumping_several_levels_celebrates_once(self):
        state = reduce_interactive(InteractiveState(), a.AddPoints(points=3500))

        assert state.gamification.level == 4
        assert len(state.celebrations) == 1

    @pytest.mark.parametrize("awards", [[10, 990, 1], [5] * 30, [999, 1, 1000, 2500]])
    def test_level_always_follows_points(self, awards):
        state = InteractiveState()
        for points in awards:
            state = reduce_interactive(state, a.AddPoints(points=points))
            assert state.gamification.level == state.gamification.points // 1000 + 1

    def test_zero_points_is_noop(self):
        initial = InteractiveState()

        assert reduce_interactive(initial, a.AddPoints(points=0)) is initial


class TestStreak:
    """Test streak updates and milestones."""

    def test_streak_milestone_on_seventh_day(self):
        """5 -> 6 does not celebrate, 6 -> 7 does."""
        state = reduce_interactive(InteractiveState(), a.UpdateStreak(streak=5))
        state = reduce_interactive(state, a.UpdateStreak(streak=6))
        assert _celebrations_of(state, CelebrationType.STREAK) == []

        state = reduce_interactive(state, a.UpdateStreak(streak=7))
        streaks = _celebrations_of(state, CelebrationType.STREAK)
        assert len(streaks) == 1
        assert streaks[0].message == "7 days in a row! 🔥"

    def test_repeating_a_milestone_does_not_celebrate_again(self):
        state = reduce_interactive(InteractiveState(), a.UpdateStreak(streak=7))
        state = reduce_interactive(state, a.UpdateStreak(streak=7))

        assert len(state.celebrations) == 1

    def test_streak_stamps_last_activity(self, fixed_time):
        state = reduce_interactive(InteractiveState(), a.UpdateStreak(streak=2, at=fixed_time))

        assert state.gamification.streak == 2
        assert state.gamification.last_activity_date == fixed_time

    def test_reset_to_zero(self):
        state = reduce_interactive(InteractiveState(), a.UpdateStreak(streak=4))
        state = reduce_interactive(state, a.UpdateStreak(streak=0))

        assert state.gamification.streak == 0
        assert state.celebrations == []


class TestBadges:
    """Test badge unlocks."""

    def test_unlock_badge_adds_badge_and_celebration(self):
        badge = get_badge_for_milestone("first_session")
        state = reduce_interactive(InteractiveState(), a.UnlockBadge(badge=badge))

        assert [b.id for b in state.gamification.badges] == ["first_session"]
        achievements = _celebrations_of(state, CelebrationType.ACHIEVEMENT)
        assert len(achievements) == 1
        assert achievements[0].message == "First Steps"

    def test_duplicate_badge_is_ignored(self):
        """Unlocking a badge twice keeps one copy and adds no celebration."""
        state = reduce_interactive(
            InteractiveState(), a.UnlockBadge(badge=get_badge_for_milestone("week_streak"))
        )

        again = reduce_interactive(state, a.UnlockBadge(badge=get_badge_for_milestone("week_streak")))

        assert again is state
        assert len(again.gamification.badges) == 1
        assert len(again.celebrations) == 1


class TestLiveEvents:
    """Test the bounded live event buffer."""

    def test_newest_first(self):
        first = LiveEvent(type=LiveEventType.MENTOR_ONLINE, title="first")
        second = LiveEvent(type=LiveEventType.SESSION_STARTING, title="second")

        state = reduce_interactive(InteractiveState(), a.AddLiveEvent(event=first))
        state = reduce_interactive(state, a.AddLiveEvent(event=second))

        assert [e.title for e in state.live_events] == ["second", "first"]

    def test_buffer_is_capped(self):
        """The twelfth event leaves only the ten most recent."""
        state = InteractiveState()
        for i in range(12):
            event = LiveEvent(type=LiveEventType.NEW_MESSAGE, title=f"event-{i}")
            state = reduce_interactive(state, a.AddLiveEvent(event=event))

        assert len(state.live_events) == LIVE_EVENT_CAPACITY
        assert state.live_events[0].title == "event-11"
        assert state.live_events[-1].title == "event-2"


class TestChat:
    """Test chat messages and typing indicators."""

    @pytest.fixture
    def message(self):
        return ChatMessage(id="m-1", sender_id="user-001", receiver_id="1", message="Namaste")

    def test_mark_read(self, message):
        state = reduce_interactive(InteractiveState(), a.AddChatMessage(message=message))
        state = reduce_interactive(state, a.MarkMessageRead(message_id="m-1"))

        assert state.chat_messages[0].is_read is True

    def test_mark_read_is_idempotent(self, message):
        state = reduce_interactive(InteractiveState(), a.AddChatMessage(message=message))
        state = reduce_interactive(state, a.MarkMessageRead(message_id="m-1"))

        assert reduce_interactive(state, a.MarkMessageRead(message_id="m-1")) is state
        assert reduce_interactive(state, a.MarkMessageRead(message_id="nope")) is state

    def test_typing_indicator(self):
        state = reduce_interactive(InteractiveState(), a.SetTypingIndicator(user_id="1", is_typing=True))
        assert state.typing_indicators == {"1": True}

        state = reduce_interactive(state, a.SetTypingIndicator(user_id="1", is_typing=False))
        assert state.typing_indicators == {"1": False}

    def test_active_chat(self):
        state = reduce_interactive(InteractiveState(), a.SetActiveChat(chat_id="1"))

        assert state.active_chat_id == "1"


class TestCelebrationsAndTutorial:
    """Test manual celebrations, tutorial and bookkeeping actions."""

    def test_add_and_remove_celebration(self):
        celebration = Celebration(id="c-9", type=CelebrationType.SESSION_COMPLETE, title="Done", message="Nice")
        state = reduce_interactive(InteractiveState(), a.AddCelebration(celebration=celebration))
        assert len(state.celebrations) == 1

        state = reduce_interactive(state, a.RemoveCelebration(celebration_id="c-9"))
        assert state.celebrations == []

    def test_remove_missing_celebration_returns_same_state(self):
        initial = InteractiveState()

        assert reduce_interactive(initial, a.RemoveCelebration(celebration_id="x")) is initial

    def test_tutorial(self):
        state = reduce_interactive(InteractiveState(), a.SetTutorialActive(active=True))
        state = reduce_interactive(state, a.SetTutorialStep(step=3))

        assert state.is_tutorial_active is True
        assert state.tutorial_step == 3

    def test_last_interaction(self, fixed_time):
        state = reduce_interactive(InteractiveState(), a.UpdateLastInteraction(at=fixed_time))

        assert state.last_interaction == fixed_time

    def test_session_minutes_accumulate(self):
        state = reduce_interactive(InteractiveState(), a.AddSessionMinutes(minutes=30))
        state = reduce_interactive(state, a.AddSessionMinutes(minutes=15))

        assert state.gamification.total_session_minutes == 45


def test_unknown_action_returns_identical_state():
    initial = InteractiveState()

    assert reduce_interactive(initial, object()) is initial
    assert reduce_interactive(initial, a.ClearIdentity()) is initial
