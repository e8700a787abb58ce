"""Tests for mirroring state slices to the key-value store."""
import json

import pytest

from app.domain import actions as a
from app.domain.session import Session
from app.domain.state import AppState, InteractiveState
from app.infrastructure.kv_store import InMemoryKeyValueStore
from app.services.app_reducer import reduce_app
from app.services.gamification import get_badge_for_milestone
from app.services.interactive_reducer import reduce_interactive
from app.services.persistence import PersistenceAdapter
from app.services.store import Store


def _stores():
    return (
        Store(reduce_app, AppState(), name="app"),
        Store(reduce_interactive, InteractiveState(), name="interactive"),
    )


@pytest.fixture
def adapter(kv_store):
    return PersistenceAdapter(kv_store)


@pytest.fixture
def attached(adapter):
    app_store, interactive_store = _stores()
    adapter.attach(app_store, interactive_store)
    return app_store, interactive_store


class TestWriting:
    """Test that slice changes are written under their keys."""

    def test_user_written_with_camel_case_keys(self, attached, kv_store, mock_user):
        app_store, _ = attached

        app_store.dispatch(a.SetIdentity(user=mock_user))

        stored = json.loads(kv_store.get("voicementor_user"))
        assert stored["id"] == "user-001"
        assert "joinedDate" in stored

    def test_sign_out_deletes_user_key(self, attached, kv_store, mock_user):
        app_store, _ = attached
        app_store.dispatch(a.SetIdentity(user=mock_user))

        app_store.dispatch(a.ClearIdentity())

        assert "voicementor_user" not in kv_store

    def test_gamification_written_on_points(self, attached, kv_store):
        _, interactive_store = attached

        interactive_store.dispatch(a.AddPoints(points=120))

        stored = json.loads(kv_store.get("voicementor_gamification"))
        assert stored["points"] == 120
        assert stored["level"] == 1

    def test_unrelated_change_writes_nothing(self, attached, kv_store):
        _, interactive_store = attached

        interactive_store.dispatch(a.SetTutorialStep(step=2))

        assert "voicementor_gamification" not in kv_store

    def test_detach_stops_writing(self, adapter, attached, kv_store):
        _, interactive_store = attached
        adapter.detach()

        interactive_store.dispatch(a.AddPoints(points=10))

        assert "voicementor_gamification" not in kv_store

    def test_custom_key_prefix(self, kv_store):
        adapter = PersistenceAdapter(kv_store, key_prefix="vm_")
        app_store, interactive_store = _stores()
        adapter.attach(app_store, interactive_store)

        interactive_store.dispatch(a.AddPoints(points=10))

        assert "vm_gamification" in kv_store


class TestHydration:
    """Test replaying persisted slices on start."""

    def test_round_trip(self, attached, adapter, kv_store, mock_user, fixed_time):
        """A fresh workspace restored from the store matches the one that wrote it."""
        app_store, interactive_store = attached
        app_store.dispatch(a.SetIdentity(user=mock_user))
        app_store.dispatch(a.SetMentorDirectory(mentors=[]))
        app_store.dispatch(a.AddSession(session=Session(mentor_id="1", scheduled_time=fixed_time)))
        interactive_store.dispatch(a.AddPoints(points=1200))
        interactive_store.dispatch(a.UpdateStreak(streak=3, at=fixed_time))
        interactive_store.dispatch(a.UnlockBadge(badge=get_badge_for_milestone("first_session")))
        interactive_store.dispatch(a.AddSessionMinutes(minutes=45))

        fresh_app, fresh_interactive = _stores()
        PersistenceAdapter(kv_store).hydrate(fresh_app, fresh_interactive)

        assert fresh_app.state.user == mock_user
        assert fresh_app.state.is_authenticated is True
        assert fresh_app.state.sessions == app_store.state.sessions
        assert fresh_interactive.state.gamification == interactive_store.state.gamification

    def test_missing_mentors_are_seeded(self, adapter):
        app_store, interactive_store = _stores()

        adapter.hydrate(app_store, interactive_store)

        assert [m.id for m in app_store.state.mentors] == ["1", "2", "3", "4", "5", "6"]
        assert app_store.state.user is None

    def test_malformed_slices_are_ignored(self, mock_user):
        kv_store = InMemoryKeyValueStore({
            "voicementor_user": mock_user.model_dump_json(by_alias=True),
            "voicementor_mentors": "{not json",
            "voicementor_sessions": '[{"id": "s-1"}]',
            "voicementor_gamification": '{"points": -5}',
        })
        app_store, interactive_store = _stores()

        PersistenceAdapter(kv_store).hydrate(app_store, interactive_store)

        assert app_store.state.user == mock_user
        assert len(app_store.state.mentors) == 6
        assert app_store.state.sessions == []
        assert interactive_store.state.gamification.points == 0

    def test_hydration_goes_through_dispatch(self, kv_store, mock_user):
        kv_store.set("voicementor_user", mock_user.model_dump_json(by_alias=True))
        app_store, interactive_store = _stores()
        seen = []
        app_store.subscribe(lambda prev, cur, action: seen.append(action.type))

        PersistenceAdapter(kv_store).hydrate(app_store, interactive_store)

        assert seen == ["set_identity", "set_mentor_directory"]
