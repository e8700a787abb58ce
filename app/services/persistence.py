"""Mirrors state slices to a key-value store and replays them on start.

Four slices are persisted independently, each under its own key: the signed-in
user, the mentor directory, the session list and the gamification stats.
Hydration goes through ``dispatch`` with ordinary actions, so a restored
workspace is indistinguishable from one that performed the same actions.
Malformed stored data is logged and the slice keeps its default.
"""
from typing import Callable, List, Optional, TypeVar

from pydantic import TypeAdapter

from app.core.logging import get_logger, LogTimer
from app.domain import actions as a
from app.domain.interactive import GamificationStats
from app.domain.mentor import Mentor, default_mentors
from app.domain.session import Session
from app.domain.state import AppState, InteractiveState
from app.domain.user import User
from app.infrastructure.kv_store import KeyValueStore
from app.services.store import Store
from app.utils.ids import utc_now

logger = get_logger(__name__)

T = TypeVar("T")

USER_SLICE = "user"
MENTORS_SLICE = "mentors"
SESSIONS_SLICE = "sessions"
GAMIFICATION_SLICE = "gamification"

_USER = TypeAdapter(User)
_MENTORS = TypeAdapter(List[Mentor])
_SESSIONS = TypeAdapter(List[Session])
_GAMIFICATION = TypeAdapter(GamificationStats)


def _changed(previous, current) -> bool:
    return previous is not current and previous != current


class PersistenceAdapter:
    """Observer that keeps the durable store in step with state slices."""

    def __init__(self, kv_store: KeyValueStore, key_prefix: str = "voicementor_"):
        self.kv_store = kv_store
        self.keys = {
            name: f"{key_prefix}{name}"
            for name in (USER_SLICE, MENTORS_SLICE, SESSIONS_SLICE, GAMIFICATION_SLICE)
        }
        self._unsubscribers: List[Callable[[], None]] = []

    # -----------------
    # WRITING
    # -----------------

    def attach(self, app_store: Store, interactive_store: Store) -> None:
        """Start mirroring slice changes of both stores."""
        self.detach()
        self._unsubscribers = [
            app_store.subscribe(self._on_app_change),
            interactive_store.subscribe(self._on_interactive_change),
        ]

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _on_app_change(self, previous: AppState, current: AppState, action: object) -> None:
        if _changed(previous.user, current.user):
            if current.user is None:
                self.kv_store.delete(self.keys[USER_SLICE])
                logger.debug("Identity cleared from store", extra={"slice": USER_SLICE})
            else:
                self._write(USER_SLICE, _USER.dump_json(current.user, by_alias=True))
        if _changed(previous.mentors, current.mentors):
            self._write(MENTORS_SLICE, _MENTORS.dump_json(current.mentors, by_alias=True))
        if _changed(previous.sessions, current.sessions):
            self._write(SESSIONS_SLICE, _SESSIONS.dump_json(current.sessions, by_alias=True))

    def _on_interactive_change(self, previous: InteractiveState, current: InteractiveState, action: object) -> None:
        if _changed(previous.gamification, current.gamification):
            self._write(GAMIFICATION_SLICE, _GAMIFICATION.dump_json(current.gamification, by_alias=True))

    def _write(self, slice_name: str, payload: bytes) -> None:
        if not self.kv_store.set(self.keys[slice_name], payload.decode("utf-8")):
            logger.warning(f"Could not persist slice '{slice_name}'", extra={"slice": slice_name})

    # -----------------
    # READING
    # -----------------

    def _load(self, slice_name: str, adapter: TypeAdapter) -> Optional[T]:
        key = self.keys[slice_name]
        raw = self.kv_store.get(key)
        if raw is None:
            return None
        try:
            return adapter.validate_json(raw)
        except ValueError as e:
            logger.error(
                f"Ignoring malformed persisted slice '{slice_name}': {e}",
                extra={"slice": slice_name, "key": key},
                exc_info=True
            )
            return None

    def load_user(self) -> Optional[User]:
        return self._load(USER_SLICE, _USER)

    def load_mentors(self) -> Optional[List[Mentor]]:
        return self._load(MENTORS_SLICE, _MENTORS)

    def load_sessions(self) -> Optional[List[Session]]:
        return self._load(SESSIONS_SLICE, _SESSIONS)

    def load_gamification(self) -> Optional[GamificationStats]:
        return self._load(GAMIFICATION_SLICE, _GAMIFICATION)

    def hydrate(self, app_store: Store, interactive_store: Store) -> None:
        """Replay every well-formed persisted slice through ``dispatch``.

        A missing or malformed mentor directory is replaced by the default
        directory; every other missing slice keeps its initial value.
        """
        with LogTimer(logger, "hydrate_workspace"):
            user = self.load_user()
            if user is not None:
                app_store.dispatch(a.SetIdentity(user=user))

            mentors = self.load_mentors()
            if mentors is None:
                logger.info("Seeding default mentor directory")
                mentors = default_mentors()
            app_store.dispatch(a.SetMentorDirectory(mentors=mentors))

            for session in self.load_sessions() or []:
                app_store.dispatch(a.AddSession(session=session))

            stats = self.load_gamification()
            if stats is not None:
                self._replay_gamification(stats, interactive_store)

    @staticmethod
    def _replay_gamification(stats: GamificationStats, interactive_store: Store) -> None:
        interactive_store.dispatch(a.AddPoints(points=stats.points))
        if stats.streak or stats.last_activity_date is not None:
            at = stats.last_activity_date or utc_now()
            interactive_store.dispatch(a.UpdateStreak(streak=stats.streak, at=at))
        for badge in stats.badges:
            interactive_store.dispatch(a.UnlockBadge(badge=badge))
        interactive_store.dispatch(a.AddSessionMinutes(minutes=stats.total_session_minutes))
