"""The interactive workspace: both reducers and everything observing them.

A ``Workspace`` wires the application and interactive stores to the
persistence adapter, the celebration expiry observer, the mentor reply
simulator and the live feed, and offers the operations the UI performs as
plain methods that build and dispatch actions.

Lifecycle:
    start()     hydrate persisted slices, then start observers and the feed
    sign_out()  clear identity and celebrations, cancel user-scoped timers
    shutdown()  cancel every timer and close both stores
"""
import random
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import ValidationError

from app.core.config import Settings
from app.core.errors import NotFound, ValidationFailed, VoiceMentorError
from app.core.logging import get_logger
from app.domain import actions as a
from app.domain.interactive import Badge, ChatMessage, MessageType
from app.domain.mentor import Mentor, MentorStatusUpdate
from app.domain.session import Session, SessionType
from app.domain.state import AppState, InteractiveState, Notification, NotificationType, VoiceRecording
from app.domain.user import Achievement, User
from app.infrastructure.kv_store import KeyValueStore
from app.infrastructure.scheduler import Scheduler
from app.services import gamification as rules
from app.services.app_reducer import reduce_app
from app.services.celebrations import CelebrationExpiry
from app.services.interactive_reducer import reduce_interactive
from app.services.mentorship import check_transition
from app.services.persistence import PersistenceAdapter
from app.services.simulation import LiveEventFeed, MentorReplySimulator
from app.services.store import Store
from app.utils.text import sanitize_text

logger = get_logger(__name__)


class Workspace:
    def __init__(
        self,
        kv_store: KeyValueStore,
        scheduler: Scheduler,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        settings = settings or Settings()
        rng = rng or random.Random()
        self.settings = settings
        self.scheduler = scheduler

        self.app_store: Store[AppState] = Store(reduce_app, AppState(), name="app")
        self.interactive_store: Store[InteractiveState] = Store(
            reduce_interactive, InteractiveState(), name="interactive"
        )
        self.persistence = PersistenceAdapter(kv_store, key_prefix=settings.persistence_key_prefix)
        self.celebrations = CelebrationExpiry(self.interactive_store, scheduler)
        self.replies = MentorReplySimulator(
            self.interactive_store,
            scheduler,
            current_user_id=lambda: self.user.id if self.user else None,
            mentor_name=lambda mentor_id: getattr(self.find_mentor(mentor_id), "name", None),
            min_delay=settings.mentor_reply_min_delay,
            max_delay=settings.mentor_reply_max_delay,
            rng=rng,
        )
        self.feed = LiveEventFeed(
            self.interactive_store,
            scheduler,
            interval=settings.live_feed_interval_seconds,
            probability=settings.live_feed_probability,
            rng=rng,
        )
        self._started = False

    # -----------------
    # STATE ACCESS
    # -----------------

    @property
    def app_state(self) -> AppState:
        return self.app_store.state

    @property
    def interactive_state(self) -> InteractiveState:
        return self.interactive_store.state

    @property
    def user(self) -> Optional[User]:
        return self.app_state.user

    def find_mentor(self, mentor_id: str) -> Optional[Mentor]:
        return next((m for m in self.app_state.mentors if m.id == mentor_id), None)

    # -----------------
    # LIFECYCLE
    # -----------------

    def start(self) -> None:
        if self._started:
            return
        self.app_store.dispatch(a.SetLoading(loading=True))
        self.persistence.attach(self.app_store, self.interactive_store)
        self.persistence.hydrate(self.app_store, self.interactive_store)
        self.app_store.dispatch(a.SetLoading(loading=False))
        self.celebrations.attach()
        if self.settings.mentor_reply_enabled:
            self.replies.attach()
        if self.settings.live_feed_enabled:
            self.feed.start()
        self._started = True
        logger.info("Workspace started")

    def shutdown(self) -> None:
        self.feed.stop()
        self.replies.detach()
        self.celebrations.detach()
        self.persistence.detach()
        self.app_store.close()
        self.interactive_store.close()
        self._started = False
        logger.info("Workspace shut down")

    # -----------------
    # IDENTITY
    # -----------------

    def sign_in(self, user: User) -> None:
        self.app_store.dispatch(a.SetIdentity(user=user))
        self.interactive_store.dispatch(a.UpdateLastInteraction())
        logger.info("User signed in", extra={"user_id": user.id})

    def sign_out(self) -> None:
        self.replies.cancel_all()
        for celebration in list(self.interactive_state.celebrations):
            self.interactive_store.dispatch(a.RemoveCelebration(celebration_id=celebration.id))
        self.celebrations.cancel_all()
        user_id = self.user.id if self.user else None
        self.app_store.dispatch(a.ClearIdentity())
        logger.info("User signed out", extra={"user_id": user_id})

    def notify(self, title: str, message: str, kind: NotificationType = NotificationType.INFO) -> Notification:
        notification = Notification(title=title, message=message, type=kind)
        self.app_store.dispatch(a.AddNotification(notification=notification))
        return notification

    def dismiss_notification(self, notification_id: str) -> bool:
        if not any(n.id == notification_id for n in self.app_state.notifications):
            return False
        self.app_store.dispatch(a.RemoveNotification(notification_id=notification_id))
        return True

    def _reject(self, title: str, exc: VoiceMentorError) -> VoiceMentorError:
        """Surface a failed operation to the UI; returns ``exc`` for the caller to raise."""
        self.app_store.dispatch(a.SetError(error=exc.message))
        self.notify(title, exc.message, NotificationType.ERROR)
        return exc

    def _require_user(self, title: str, message: str) -> User:
        if self.user is None:
            raise self._reject(title, ValidationFailed(message))
        return self.user

    def _require_mentor(self, title: str, mentor_id: str) -> Mentor:
        mentor = self.find_mentor(mentor_id)
        if mentor is None:
            raise self._reject(title, NotFound("Mentor not found"))
        return mentor

    # -----------------
    # PROFILE
    # -----------------

    def advance_progress(self, step: int = 10) -> int:
        """Move the signed-in user's progress forward, capped at 100."""
        user = self._require_user("Progress Update Failed", "Sign in to track progress")
        progress = min(user.progress + step, 100)
        self.app_store.dispatch(a.SetProgress(progress=progress))
        self.notify(
            "Progress Updated!",
            f"Great job! You're now at {progress}% completion.",
            NotificationType.SUCCESS,
        )
        return progress

    def add_achievement(self, title: str, description: str = "", icon: str = "", color: str = "") -> Achievement:
        self._require_user("Achievement Failed", "Sign in to earn achievements")
        achievement = Achievement(title=title, description=description, icon=icon, color=color)
        self.app_store.dispatch(a.AddAchievement(achievement=achievement))
        self.notify("Achievement Unlocked!", title, NotificationType.SUCCESS)
        return achievement

    # -----------------
    # MENTORS
    # -----------------

    def set_search_filters(
        self,
        query: Optional[str] = None,
        skill: Optional[str] = None,
        language: Optional[str] = None,
    ) -> None:
        """Change the supplied filters; omitted ones keep their value."""
        self.app_store.dispatch(a.SetSearchFilters(query=query, skill=skill, language=language))

    def sync_mentor_status(self, mentor_id: str, update: MentorStatusUpdate) -> None:
        """Mirror a directory presence change into the workspace copy."""
        changes = update.model_dump(exclude_none=True)
        if changes:
            self.app_store.dispatch(a.PatchMentor(mentor_id=mentor_id, updates=changes))

    def connect_mentor(self, mentor_id: str) -> Mentor:
        """Bring a mentor online for a voice call with the user."""
        self._require_mentor("Connection Failed", mentor_id)
        self.app_store.dispatch(a.PatchMentor(mentor_id=mentor_id, updates={"is_online": True}))
        self.notify("Connecting...", "Connecting you with your mentor")
        self.record_activity("mentor_connect")
        return self.find_mentor(mentor_id)

    # -----------------
    # SESSIONS
    # -----------------

    def find_session(self, session_id: str) -> Optional[Session]:
        return next((s for s in self.app_state.sessions if s.id == session_id), None)

    def book_session(
        self,
        mentor_id: str,
        scheduled_time: datetime,
        kind: SessionType = SessionType.VOICE,
        skill: Optional[str] = None,
        duration: int = 30,
    ) -> Session:
        """Schedule a session between the signed-in user and a mentor."""
        user = self._require_user("Booking Failed", "Sign in before booking a session")
        mentor = self._require_mentor("Booking Failed", mentor_id)
        session = Session(
            mentor_id=mentor.id,
            mentor_name=mentor.name,
            user_id=user.id,
            skill=skill or mentor.skill,
            scheduled_time=scheduled_time,
            duration=duration,
            type=kind,
        )
        self.app_store.dispatch(a.AddSession(session=session))
        self.notify("Session Booked", f"Session with {mentor.name} scheduled", NotificationType.SUCCESS)
        logger.info("Workspace session booked", extra={"session_id": session.id, "mentor_id": mentor.id})
        return session

    def update_session(self, session_id: str, updates: Dict[str, Any]) -> Session:
        """Apply a partial edit; status changes must follow the session lifecycle."""
        current = self.find_session(session_id)
        if current is None:
            raise self._reject("Update Failed", NotFound("Session not found"))
        updates = {k: v for k, v in updates.items() if k != "id"}
        try:
            session = current.merged(updates, strict=True)
        except ValidationError as e:
            raise self._reject("Update Failed", ValidationFailed("Invalid session data", error=str(e)))
        try:
            check_transition(current, session)
        except VoiceMentorError as exc:
            raise self._reject("Update Failed", exc)
        self.app_store.dispatch(a.PatchSession(
            session_id=session_id,
            updates=session.model_dump(exclude={"id"}),
        ))
        return self.find_session(session_id)

    def cancel_session(self, session_id: str) -> Session:
        session = self.find_session(session_id)
        if session is None:
            raise self._reject("Cancellation Failed", NotFound("Session not found"))
        self.app_store.dispatch(a.RemoveSession(session_id=session_id))
        self.notify("Session Cancelled", f"Session with {session.mentor_name or 'your mentor'} cancelled")
        return session

    # -----------------
    # VOICE
    # -----------------

    def start_recording(self) -> None:
        self.app_store.dispatch(a.SetRecordingFlag(is_recording=True))
        self.notify("Recording Started", "Speak now, your voice is being recorded")

    def save_recording(self, duration: float, transcription: Optional[str] = None, audio: bytes = b"") -> VoiceRecording:
        """Store a finished recording and stop the recording flag."""
        recording = VoiceRecording(duration=duration, transcription=transcription, audio=audio)
        self.app_store.dispatch(a.AddRecording(recording=recording))
        self.app_store.dispatch(a.SetRecordingFlag(is_recording=False))
        self.notify(
            "Recording Saved",
            f"Voice recording ({duration:.1f}s) saved successfully",
            NotificationType.SUCCESS,
        )
        self.record_activity("voice_recording")
        return recording

    # -----------------
    # TUTORIAL
    # -----------------

    def start_tutorial(self) -> None:
        self.interactive_store.dispatch(a.SetTutorialStep(step=0))
        self.interactive_store.dispatch(a.SetTutorialActive(active=True))

    def set_tutorial_step(self, step: int) -> None:
        self.interactive_store.dispatch(a.SetTutorialStep(step=step))

    def end_tutorial(self) -> None:
        self.interactive_store.dispatch(a.SetTutorialActive(active=False))

    # -----------------
    # GAMIFICATION
    # -----------------

    def record_activity(self, activity_type: str) -> int:
        """Award the points an activity is worth; returns the points awarded."""
        points = rules.calculate_points_for_activity(activity_type)
        if points:
            self.interactive_store.dispatch(a.AddPoints(points=points))
        return points

    def update_streak(self, streak: int) -> None:
        self.interactive_store.dispatch(a.UpdateStreak(streak=streak))

    def unlock_milestone(self, milestone: str) -> Badge:
        badge = rules.get_badge_for_milestone(milestone)
        if badge is None:
            raise NotFound(f"Unknown milestone '{milestone}'")
        self.interactive_store.dispatch(a.UnlockBadge(badge=badge))
        return badge

    def complete_challenge(self, challenge_id: str) -> rules.DailyChallenge:
        challenge = rules.DAILY_CHALLENGES.get(challenge_id)
        if challenge is None:
            raise NotFound(f"Unknown challenge '{challenge_id}'")
        self.interactive_store.dispatch(a.AddPoints(points=challenge.points))
        self.interactive_store.dispatch(
            a.AddCelebration(celebration=rules.challenge_celebration(challenge))
        )
        return challenge

    def log_session_minutes(self, minutes: int) -> None:
        self.interactive_store.dispatch(a.AddSessionMinutes(minutes=minutes))

    def dismiss_celebration(self, celebration_id: str) -> bool:
        if not any(c.id == celebration_id for c in self.interactive_state.celebrations):
            return False
        self.interactive_store.dispatch(a.RemoveCelebration(celebration_id=celebration_id))
        return True

    # -----------------
    # CHAT
    # -----------------

    def send_message(self, mentor_id: str, text: str, kind: MessageType = MessageType.TEXT) -> ChatMessage:
        """Send a chat message from the signed-in user to a known mentor."""
        user = self._require_user("Message Not Sent", "Sign in before sending messages")
        self._require_mentor("Message Not Sent", mentor_id)
        text = sanitize_text(text)
        if not text:
            raise self._reject("Message Not Sent", ValidationFailed("Message is empty"))

        message = ChatMessage(
            sender_id=user.id,
            sender_name=user.name,
            receiver_id=mentor_id,
            message=text,
            type=kind,
        )
        self.interactive_store.dispatch(a.AddChatMessage(message=message))
        self.record_activity("message_sent")
        return message

    def set_active_chat(self, chat_id: Optional[str]) -> None:
        self.interactive_store.dispatch(a.SetActiveChat(chat_id=chat_id))

    def mark_read(self, message_id: str) -> None:
        if not any(m.id == message_id for m in self.interactive_state.chat_messages):
            raise NotFound("Message not found")
        self.interactive_store.dispatch(a.MarkMessageRead(message_id=message_id))
