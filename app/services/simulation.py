"""Timer-driven stand-ins for a real-time transport.

``LiveEventFeed`` occasionally injects a canned live event and
``MentorReplySimulator`` answers the user's chat messages on the mentor's
behalf. Both only ever talk to the interactive store through ``dispatch`` with
the same actions any other event source would use, so a push channel can
replace them without touching the reducer.
"""
import random
from typing import Callable, Dict, List, Optional, Tuple

from app.core.logging import get_logger
from app.domain import actions as a
from app.domain.interactive import ChatMessage, LiveEvent, LiveEventType
from app.domain.state import InteractiveState
from app.infrastructure.scheduler import Scheduler, TaskHandle
from app.services.store import Store

logger = get_logger(__name__)

LIVE_EVENT_TEMPLATES: List[Dict[str, object]] = [
    {
        "type": LiveEventType.MENTOR_ONLINE,
        "title": "Mentor Online",
        "description": "Priya Singh is now available for sessions",
    },
    {
        "type": LiveEventType.SESSION_STARTING,
        "title": "Session Reminder",
        "description": "Your session starts in 15 minutes",
    },
]

MENTOR_REPLIES: List[str] = [
    "That's a great question! Let me explain...",
    "I understand what you're asking. Here's my approach:",
    "Excellent! You're making good progress.",
    "Let me share a quick tip that might help:",
    "I can help you with that. Let's break it down:",
    "Good thinking! Have you considered...",
    "मैं समझ गया। आइए इसे step by step करते हैं।",
    "Perfect! That's exactly the right approach.",
]


class LiveEventFeed:
    """Every ``interval`` seconds, with probability ``probability``, add a live event."""

    def __init__(
        self,
        store: Store,
        scheduler: Scheduler,
        interval: float = 10.0,
        probability: float = 0.3,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.scheduler = scheduler
        self.interval = interval
        self.probability = probability
        self.rng = rng or random.Random()
        self._handle: Optional[TaskHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None and not self._handle.cancelled

    def start(self) -> None:
        if self.running:
            return
        self._handle = self.scheduler.call_every(self.interval, self.tick)
        logger.info(f"Live feed started (every {self.interval}s, p={self.probability})")

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.info("Live feed stopped")

    def tick(self) -> Optional[LiveEvent]:
        """Run one Bernoulli trial; returns the dispatched event, if any."""
        if self.store.closed or self.rng.random() >= self.probability:
            return None
        template = self.rng.choice(LIVE_EVENT_TEMPLATES)
        event = LiveEvent(**template)
        self.store.dispatch(a.AddLiveEvent(event=event))
        return event


class MentorReplySimulator:
    """Answers the signed-in user's messages with a canned mentor reply.

    When the user sends a message to a mentor, the mentor's typing indicator
    is switched on; after a random delay it is switched off again and a reply
    from that mentor is added.
    """

    def __init__(
        self,
        store: Store,
        scheduler: Scheduler,
        current_user_id: Callable[[], Optional[str]],
        mentor_name: Callable[[str], Optional[str]],
        min_delay: float = 2.0,
        max_delay: float = 5.0,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.scheduler = scheduler
        self.current_user_id = current_user_id
        self.mentor_name = mentor_name
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.rng = rng or random.Random()
        # message id -> (reply timer, mentor shown as typing)
        self._pending: Dict[str, Tuple[TaskHandle, str]] = {}
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.cancel_all()

    def cancel_all(self) -> None:
        """Drop every pending reply and switch its mentor's typing indicator off."""
        typing = {mentor_id for _, mentor_id in self._pending.values()}
        for handle, _ in self._pending.values():
            handle.cancel()
        self._pending.clear()
        if self.store.closed:
            return
        for mentor_id in sorted(typing):
            self.store.dispatch(a.SetTypingIndicator(user_id=mentor_id, is_typing=False))

    def _on_change(self, previous: InteractiveState, current: InteractiveState, action: object) -> None:
        if not isinstance(action, a.AddChatMessage):
            return
        message = action.message
        user_id = self.current_user_id()
        if user_id is None or message.sender_id != user_id:
            return
        if self.mentor_name(message.receiver_id) is None:
            return
        self._schedule_reply(message)

    def _schedule_reply(self, message: ChatMessage) -> None:
        mentor_id = message.receiver_id
        self.store.dispatch(a.SetTypingIndicator(user_id=mentor_id, is_typing=True))
        delay = self.rng.uniform(self.min_delay, self.max_delay)
        handle = self.scheduler.call_later(delay, lambda: self._reply(message))
        self._pending[message.id] = (handle, mentor_id)

    def _reply(self, message: ChatMessage) -> None:
        self._pending.pop(message.id, None)
        if self.store.closed:
            return
        mentor_id = message.receiver_id
        self.store.dispatch(a.SetTypingIndicator(user_id=mentor_id, is_typing=False))
        reply = ChatMessage(
            sender_id=mentor_id,
            sender_name=self.mentor_name(mentor_id) or "",
            receiver_id=message.sender_id,
            message=self.rng.choice(MENTOR_REPLIES),
        )
        self.store.dispatch(a.AddChatMessage(message=reply))
        logger.debug("Mentor reply delivered", extra={"mentor_id": mentor_id})
