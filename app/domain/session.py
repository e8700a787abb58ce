"""Domain models for mentorship sessions and their lifecycle."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import Field, field_validator

from app.domain.base import CamelModel
from app.utils.ids import generate_id, utc_now


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionType(str, Enum):
    VOICE = "voice"
    VIDEO = "video"
    CHAT = "chat"


# Forward-only lifecycle; every state except cancelled may move to cancelled.
ALLOWED_TRANSITIONS = {
    SessionStatus.SCHEDULED: {SessionStatus.ONGOING, SessionStatus.CANCELLED},
    SessionStatus.ONGOING: {SessionStatus.COMPLETED, SessionStatus.CANCELLED},
    SessionStatus.COMPLETED: {SessionStatus.CANCELLED},
    SessionStatus.CANCELLED: set(),
}


class Session(CamelModel):
    """A scheduled or running mentorship engagement.

    ``user_id`` is optional because sessions held in the workspace belong to
    the signed-in user implicitly; the REST service requires it.
    """
    id: str = Field(default_factory=generate_id)
    mentor_id: str
    mentor_name: str = ""
    user_id: Optional[str] = None
    skill: str = ""
    scheduled_time: datetime
    duration: int = Field(default=30, ge=0, description="Length in minutes")
    status: SessionStatus = SessionStatus.SCHEDULED
    type: SessionType = SessionType.VOICE
    notes: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("scheduled_time", "created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive and aware timestamps must stay comparable for sorting.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def can_transition_to(self, status: SessionStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]


class EndSessionRequest(CamelModel):
    """Completion details attached when a session ends."""
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    notes: Optional[str] = None
