"""State containers owned by the two reducers."""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from pydantic import Field

from app.domain.base import CamelModel
from app.domain.interactive import Celebration, ChatMessage, GamificationStats, LiveEvent
from app.domain.mentor import Mentor
from app.domain.session import Session
from app.domain.user import User
from app.utils.ids import generate_id, utc_now


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class Notification(CamelModel):
    id: str = Field(default_factory=generate_id)
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    timestamp: datetime = Field(default_factory=utc_now)


class VoiceRecording(CamelModel):
    """A finished recording; the audio stays in memory and is never serialised."""
    id: str = Field(default_factory=generate_id)
    audio: bytes = Field(default=b"", exclude=True, repr=False)
    duration: float = Field(default=0.0, ge=0, description="Length in seconds")
    timestamp: datetime = Field(default_factory=utc_now)
    transcription: Optional[str] = None


class SearchFilters(CamelModel):
    query: str = ""
    skill: str = ""
    language: str = ""


class AppState(CamelModel):
    """Identity, mentor directory, sessions and UI bookkeeping."""
    user: Optional[User] = None
    is_authenticated: bool = False
    mentors: List[Mentor] = Field(default_factory=list)
    sessions: List[Session] = Field(default_factory=list)
    voice_recordings: List[VoiceRecording] = Field(default_factory=list)
    is_recording: bool = False
    search: SearchFilters = Field(default_factory=SearchFilters)
    notifications: List[Notification] = Field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None


class InteractiveState(CamelModel):
    """Chat, gamification, live feed and celebrations."""
    chat_messages: List[ChatMessage] = Field(default_factory=list)
    gamification: GamificationStats = Field(default_factory=GamificationStats)
    live_events: List[LiveEvent] = Field(default_factory=list)
    active_chat_id: Optional[str] = None
    typing_indicators: Dict[str, bool] = Field(default_factory=dict)
    celebrations: List[Celebration] = Field(default_factory=list)
    tutorial_step: int = 0
    is_tutorial_active: bool = False
    last_interaction: Optional[datetime] = None
