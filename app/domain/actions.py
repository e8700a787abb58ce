"""Actions accepted by the application and interactive reducers.

Each action is a frozen model tagged by a literal ``type``; the two unions
below are the closed sets each reducer understands. Actions that can enqueue a
celebration carry its id and timestamp so that reducing them stays a pure
function of (state, action).
"""
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from app.domain.interactive import Badge, Celebration, ChatMessage, LiveEvent
from app.domain.mentor import Mentor
from app.domain.session import Session
from app.domain.state import Notification, VoiceRecording
from app.domain.user import Achievement, User
from app.utils.ids import generate_id, utc_now


class Action(BaseModel):
    class Config:
        frozen = True


# -----------------
# APPLICATION ACTIONS
# -----------------

class SetIdentity(Action):
    type: Literal["set_identity"] = "set_identity"
    user: User


class ClearIdentity(Action):
    type: Literal["clear_identity"] = "clear_identity"


class SetMentorDirectory(Action):
    type: Literal["set_mentor_directory"] = "set_mentor_directory"
    mentors: List[Mentor]


class PatchMentor(Action):
    type: Literal["patch_mentor"] = "patch_mentor"
    mentor_id: str
    updates: Dict[str, Any]


class AddSession(Action):
    type: Literal["add_session"] = "add_session"
    session: Session


class PatchSession(Action):
    type: Literal["patch_session"] = "patch_session"
    session_id: str
    updates: Dict[str, Any]


class RemoveSession(Action):
    type: Literal["remove_session"] = "remove_session"
    session_id: str


class AddRecording(Action):
    type: Literal["add_recording"] = "add_recording"
    recording: VoiceRecording


class SetRecordingFlag(Action):
    type: Literal["set_recording_flag"] = "set_recording_flag"
    is_recording: bool


class SetSearchFilters(Action):
    """Only the filters that are not None are changed."""
    type: Literal["set_search_filters"] = "set_search_filters"
    query: Optional[str] = None
    skill: Optional[str] = None
    language: Optional[str] = None


class AddNotification(Action):
    type: Literal["add_notification"] = "add_notification"
    notification: Notification


class RemoveNotification(Action):
    type: Literal["remove_notification"] = "remove_notification"
    notification_id: str


class SetLoading(Action):
    type: Literal["set_loading"] = "set_loading"
    loading: bool


class SetError(Action):
    type: Literal["set_error"] = "set_error"
    error: Optional[str] = None


class AddAchievement(Action):
    type: Literal["add_achievement"] = "add_achievement"
    achievement: Achievement


class SetProgress(Action):
    type: Literal["set_progress"] = "set_progress"
    progress: int = Field(ge=0, le=100)


AppAction = Annotated[
    Union[
        SetIdentity, ClearIdentity, SetMentorDirectory, PatchMentor,
        AddSession, PatchSession, RemoveSession, AddRecording,
        SetRecordingFlag, SetSearchFilters, AddNotification,
        RemoveNotification, SetLoading, SetError, AddAchievement, SetProgress,
    ],
    Field(discriminator="type"),
]


# -----------------
# INTERACTIVE ACTIONS
# -----------------

class AddChatMessage(Action):
    type: Literal["add_chat_message"] = "add_chat_message"
    message: ChatMessage


class MarkMessageRead(Action):
    type: Literal["mark_message_read"] = "mark_message_read"
    message_id: str


class SetTypingIndicator(Action):
    type: Literal["set_typing_indicator"] = "set_typing_indicator"
    user_id: str
    is_typing: bool


class AddPoints(Action):
    type: Literal["add_points"] = "add_points"
    points: int = Field(ge=0)
    celebration_id: str = Field(default_factory=generate_id)
    at: datetime = Field(default_factory=utc_now)


class UpdateStreak(Action):
    type: Literal["update_streak"] = "update_streak"
    streak: int = Field(ge=0)
    celebration_id: str = Field(default_factory=generate_id)
    at: datetime = Field(default_factory=utc_now)


class UnlockBadge(Action):
    type: Literal["unlock_badge"] = "unlock_badge"
    badge: Badge
    celebration_id: str = Field(default_factory=generate_id)
    at: datetime = Field(default_factory=utc_now)


class AddLiveEvent(Action):
    type: Literal["add_live_event"] = "add_live_event"
    event: LiveEvent


class SetActiveChat(Action):
    type: Literal["set_active_chat"] = "set_active_chat"
    chat_id: Optional[str] = None


class AddCelebration(Action):
    type: Literal["add_celebration"] = "add_celebration"
    celebration: Celebration


class RemoveCelebration(Action):
    type: Literal["remove_celebration"] = "remove_celebration"
    celebration_id: str


class SetTutorialStep(Action):
    type: Literal["set_tutorial_step"] = "set_tutorial_step"
    step: int = Field(ge=0)


class SetTutorialActive(Action):
    type: Literal["set_tutorial_active"] = "set_tutorial_active"
    active: bool


class UpdateLastInteraction(Action):
    type: Literal["update_last_interaction"] = "update_last_interaction"
    at: datetime = Field(default_factory=utc_now)


class AddSessionMinutes(Action):
    type: Literal["add_session_minutes"] = "add_session_minutes"
    minutes: int = Field(ge=0)


InteractiveAction = Annotated[
    Union[
        AddChatMessage, MarkMessageRead, SetTypingIndicator, AddPoints,
        UpdateStreak, UnlockBadge, AddLiveEvent, SetActiveChat,
        AddCelebration, RemoveCelebration, SetTutorialStep,
        SetTutorialActive, UpdateLastInteraction, AddSessionMinutes,
    ],
    Field(discriminator="type"),
]
