"""Routes driving the interactive workspace of this process.

These handlers are ``async`` on purpose: they run on the event loop, as do the
workspace timers, so every dispatch into the stores is serialised.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import Field

from app.api.responses import from_error, internal_error, ok
from app.api.routes import get_user_service, get_workspace
from app.core.errors import NotFound, VoiceMentorError
from app.core.logging import get_logger
from app.domain.base import CamelModel
from app.domain.interactive import MessageType
from app.domain.session import SessionType
from app.domain.user import LoginRequest
from app.services.mentorship import UserService
from app.services.workspace import Workspace

logger = get_logger(__name__)
router = APIRouter(prefix="/workspace")


class ActivityRequest(CamelModel):
    activity: str


class StreakRequest(CamelModel):
    streak: int = Field(ge=0)


class MessageRequest(CamelModel):
    """Incoming chat message from the UI."""
    mentor_id: str
    message: str
    type: MessageType = MessageType.TEXT


class BookingRequest(CamelModel):
    mentor_id: str
    scheduled_time: datetime
    type: SessionType = SessionType.VOICE
    skill: Optional[str] = None
    duration: int = Field(default=30, ge=0)


class ProgressRequest(CamelModel):
    step: int = Field(default=10, ge=0)


class AchievementRequest(CamelModel):
    title: str = Field(min_length=1)
    description: str = ""
    icon: str = ""
    color: str = ""


class SearchRequest(CamelModel):
    query: Optional[str] = None
    skill: Optional[str] = None
    language: Optional[str] = None


class RecordingRequest(CamelModel):
    duration: float = Field(ge=0)
    transcription: Optional[str] = None


class ActiveChatRequest(CamelModel):
    chat_id: Optional[str] = None


class TutorialRequest(CamelModel):
    """``active`` starts or ends the tutorial; ``step`` moves it."""
    active: Optional[bool] = None
    step: Optional[int] = Field(default=None, ge=0)


@router.get("/state")
async def workspace_state(workspace: Workspace = Depends(get_workspace)):
    try:
        return ok({
            "app": workspace.app_state.to_wire(),
            "interactive": workspace.interactive_state.to_wire(),
        })
    except Exception as exc:
        logger.error(f"Failed to read workspace state: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/sign-in")
async def sign_in(
    req: LoginRequest,
    workspace: Workspace = Depends(get_workspace),
    users: UserService = Depends(get_user_service),
):
    """Sign a registered user into the workspace by phone number."""
    try:
        user = users.login(req.phone)
        workspace.sign_in(user)
        return ok(user, message="Signed in")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Workspace sign-in failed: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/sign-out")
async def sign_out(workspace: Workspace = Depends(get_workspace)):
    try:
        workspace.sign_out()
        return ok(message="Signed out")
    except Exception as exc:
        logger.error(f"Workspace sign-out failed: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/activities")
async def record_activity(req: ActivityRequest, workspace: Workspace = Depends(get_workspace)):
    """Award the points an activity is worth (0 for unknown activities)."""
    try:
        awarded = workspace.record_activity(req.activity)
        return ok({"awarded": awarded, "gamification": workspace.interactive_state.gamification.to_wire()})
    except Exception as exc:
        logger.error(f"Failed to record activity {req.activity}: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/streak")
async def update_streak(req: StreakRequest, workspace: Workspace = Depends(get_workspace)):
    try:
        workspace.update_streak(req.streak)
        return ok(workspace.interactive_state.gamification)
    except Exception as exc:
        logger.error(f"Failed to update streak: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/badges/{milestone}")
async def unlock_badge(milestone: str, workspace: Workspace = Depends(get_workspace)):
    try:
        badge = workspace.unlock_milestone(milestone)
        return ok(badge, message="Badge unlocked")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to unlock badge {milestone}: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/challenges/{challenge_id}")
async def complete_challenge(challenge_id: str, workspace: Workspace = Depends(get_workspace)):
    try:
        challenge = workspace.complete_challenge(challenge_id)
        return ok({"challenge": challenge.id, "awarded": challenge.points}, message="Challenge complete")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to complete challenge {challenge_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/messages")
async def send_message(req: MessageRequest, workspace: Workspace = Depends(get_workspace)):
    try:
        message = workspace.send_message(req.mentor_id, req.message, req.type)
        return ok(message, message="Message sent", status_code=201)
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to send message: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/messages/{message_id}/read")
async def mark_read(message_id: str, workspace: Workspace = Depends(get_workspace)):
    try:
        workspace.mark_read(message_id)
        return ok(message="Message marked as read")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to mark message {message_id} read: {exc}", exc_info=True)
        return internal_error(exc)


@router.delete("/celebrations/{celebration_id}")
async def dismiss_celebration(celebration_id: str, workspace: Workspace = Depends(get_workspace)):
    try:
        if not workspace.dismiss_celebration(celebration_id):
            raise NotFound("Celebration not found")
        return ok(message="Celebration dismissed")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to dismiss celebration {celebration_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.get("/live-events")
async def live_events(limit: Optional[int] = None, workspace: Workspace = Depends(get_workspace)):
    try:
        events = workspace.interactive_state.live_events
        if limit is not None:
            events = events[:max(limit, 0)]
        return ok(events, count=len(events))
    except Exception as exc:
        logger.error(f"Failed to list live events: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/sessions")
async def book_session(req: BookingRequest, workspace: Workspace = Depends(get_workspace)):
    """Book a session for the signed-in user."""
    try:
        session = workspace.book_session(req.mentor_id, req.scheduled_time, req.type, req.skill, req.duration)
        return ok(session, message="Session booked", status_code=201)
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to book session: {exc}", exc_info=True)
        return internal_error(exc)


@router.put("/sessions/{session_id}")
async def update_session(
    session_id: str,
    updates: Dict[str, Any] = Body(...),
    workspace: Workspace = Depends(get_workspace),
):
    try:
        session = workspace.update_session(session_id, updates)
        return ok(session, message="Session updated")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to update workspace session {session_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.delete("/sessions/{session_id}")
async def cancel_session(session_id: str, workspace: Workspace = Depends(get_workspace)):
    try:
        session = workspace.cancel_session(session_id)
        return ok(session, message="Session cancelled")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to cancel workspace session {session_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/progress")
async def advance_progress(req: ProgressRequest, workspace: Workspace = Depends(get_workspace)):
    try:
        progress = workspace.advance_progress(req.step)
        return ok({"progress": progress})
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to update progress: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/achievements")
async def add_achievement(req: AchievementRequest, workspace: Workspace = Depends(get_workspace)):
    try:
        achievement = workspace.add_achievement(req.title, req.description, req.icon, req.color)
        return ok(achievement, message="Achievement added", status_code=201)
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to add achievement: {exc}", exc_info=True)
        return internal_error(exc)


@router.put("/search")
async def set_search_filters(req: SearchRequest, workspace: Workspace = Depends(get_workspace)):
    try:
        workspace.set_search_filters(req.query, req.skill, req.language)
        return ok(workspace.app_state.search)
    except Exception as exc:
        logger.error(f"Failed to set search filters: {exc}", exc_info=True)
        return internal_error(exc)


@router.delete("/notifications/{notification_id}")
async def dismiss_notification(notification_id: str, workspace: Workspace = Depends(get_workspace)):
    try:
        if not workspace.dismiss_notification(notification_id):
            raise NotFound("Notification not found")
        return ok(message="Notification dismissed")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to dismiss notification {notification_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/mentors/{mentor_id}/connect")
async def connect_mentor(mentor_id: str, workspace: Workspace = Depends(get_workspace)):
    try:
        mentor = workspace.connect_mentor(mentor_id)
        return ok(mentor, message="Connecting")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to connect mentor {mentor_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/recordings/start")
async def start_recording(workspace: Workspace = Depends(get_workspace)):
    try:
        workspace.start_recording()
        return ok(message="Recording started")
    except Exception as exc:
        logger.error(f"Failed to start recording: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/recordings")
async def save_recording(req: RecordingRequest, workspace: Workspace = Depends(get_workspace)):
    """Store a finished recording's metadata; audio never leaves the client."""
    try:
        recording = workspace.save_recording(req.duration, req.transcription)
        return ok(recording, message="Recording saved", status_code=201)
    except Exception as exc:
        logger.error(f"Failed to save recording: {exc}", exc_info=True)
        return internal_error(exc)


@router.put("/active-chat")
async def set_active_chat(req: ActiveChatRequest, workspace: Workspace = Depends(get_workspace)):
    try:
        workspace.set_active_chat(req.chat_id)
        return ok({"activeChatId": workspace.interactive_state.active_chat_id})
    except Exception as exc:
        logger.error(f"Failed to set active chat: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/tutorial")
async def tutorial(req: TutorialRequest, workspace: Workspace = Depends(get_workspace)):
    try:
        if req.active is True:
            workspace.start_tutorial()
        if req.step is not None:
            workspace.set_tutorial_step(req.step)
        if req.active is False:
            workspace.end_tutorial()
        state = workspace.interactive_state
        return ok({"tutorialStep": state.tutorial_step, "isTutorialActive": state.is_tutorial_active})
    except Exception as exc:
        logger.error(f"Failed to update tutorial: {exc}", exc_info=True)
        return internal_error(exc)
