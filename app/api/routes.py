"""REST routes for users, the mentor directory and sessions.

Every handler catches its own failures: expected ones (missing fields, unknown
ids, duplicate phone numbers, forbidden transitions) map to 400/404/409, and
anything else is logged and answered with a 500 carrying the error text.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from app.api.responses import from_error, internal_error, ok
from app.core.errors import VoiceMentorError
from app.core.logging import get_logger
from app.domain.mentor import MentorStatusUpdate
from app.domain.session import EndSessionRequest
from app.domain.user import LoginRequest
from app.services.mentorship import MentorService, SessionService, UserService
from app.services.workspace import Workspace

logger = get_logger(__name__)
router = APIRouter()


def get_user_service(request: Request) -> UserService:
    return request.app.state.users


def get_mentor_service(request: Request) -> MentorService:
    return request.app.state.mentors


def get_session_service(request: Request) -> SessionService:
    return request.app.state.sessions


def get_workspace(request: Request) -> Workspace:
    return request.app.state.workspace


# -----------------
# USER ENDPOINTS
# -----------------

@router.post("/users")
async def create_user(payload: Dict[str, Any] = Body(...), users: UserService = Depends(get_user_service)):
    """Register a user; 409 when the phone number is taken."""
    try:
        user = users.create(payload)
        return ok(user, message="User created successfully", status_code=201)
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to create user: {exc}", exc_info=True)
        return internal_error(exc)


@router.get("/users")
async def list_users(users: UserService = Depends(get_user_service)):
    try:
        items = users.list()
        return ok(items, count=len(items))
    except Exception as exc:
        logger.error(f"Failed to list users: {exc}", exc_info=True)
        return internal_error(exc)


@router.get("/users/{user_id}")
async def get_user(user_id: str, users: UserService = Depends(get_user_service)):
    try:
        return ok(users.get(user_id))
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to fetch user {user_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.put("/users/{user_id}")
async def update_user(user_id: str, updates: Dict[str, Any] = Body(...), users: UserService = Depends(get_user_service)):
    """Shallow-merge the supplied fields into the user."""
    try:
        user = users.update(user_id, updates)
        return ok(user, message="User updated successfully")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to update user {user_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/auth/login")
async def login(req: LoginRequest, users: UserService = Depends(get_user_service)):
    """Sign in by phone number alone.

    Example:
        POST /api/auth/login
        {"phone": "+919812345678"}
    """
    try:
        user = users.login(req.phone)
        return ok(user, message="Login successful")
    except VoiceMentorError as exc:
        logger.warning(f"Failed login attempt: {exc.message}")
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Login failed: {exc}", exc_info=True)
        return internal_error(exc)


# -----------------
# MENTOR ENDPOINTS
# -----------------

@router.get("/mentors")
async def list_mentors(
    skill: Optional[str] = None,
    language: Optional[str] = None,
    online: Optional[str] = None,
    search: Optional[str] = None,
    mentors: MentorService = Depends(get_mentor_service),
):
    """Directory with optional filters; ``online=true`` keeps online mentors only."""
    try:
        items = mentors.list(skill=skill, language=language, online=online == "true", search=search)
        return ok(items, count=len(items))
    except Exception as exc:
        logger.error(f"Failed to list mentors: {exc}", exc_info=True)
        return internal_error(exc)


@router.get("/mentors/{mentor_id}")
async def get_mentor(mentor_id: str, mentors: MentorService = Depends(get_mentor_service)):
    try:
        return ok(mentors.get(mentor_id))
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to fetch mentor {mentor_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.put("/mentors/{mentor_id}/status")
async def update_mentor_status(
    mentor_id: str,
    update: MentorStatusUpdate,
    mentors: MentorService = Depends(get_mentor_service),
    workspace: Workspace = Depends(get_workspace),
):
    """Change a mentor's presence in the directory and the workspace."""
    try:
        mentor = mentors.update_status(mentor_id, update)
        workspace.sync_mentor_status(mentor_id, update)
        return ok(mentor, message="Mentor status updated")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to update mentor {mentor_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.get("/skills")
async def list_skills(mentors: MentorService = Depends(get_mentor_service)):
    try:
        return ok(mentors.skills())
    except Exception as exc:
        logger.error(f"Failed to list skills: {exc}", exc_info=True)
        return internal_error(exc)


@router.get("/languages")
async def list_languages(mentors: MentorService = Depends(get_mentor_service)):
    try:
        return ok(mentors.languages())
    except Exception as exc:
        logger.error(f"Failed to list languages: {exc}", exc_info=True)
        return internal_error(exc)


# -----------------
# SESSION ENDPOINTS
# -----------------

@router.post("/sessions")
async def create_session(payload: Dict[str, Any] = Body(...), sessions: SessionService = Depends(get_session_service)):
    try:
        session = sessions.create(payload)
        return ok(session, message="Session scheduled successfully", status_code=201)
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to create session: {exc}", exc_info=True)
        return internal_error(exc)


@router.get("/sessions")
async def list_sessions(
    user_id: Optional[str] = Query(None, alias="userId"),
    mentor_id: Optional[str] = Query(None, alias="mentorId"),
    status: Optional[str] = None,
    sessions: SessionService = Depends(get_session_service),
):
    """Sessions filtered by user, mentor and status, earliest first."""
    try:
        items = sessions.list(user_id=user_id, mentor_id=mentor_id, status=status)
        return ok(items, count=len(items))
    except Exception as exc:
        logger.error(f"Failed to list sessions: {exc}", exc_info=True)
        return internal_error(exc)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, sessions: SessionService = Depends(get_session_service)):
    try:
        return ok(sessions.get(session_id))
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to fetch session {session_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.put("/sessions/{session_id}")
async def update_session(
    session_id: str,
    updates: Dict[str, Any] = Body(...),
    sessions: SessionService = Depends(get_session_service),
):
    try:
        session = sessions.update(session_id, updates)
        return ok(session, message="Session updated successfully")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to update session {session_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, sessions: SessionService = Depends(get_session_service)):
    try:
        session = sessions.delete(session_id)
        return ok(session, message="Session deleted successfully")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to delete session {session_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/sessions/{session_id}/join")
async def join_session(session_id: str, sessions: SessionService = Depends(get_session_service)):
    try:
        session = sessions.join(session_id)
        return ok(session, message="Session joined successfully")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to join session {session_id}: {exc}", exc_info=True)
        return internal_error(exc)


@router.post("/sessions/{session_id}/end")
async def end_session(
    session_id: str,
    details: Optional[EndSessionRequest] = None,
    sessions: SessionService = Depends(get_session_service),
):
    """Complete a session, attaching the rating and notes."""
    try:
        session = sessions.end(session_id, details)
        return ok(session, message="Session completed successfully")
    except VoiceMentorError as exc:
        return from_error(exc)
    except Exception as exc:
        logger.error(f"Failed to end session {session_id}: {exc}", exc_info=True)
        return internal_error(exc)
