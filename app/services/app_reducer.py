"""Application state reducer: identity, mentor directory and sessions.

``reduce_app`` is pure and total. Actions it does not know about, and patches
that reference ids which are not present, return the state unchanged.
"""
from typing import Callable, Dict

from app.domain import actions as a
from app.domain.state import AppState


def _set_identity(state: AppState, action: a.SetIdentity) -> AppState:
    return state.model_copy(update={
        "user": action.user,
        "is_authenticated": True,
        "error": None,
    })


def _clear_identity(state: AppState, action: a.ClearIdentity) -> AppState:
    return state.model_copy(update={
        "user": None,
        "is_authenticated": False,
        "sessions": [],
        "voice_recordings": [],
    })


def _set_mentor_directory(state: AppState, action: a.SetMentorDirectory) -> AppState:
    return state.model_copy(update={"mentors": list(action.mentors)})


def _patch_mentor(state: AppState, action: a.PatchMentor) -> AppState:
    if not any(m.id == action.mentor_id for m in state.mentors):
        return state
    return state.model_copy(update={
        "mentors": [
            m.merged(action.updates) if m.id == action.mentor_id else m
            for m in state.mentors
        ]
    })


def _add_session(state: AppState, action: a.AddSession) -> AppState:
    return state.model_copy(update={"sessions": [*state.sessions, action.session]})


def _patch_session(state: AppState, action: a.PatchSession) -> AppState:
    if not any(s.id == action.session_id for s in state.sessions):
        return state
    return state.model_copy(update={
        "sessions": [
            s.merged(action.updates) if s.id == action.session_id else s
            for s in state.sessions
        ]
    })


def _remove_session(state: AppState, action: a.RemoveSession) -> AppState:
    remaining = [s for s in state.sessions if s.id != action.session_id]
    if len(remaining) == len(state.sessions):
        return state
    return state.model_copy(update={"sessions": remaining})


def _add_recording(state: AppState, action: a.AddRecording) -> AppState:
    return state.model_copy(update={
        "voice_recordings": [*state.voice_recordings, action.recording]
    })


def _set_recording_flag(state: AppState, action: a.SetRecordingFlag) -> AppState:
    return state.model_copy(update={"is_recording": action.is_recording})


def _set_search_filters(state: AppState, action: a.SetSearchFilters) -> AppState:
    updates = {
        name: value
        for name, value in (
            ("query", action.query),
            ("skill", action.skill),
            ("language", action.language),
        )
        if value is not None
    }
    if not updates:
        return state
    return state.model_copy(update={"search": state.search.model_copy(update=updates)})


def _add_notification(state: AppState, action: a.AddNotification) -> AppState:
    return state.model_copy(update={
        "notifications": [*state.notifications, action.notification]
    })


def _remove_notification(state: AppState, action: a.RemoveNotification) -> AppState:
    return state.model_copy(update={
        "notifications": [n for n in state.notifications if n.id != action.notification_id]
    })


def _set_loading(state: AppState, action: a.SetLoading) -> AppState:
    return state.model_copy(update={"loading": action.loading})


def _set_error(state: AppState, action: a.SetError) -> AppState:
    return state.model_copy(update={"error": action.error})


def _add_achievement(state: AppState, action: a.AddAchievement) -> AppState:
    if state.user is None:
        return state
    user = state.user.model_copy(update={
        "achievements": [*state.user.achievements, action.achievement]
    })
    return state.model_copy(update={"user": user})


def _set_progress(state: AppState, action: a.SetProgress) -> AppState:
    if state.user is None:
        return state
    return state.model_copy(update={
        "user": state.user.model_copy(update={"progress": action.progress})
    })


_HANDLERS: Dict[type, Callable] = {
    a.SetIdentity: _set_identity,
    a.ClearIdentity: _clear_identity,
    a.SetMentorDirectory: _set_mentor_directory,
    a.PatchMentor: _patch_mentor,
    a.AddSession: _add_session,
    a.PatchSession: _patch_session,
    a.RemoveSession: _remove_session,
    a.AddRecording: _add_recording,
    a.SetRecordingFlag: _set_recording_flag,
    a.SetSearchFilters: _set_search_filters,
    a.AddNotification: _add_notification,
    a.RemoveNotification: _remove_notification,
    a.SetLoading: _set_loading,
    a.SetError: _set_error,
    a.AddAchievement: _add_achievement,
    a.SetProgress: _set_progress,
}


def reduce_app(state: AppState, action: object) -> AppState:
    """Apply one action to the application state.

    Args:
        state: Current state, never mutated
        action: Any object; unknown kinds are ignored

    Returns:
        The next state, or ``state`` itself when nothing changes
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action)
