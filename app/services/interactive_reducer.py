"""Interactive state reducer: chat, gamification, live feed, celebrations.

Same discipline as the application reducer: pure, total, unknown actions
return the input state. Point awards, streak updates and badge unlocks may
also enqueue a celebration; that happens in the same reduction step as the
stat change, so observers never see one without the other.
"""
from typing import Callable, Dict

from app.domain import actions as a
from app.domain.state import InteractiveState
from app.services import gamification as rules

LIVE_EVENT_CAPACITY = 10


def _add_chat_message(state: InteractiveState, action: a.AddChatMessage) -> InteractiveState:
    return state.model_copy(update={"chat_messages": [*state.chat_messages, action.message]})


def _mark_message_read(state: InteractiveState, action: a.MarkMessageRead) -> InteractiveState:
    if not any(m.id == action.message_id and not m.is_read for m in state.chat_messages):
        return state
    return state.model_copy(update={
        "chat_messages": [
            m.model_copy(update={"is_read": True}) if m.id == action.message_id else m
            for m in state.chat_messages
        ]
    })


def _set_typing_indicator(state: InteractiveState, action: a.SetTypingIndicator) -> InteractiveState:
    return state.model_copy(update={
        "typing_indicators": {**state.typing_indicators, action.user_id: action.is_typing}
    })


def _add_points(state: InteractiveState, action: a.AddPoints) -> InteractiveState:
    if action.points <= 0:
        return state
    stats = state.gamification
    points = stats.points + action.points
    level = rules.level_for_points(points)
    update = {"gamification": stats.model_copy(update={"points": points, "level": level})}
    if level > stats.level:
        update["celebrations"] = [
            *state.celebrations,
            rules.level_up_celebration(level, action.celebration_id, action.at),
        ]
    return state.model_copy(update=update)


def _update_streak(state: InteractiveState, action: a.UpdateStreak) -> InteractiveState:
    stats = state.gamification
    update = {
        "gamification": stats.model_copy(update={
            "streak": action.streak,
            "last_activity_date": action.at,
        })
    }
    if rules.is_streak_milestone(stats.streak, action.streak):
        update["celebrations"] = [
            *state.celebrations,
            rules.streak_celebration(action.streak, action.celebration_id, action.at),
        ]
    return state.model_copy(update=update)


def _unlock_badge(state: InteractiveState, action: a.UnlockBadge) -> InteractiveState:
    stats = state.gamification
    if stats.has_badge(action.badge.id):
        return state
    return state.model_copy(update={
        "gamification": stats.model_copy(update={"badges": [*stats.badges, action.badge]}),
        "celebrations": [
            *state.celebrations,
            rules.badge_celebration(action.badge, action.celebration_id, action.at),
        ],
    })


def _add_live_event(state: InteractiveState, action: a.AddLiveEvent) -> InteractiveState:
    # Newest first; the oldest entry by position falls off the end.
    events = [action.event, *state.live_events[:LIVE_EVENT_CAPACITY - 1]]
    return state.model_copy(update={"live_events": events})


def _set_active_chat(state: InteractiveState, action: a.SetActiveChat) -> InteractiveState:
    return state.model_copy(update={"active_chat_id": action.chat_id})


def _add_celebration(state: InteractiveState, action: a.AddCelebration) -> InteractiveState:
    return state.model_copy(update={"celebrations": [*state.celebrations, action.celebration]})


def _remove_celebration(state: InteractiveState, action: a.RemoveCelebration) -> InteractiveState:
    remaining = [c for c in state.celebrations if c.id != action.celebration_id]
    if len(remaining) == len(state.celebrations):
        return state
    return state.model_copy(update={"celebrations": remaining})


def _set_tutorial_step(state: InteractiveState, action: a.SetTutorialStep) -> InteractiveState:
    return state.model_copy(update={"tutorial_step": action.step})


def _set_tutorial_active(state: InteractiveState, action: a.SetTutorialActive) -> InteractiveState:
    return state.model_copy(update={"is_tutorial_active": action.active})


def _update_last_interaction(state: InteractiveState, action: a.UpdateLastInteraction) -> InteractiveState:
    return state.model_copy(update={"last_interaction": action.at})


def _add_session_minutes(state: InteractiveState, action: a.AddSessionMinutes) -> InteractiveState:
    if action.minutes <= 0:
        return state
    stats = state.gamification
    return state.model_copy(update={
        "gamification": stats.model_copy(update={
            "total_session_minutes": stats.total_session_minutes + action.minutes
        })
    })


_HANDLERS: Dict[type, Callable] = {
    a.AddChatMessage: _add_chat_message,
    a.MarkMessageRead: _mark_message_read,
    a.SetTypingIndicator: _set_typing_indicator,
    a.AddPoints: _add_points,
    a.UpdateStreak: _update_streak,
    a.UnlockBadge: _unlock_badge,
    a.AddLiveEvent: _add_live_event,
    a.SetActiveChat: _set_active_chat,
    a.AddCelebration: _add_celebration,
    a.RemoveCelebration: _remove_celebration,
    a.SetTutorialStep: _set_tutorial_step,
    a.SetTutorialActive: _set_tutorial_active,
    a.UpdateLastInteraction: _update_last_interaction,
    a.AddSessionMinutes: _add_session_minutes,
}


def reduce_interactive(state: InteractiveState, action: object) -> InteractiveState:
    """Apply one action to the interactive state; unknown kinds are ignored."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action)
