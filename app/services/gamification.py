"""Gamification rules: points per activity, levels, badges and daily challenges.

All lookups are total. Unknown activity kinds are worth 0 points and unknown
milestones grant no badge, so new activity types can be emitted before the
tables learn about them.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from app.domain.interactive import Badge, BadgeRarity, Celebration, CelebrationType
from app.utils.ids import utc_now

POINTS_PER_LEVEL = 1000

LEVEL_UP_DURATION_MS = 3000
STREAK_DURATION_MS = 3000
BADGE_DURATION_MS = 4000
CHALLENGE_DURATION_MS = 3000

STREAK_MILESTONE_DAYS = 7

POINTS_BY_ACTIVITY: Dict[str, int] = {
    "session_complete": 100,
    "message_sent": 5,
    "voice_recording": 20,
    "profile_complete": 50,
    "mentor_connect": 25,
    "daily_login": 10,
    "streak_maintain": 15,
}

_BADGES: Dict[str, dict] = {
    "first_session": {
        "name": "First Steps",
        "description": "Completed your first mentorship session",
        "icon": "🎯",
        "color": "blue",
        "rarity": BadgeRarity.COMMON,
    },
    "week_streak": {
        "name": "Consistent Learner",
        "description": "Maintained a 7-day learning streak",
        "icon": "🔥",
        "color": "orange",
        "rarity": BadgeRarity.RARE,
    },
    "voice_master": {
        "name": "Voice Master",
        "description": "Completed 50 voice sessions",
        "icon": "🎤",
        "color": "purple",
        "rarity": BadgeRarity.EPIC,
    },
    "mentor_favorite": {
        "name": "Mentor's Favorite",
        "description": "Received 5-star rating from 10 mentors",
        "icon": "⭐",
        "color": "gold",
        "rarity": BadgeRarity.LEGENDARY,
    },
}


@dataclass(frozen=True)
class DailyChallenge:
    id: str
    title: str
    description: str
    points: int
    target: int
    icon: str


DAILY_CHALLENGES: Dict[str, DailyChallenge] = {
    c.id: c for c in (
        DailyChallenge("voice_session", "Voice Session", "Complete a 15-minute voice session", 50, 1, "🎤"),
        DailyChallenge("send_messages", "Active Learner", "Send 10 messages to mentors", 30, 10, "💬"),
        DailyChallenge("practice_streak", "Consistency", "Maintain your learning streak", 25, 1, "🔥"),
    )
}


def calculate_points_for_activity(activity_type: str) -> int:
    """Points awarded for an activity kind, 0 when the kind is unknown."""
    return POINTS_BY_ACTIVITY.get(activity_type, 0)


def level_for_points(points: int) -> int:
    """Level reached with ``points`` total points (level 1 starts at 0)."""
    return max(points, 0) // POINTS_PER_LEVEL + 1


def get_badge_for_milestone(milestone: str, earned_at: Optional[datetime] = None) -> Optional[Badge]:
    """Badge granted for a milestone key, or None when the key is unknown.

    Args:
        milestone: Milestone key, e.g. "first_session"
        earned_at: Earned date stamped on the badge (defaults to now)

    Returns:
        A fresh Badge whose id is the milestone key, or None
    """
    definition = _BADGES.get(milestone)
    if definition is None:
        return None
    return Badge(id=milestone, earned_date=earned_at or utc_now(), **definition)


def is_streak_milestone(previous: int, current: int) -> bool:
    """A streak milestone is an increase onto a multiple of seven days."""
    return current > previous and current % STREAK_MILESTONE_DAYS == 0


def level_up_celebration(level: int, celebration_id: str, at: datetime) -> Celebration:
    return Celebration(
        id=celebration_id,
        type=CelebrationType.LEVEL_UP,
        title="Level Up!",
        message=f"You've reached level {level}!",
        duration=LEVEL_UP_DURATION_MS,
        timestamp=at,
    )


def streak_celebration(streak: int, celebration_id: str, at: datetime) -> Celebration:
    return Celebration(
        id=celebration_id,
        type=CelebrationType.STREAK,
        title="Streak Milestone!",
        message=f"{streak} days in a row! 🔥",
        duration=STREAK_DURATION_MS,
        timestamp=at,
    )


def badge_celebration(badge: Badge, celebration_id: str, at: datetime) -> Celebration:
    return Celebration(
        id=celebration_id,
        type=CelebrationType.ACHIEVEMENT,
        title="Badge Unlocked!",
        message=badge.name,
        duration=BADGE_DURATION_MS,
        timestamp=at,
    )


def challenge_celebration(challenge: DailyChallenge) -> Celebration:
    return Celebration(
        type=CelebrationType.ACHIEVEMENT,
        title="Challenge Complete!",
        message=f"+{challenge.points} points earned!",
        duration=CHALLENGE_DURATION_MS,
    )
