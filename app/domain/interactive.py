"""Domain models for chat, gamification and the live activity feed."""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import Field

from app.domain.base import CamelModel
from app.utils.ids import generate_id, utc_now


class MessageType(str, Enum):
    TEXT = "text"
    VOICE = "voice"
    EMOJI = "emoji"
    SYSTEM = "system"


class ChatMessage(CamelModel):
    """A chat line between the signed-in user and a mentor.

    Immutable once created except for ``is_read``.
    """
    id: str = Field(default_factory=generate_id)
    sender_id: str
    sender_name: str = ""
    receiver_id: str
    message: str
    timestamp: datetime = Field(default_factory=utc_now)
    type: MessageType = MessageType.TEXT
    is_read: bool = False


class BadgeRarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Badge(CamelModel):
    id: str
    name: str
    description: str = ""
    icon: str = ""
    color: str = ""
    earned_date: datetime = Field(default_factory=utc_now)
    rarity: BadgeRarity = BadgeRarity.COMMON


class GamificationStats(CamelModel):
    """Points, level, streak and badges of the signed-in user.

    ``level`` is always ``points // 1000 + 1``; only the interactive reducer
    writes it.
    """
    points: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    streak: int = Field(default=0, ge=0)
    last_activity_date: Optional[datetime] = None
    badges: List[Badge] = Field(default_factory=list)
    daily_goal: int = 30
    weekly_goal: int = 180
    total_session_minutes: int = Field(default=0, ge=0)

    def has_badge(self, badge_id: str) -> bool:
        return any(badge.id == badge_id for badge in self.badges)


class LiveEventType(str, Enum):
    MENTOR_ONLINE = "mentor_online"
    SESSION_STARTING = "session_starting"
    ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
    NEW_MESSAGE = "new_message"
    STREAK_MILESTONE = "streak_milestone"


class LiveEvent(CamelModel):
    """An entry of the activity feed, from whatever source produced it."""
    id: str = Field(default_factory=generate_id)
    type: LiveEventType
    title: str
    description: str = ""
    timestamp: datetime = Field(default_factory=utc_now)
    data: Dict[str, Any] = Field(default_factory=dict)


class CelebrationType(str, Enum):
    ACHIEVEMENT = "achievement"
    LEVEL_UP = "level_up"
    STREAK = "streak"
    SESSION_COMPLETE = "session_complete"


class Celebration(CamelModel):
    """A transient notification for a gamification milestone.

    ``duration`` is in milliseconds; zero or less means it stays until
    dismissed.
    """
    id: str = Field(default_factory=generate_id)
    type: CelebrationType
    title: str
    message: str
    duration: int = 3000
    timestamp: datetime = Field(default_factory=utc_now)

    @property
    def auto_expires(self) -> bool:
        return self.duration > 0
