"""Domain models for users and their achievements."""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import Field

from app.domain.base import CamelModel
from app.utils.ids import generate_id, utc_now


class UserRole(str, Enum):
    LEARNER = "learner"
    MENTOR = "mentor"
    BOTH = "both"


class Achievement(CamelModel):
    """An achievement shown on the user's profile."""
    id: str = Field(default_factory=generate_id)
    title: str
    description: str = ""
    icon: str = ""
    color: str = ""
    earned_date: datetime = Field(default_factory=utc_now)


class User(CamelModel):
    """A learner and/or mentor registered on the platform.

    Attributes:
        id: Unique identifier
        name: Display name
        phone: Phone number, unique across users and used to sign in
        role: learner, mentor or both
        language: Preferred language
        location: Free-form location
        interests: Interest tags used for matching
        level: Self-declared skill level
        progress: Learning progress 0-100
        sessions: Number of sessions taken
        achievements: Earned achievements
        joined_date: Registration timestamp
    """
    id: str = Field(default_factory=generate_id)
    name: str
    phone: str
    role: UserRole = UserRole.LEARNER
    language: str = ""
    location: str = ""
    interests: List[str] = Field(default_factory=list)
    level: str = "beginner"
    progress: int = Field(default=0, ge=0, le=100)
    sessions: int = Field(default=0, ge=0)
    achievements: List[Achievement] = Field(default_factory=list)
    avatar: Optional[str] = None
    joined_date: datetime = Field(default_factory=utc_now)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "8f7c0d0e-3b9a-4d55-9d55-0c8f3c1d2a11",
                "name": "Meena Kumari",
                "phone": "+919812345678",
                "role": "learner",
                "language": "Hindi",
                "location": "Varanasi",
                "interests": ["Web Development", "English Speaking"],
                "level": "beginner",
                "progress": 20,
                "sessions": 3
            }
        }


class LoginRequest(CamelModel):
    """Phone-only sign in; there is no credential check."""
    phone: Optional[str] = None
