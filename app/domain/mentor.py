"""Domain models for the mentor directory."""
from typing import List, Optional
from pydantic import Field

from app.domain.base import CamelModel
from app.utils.ids import generate_id


class Mentor(CamelModel):
    """A directory entry for a mentor."""
    id: str = Field(default_factory=generate_id)
    name: str
    skill: str
    bio: str = ""
    rating: float = Field(default=0.0, ge=0, le=5)
    sessions: int = Field(default=0, ge=0)
    languages: List[str] = Field(default_factory=list)
    location: str = ""
    experience: str = ""
    availability: str = ""
    tags: List[str] = Field(default_factory=list)
    price: str = "Free"
    avatar: Optional[str] = None
    is_online: bool = False


class MentorStatusUpdate(CamelModel):
    """Partial update of a mentor's presence."""
    is_online: Optional[bool] = None
    availability: Optional[str] = None


def default_mentors() -> List[Mentor]:
    """The directory every fresh process starts with."""
    return [
        Mentor(
            id="1",
            name="Priya Singh",
            skill="Web Development",
            bio="Full-stack developer helping rural students learn coding in Hindi",
            rating=4.9,
            sessions=156,
            languages=["Hindi", "English"],
            location="Delhi",
            experience="5 years",
            availability="Available now",
            tags=["HTML", "CSS", "JavaScript", "React"],
            price="Free",
            is_online=True,
        ),
        Mentor(
            id="2",
            name="Arjun Patel",
            skill="Mobile App Development",
            bio="Android developer passionate about teaching in regional languages",
            rating=4.8,
            sessions=203,
            languages=["Gujarati", "Hindi", "English"],
            location="Ahmedabad",
            experience="7 years",
            availability="Available in 2 hours",
            tags=["Android", "Flutter", "Kotlin", "Java"],
            price="₹200/session",
            is_online=False,
        ),
        Mentor(
            id="3",
            name="Kavya Reddy",
            skill="Data Science",
            bio="Data scientist making analytics accessible to everyone",
            rating=4.9,
            sessions=98,
            languages=["Telugu", "English"],
            location="Hyderabad",
            experience="4 years",
            availability="Available tomorrow",
            tags=["Python", "Machine Learning", "Statistics"],
            price="₹300/session",
            is_online=True,
        ),
        Mentor(
            id="4",
            name="Rohit Kumar",
            skill="UI/UX Design",
            bio="Design mentor helping students create beautiful user experiences",
            rating=4.7,
            sessions=134,
            languages=["Punjabi", "Hindi", "English"],
            location="Chandigarh",
            experience="6 years",
            availability="Available now",
            tags=["Figma", "Adobe XD", "User Research", "Prototyping"],
            price="Free",
            is_online=True,
        ),
        Mentor(
            id="5",
            name="Anita Sharma",
            skill="Digital Marketing",
            bio="Marketing expert teaching online business skills",
            rating=4.8,
            sessions=87,
            languages=["Hindi", "English"],
            location="Jaipur",
            experience="3 years",
            availability="Available in 1 hour",
            tags=["SEO", "Social Media", "Content Marketing"],
            price="₹150/session",
            is_online=False,
        ),
        Mentor(
            id="6",
            name="Vikash Singh",
            skill="Photography",
            bio="Professional photographer sharing creative skills",
            rating=4.6,
            sessions=76,
            languages=["Hindi", "Bhojpuri"],
            location="Patna",
            experience="8 years",
            availability="Available now",
            tags=["Portrait", "Wedding", "Street Photography"],
            price="₹250/session",
            is_online=True,
        ),
    ]
