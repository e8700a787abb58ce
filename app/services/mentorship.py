"""Services behind the REST surface: users, the mentor directory and sessions.

Each service wraps an injected repository. Failures the caller can act on are
raised as ``VoiceMentorError`` subclasses carrying their HTTP status.
"""
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from app.core.errors import Conflict, NotFound, ValidationFailed
from app.core.logging import get_logger
from app.domain.base import CamelModel
from app.domain.mentor import Mentor, MentorStatusUpdate
from app.domain.session import EndSessionRequest, Session, SessionStatus
from app.domain.user import User
from app.infrastructure.repositories import Repository
from app.utils.text import any_contains_ci, contains_ci, unique_in_order

logger = get_logger(__name__)


def _missing(model: type, payload: Dict[str, Any], required: Iterable[str]) -> List[str]:
    """Names (camelCase) of required fields that are absent or empty."""
    present = model.normalize_keys(payload)
    return [
        model.model_fields[name].alias or name
        for name in required
        if present.get(name) in (None, "", [])
    ]


def _validate(model: type, payload: Dict[str, Any], label: str):
    """Validate a create payload; ids are always generated server-side."""
    data = {k: v for k, v in model.normalize_keys(payload).items() if k != "id"}
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed(f"Invalid {label} data", error=str(e))


def _merge(item: CamelModel, updates: Dict[str, Any], label: str):
    updates = {k: v for k, v in updates.items() if k != "id"}
    try:
        return item.merged(updates, strict=True)
    except ValidationError as e:
        raise ValidationFailed(f"Invalid {label} data", error=str(e))


def check_transition(before: Session, after: Session) -> None:
    """Reject an edit that moves a session's status against its lifecycle."""
    if after.status != before.status and not before.can_transition_to(after.status):
        raise Conflict(f"Cannot move session from {before.status.value} to {after.status.value}")


class UserService:
    def __init__(self, repository: Repository[User]):
        self.repository = repository

    def create(self, payload: Dict[str, Any]) -> User:
        if _missing(User, payload, ("name", "phone", "role")):
            raise ValidationFailed("Missing required fields: name, phone, or role")

        self._ensure_phone_free(User.normalize_keys(payload).get("phone"))
        user = _validate(User, payload, "user")

        self.repository.add(user)
        logger.info("User created", extra={"user_id": user.id})
        return user

    def list(self) -> List[User]:
        return self.repository.list()

    def get(self, user_id: str) -> User:
        user = self.repository.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def update(self, user_id: str, updates: Dict[str, Any]) -> User:
        current = self.get(user_id)
        phone = User.normalize_keys(updates).get("phone")
        if phone is not None and phone != current.phone:
            self._ensure_phone_free(phone)
        user = _merge(current, updates, "user")
        return self.repository.replace(user)

    def find_by_phone(self, phone: str) -> Optional[User]:
        return next((u for u in self.repository.list() if u.phone == phone), None)

    def _ensure_phone_free(self, phone: Optional[str]) -> None:
        if phone and self.find_by_phone(phone) is not None:
            raise Conflict("User with this phone number already exists")

    def login(self, phone: Optional[str]) -> User:
        """Look a user up by phone; there is no credential check."""
        if not phone:
            raise ValidationFailed("Phone number is required")
        user = self.find_by_phone(phone)
        if user is None:
            raise NotFound("User not found with this phone number")
        return user


class MentorService:
    def __init__(self, repository: Repository[Mentor]):
        self.repository = repository

    def seed(self, mentors: List[Mentor]) -> None:
        """Populate an empty directory."""
        if self.repository.list():
            return
        for mentor in mentors:
            self.repository.add(mentor)
        logger.info(f"Seeded mentor directory with {len(mentors)} mentors")

    def list(
        self,
        skill: Optional[str] = None,
        language: Optional[str] = None,
        online: bool = False,
        search: Optional[str] = None,
    ) -> List[Mentor]:
        """Directory entries matching every supplied filter.

        Args:
            skill: Case-insensitive substring of the mentor's skill
            language: Case-insensitive substring of one of the languages
            online: Only mentors currently online
            search: Case-insensitive substring of name, skill, bio or a tag
        """
        mentors = self.repository.list()
        if skill:
            mentors = [m for m in mentors if contains_ci(m.skill, skill)]
        if language:
            mentors = [m for m in mentors if any_contains_ci(m.languages, language)]
        if online:
            mentors = [m for m in mentors if m.is_online]
        if search:
            mentors = [
                m for m in mentors
                if any_contains_ci([m.name, m.skill, m.bio, *m.tags], search)
            ]
        return mentors

    def get(self, mentor_id: str) -> Mentor:
        mentor = self.repository.get(mentor_id)
        if mentor is None:
            raise NotFound("Mentor not found")
        return mentor

    def update_status(self, mentor_id: str, update: MentorStatusUpdate) -> Mentor:
        mentor = self.get(mentor_id)
        changes = update.model_dump(exclude_none=True)
        if changes:
            mentor = self.repository.replace(mentor.model_copy(update=changes))
            logger.info("Mentor status updated", extra={"mentor_id": mentor_id})
        return mentor

    def skills(self) -> List[str]:
        return unique_in_order(m.skill for m in self.repository.list())

    def languages(self) -> List[str]:
        return unique_in_order(lang for m in self.repository.list() for lang in m.languages)


class SessionService:
    def __init__(self, repository: Repository[Session]):
        self.repository = repository

    def create(self, payload: Dict[str, Any]) -> Session:
        if _missing(Session, payload, ("mentor_id", "user_id", "scheduled_time")):
            raise ValidationFailed("Missing required fields: mentorId, userId, or scheduledTime")

        session = _validate(Session, payload, "session")
        self.repository.add(session)
        logger.info("Session scheduled", extra={"session_id": session.id, "mentor_id": session.mentor_id})
        return session

    def list(
        self,
        user_id: Optional[str] = None,
        mentor_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Session]:
        """Sessions matching the filters, earliest scheduled first."""
        sessions = self.repository.list()
        if user_id:
            sessions = [s for s in sessions if s.user_id == user_id]
        if mentor_id:
            sessions = [s for s in sessions if s.mentor_id == mentor_id]
        if status:
            sessions = [s for s in sessions if s.status.value == status]
        return sorted(sessions, key=lambda s: s.scheduled_time)

    def get(self, session_id: str) -> Session:
        session = self.repository.get(session_id)
        if session is None:
            raise NotFound("Session not found")
        return session

    def update(self, session_id: str, updates: Dict[str, Any]) -> Session:
        current = self.get(session_id)
        session = _merge(current, updates, "session")
        check_transition(current, session)
        return self.repository.replace(session)

    def delete(self, session_id: str) -> Session:
        """Remove a session; the returned copy carries the cancelled status."""
        session = self.repository.delete(session_id)
        if session is None:
            raise NotFound("Session not found")
        logger.info("Session cancelled", extra={"session_id": session_id})
        return session.model_copy(update={"status": SessionStatus.CANCELLED})

    def join(self, session_id: str) -> Session:
        return self._transition(self.get(session_id), SessionStatus.ONGOING)

    def end(self, session_id: str, details: Optional[EndSessionRequest] = None) -> Session:
        details = details or EndSessionRequest()
        return self._transition(
            self.get(session_id),
            SessionStatus.COMPLETED,
            rating=details.rating,
            notes=details.notes,
        )

    def _transition(self, session: Session, status: SessionStatus, **changes) -> Session:
        if not session.can_transition_to(status):
            raise Conflict(f"Cannot move session from {session.status.value} to {status.value}")
        updated = session.model_copy(update={"status": status, **changes})
        logger.info(
            f"Session {status.value}",
            extra={"session_id": session.id, "mentor_id": session.mentor_id}
        )
        return self.repository.replace(updated)
