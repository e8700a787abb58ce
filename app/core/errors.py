"""Domain errors raised by services and mapped to HTTP statuses by the handlers."""
from typing import Optional


class VoiceMentorError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error


class ValidationFailed(VoiceMentorError):
    """A required field is missing or a payload does not validate."""

    status_code = 400


class NotFound(VoiceMentorError):
    """A referenced id does not exist."""

    status_code = 404


class Conflict(VoiceMentorError):
    """A unique key is already taken or a state transition is not allowed."""

    status_code = 409
