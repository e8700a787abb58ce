"""Identifier and timestamp helpers shared by domain models and actions."""
import uuid
from datetime import datetime, timezone


def generate_id() -> str:
    """Return a random 128-bit identifier (UUID4) as a string."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
