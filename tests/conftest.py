"""Pytest configuration and shared fixtures."""
import random
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.domain.mentor import default_mentors
from app.domain.user import User
from app.infrastructure.kv_store import InMemoryKeyValueStore
from app.infrastructure.scheduler import ManualScheduler
from app.services.workspace import Workspace


@pytest.fixture
def test_settings():
    """Settings for an isolated in-memory process."""
    return Settings(
        environment="test",
        storage_backend="memory",
        live_feed_enabled=False,
        mentor_reply_enabled=True,
        mentor_reply_min_delay=2.0,
        mentor_reply_max_delay=5.0,
    )


@pytest.fixture
def scheduler():
    """Fake clock; timers only fire on ``advance``."""
    return ManualScheduler()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def mock_user():
    """A registered learner."""
    return User(
        id="user-001",
        name="Meena Kumari",
        phone="+919812345678",
        role="learner",
        language="Hindi",
        location="Varanasi",
        interests=["Web Development"],
    )


@pytest.fixture
def mentors():
    return default_mentors()


@pytest.fixture
def fixed_time():
    return datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def workspace(kv_store, scheduler, test_settings):
    """Started workspace on a fake clock with a seeded random source."""
    ws = Workspace(kv_store, scheduler, settings=test_settings, rng=random.Random(42))
    ws.start()
    yield ws
    ws.shutdown()


@pytest.fixture
def test_client(test_settings, kv_store, scheduler):
    """FastAPI test client with startup and shutdown events run."""
    from main import create_app
    app = create_app(settings=test_settings, kv_store=kv_store, scheduler=scheduler)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def registered_user(test_client):
    """A user created through the API; returns the response data."""
    response = test_client.post(
        "/api/users",
        json={"name": "Meena Kumari", "phone": "+919812345678", "role": "learner"}
    )
    return response.json()["data"]
