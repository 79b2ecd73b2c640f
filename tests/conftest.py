"""Pytest fixtures."""

import os

TEST_DATABASE_URL = "sqlite:///./test.db"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from rapid_responder.core.security import create_access_token  # noqa: E402
from rapid_responder.db.base import Base  # noqa: E402
from rapid_responder.db.session import SessionLocal, engine, get_db  # noqa: E402
from rapid_responder.db.store import EventStore  # noqa: E402
from rapid_responder.main import app  # noqa: E402
from rapid_responder.models import SosEvent, Volunteer, VolunteerResponse  # noqa: E402,F401 - register for create_all
from rapid_responder.services.dispatch_service import DispatchRouter  # noqa: E402
from rapid_responder.services.response_service import ResponseAggregator  # noqa: E402
from rapid_responder.services.sos_service import EventLifecycleManager  # noqa: E402
from rapid_responder.services.volunteer_registry import VolunteerRegistry  # noqa: E402


class FakeNotifier:
    """Records pushes. Users in ``live`` are connected, users in ``failing`` raise."""

    def __init__(self, live=(), failing=()):
        self.live = set(live)
        self.failing = set(failing)
        self.sent = []

    def push(self, user_id, event, data):
        if user_id in self.failing:
            raise RuntimeError("socket closed")
        if user_id not in self.live:
            return False
        self.sent.append((user_id, event, data))
        return True

    def events_for(self, user_id):
        return [(event, data) for uid, event, data in self.sent if uid == user_id]


def override_get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def tables():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(tables):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return EventStore(db)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def registry(store):
    return VolunteerRegistry(store)


@pytest.fixture
def dispatcher(store, registry, notifier):
    return DispatchRouter(store, registry, notifier=notifier)


@pytest.fixture
def lifecycle(store, dispatcher):
    return EventLifecycleManager(store, dispatcher)


@pytest.fixture
def aggregator(store, dispatcher):
    return ResponseAggregator(store, dispatcher)


@pytest.fixture
def client(tables):
    """Test client with overridden DB."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    """Build Authorization headers for a user id."""

    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers
