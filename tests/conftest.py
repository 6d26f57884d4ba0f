"""
Shared fixtures: SQLite-backed sessions, a small wedding and an API client
"""

import uuid

import pytest
from datetime import date, datetime, time
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core import db as database
from app.core.config import settings
from app.core.db import Base
from app.models import AdminUser, Event, Guest, GuestEventAccess
from app.utils.security import rate_limiter

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_wedding.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

OPEN_FROM = datetime(2020, 1, 1)
DEADLINE = datetime(2099, 12, 31)

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.clear()
    yield
    rate_limiter.clear()

@pytest.fixture
def wedding(db_session):
    """Ceremony with two sub-events, a separate welcome party and three guests"""
    ceremony = Event(
        code="WEDDING",
        name="Wedding Ceremony",
        date=date(2026, 1, 24),
        time_start=time(16, 0),
        time_end=time(17, 30),
        location="St Andrew's Cathedral",
        rsvp_open_date=OPEN_FROM,
        rsvp_deadline=DEADLINE,
        max_plus_ones=2,
    )
    db_session.add(ceremony)
    db_session.flush()

    dinner = Event(
        code="DINNER",
        name="Wedding Dinner",
        parent_event_id=ceremony.id,
        date=date(2026, 1, 24),
        time_start=time(19, 0),
        location="Raffles Hotel",
        maps_link="https://maps.example.com/raffles",
        rsvp_open_date=OPEN_FROM,
        rsvp_deadline=DEADLINE,
        max_plus_ones=2,
    )
    afterparty = Event(
        code="AFTERPARTY",
        name="After Party",
        parent_event_id=ceremony.id,
        date=date(2026, 1, 24),
        time_start=time(22, 30),
        location="Raffles Hotel",
        rsvp_open_date=OPEN_FROM,
        rsvp_deadline=DEADLINE,
    )
    welcome = Event(
        code="WELCOME",
        name="Welcome Drinks",
        date=date(2026, 1, 23),
        time_start=time(18, 0),
        location="Marina Bay Sands",
        rsvp_open_date=OPEN_FROM,
        rsvp_deadline=DEADLINE,
    )
    db_session.add_all([dinner, afterparty, welcome])
    db_session.flush()

    alice = Guest(full_name="Alice Tan", phone_number="+65 9000 0001", dietary="Vegetarian")
    bob = Guest(full_name="bob lee", phone_number="+65 9000 0002")
    carol = Guest(full_name="Carol Ng", is_active=False)
    db_session.add_all([alice, bob, carol])
    db_session.flush()

    for guest, events in (
        (alice, [ceremony, dinner, afterparty, welcome]),
        (bob, [ceremony, dinner]),
        (carol, [ceremony]),
    ):
        for event in events:
            db_session.add(GuestEventAccess(guest_id=guest.id, event_id=event.id))
    db_session.add(GuestEventAccess(guest_id=bob.id, event_id=welcome.id, can_rsvp=False))

    db_session.add(AdminUser(username="Admin", password="s3cret"))
    db_session.commit()

    return {
        "events": {e.code: e.to_dict() for e in (ceremony, dinner, afterparty, welcome)},
        "alice": alice.to_dict(),
        "bob": bob.to_dict(),
        "carol": carol.to_dict(),
    }

@pytest.fixture
def test_sessions(db_session, monkeypatch):
    """Point request handlers and the CLI at the test database"""
    monkeypatch.setattr(database, "SessionLocal", TestingSessionLocal)
    monkeypatch.setattr("app.cli.engine", engine)
    return TestingSessionLocal

@pytest.fixture
def client(test_sessions):
    """API client whose requests use the test database"""
    from main import app
    return TestClient(app)

@pytest.fixture
def guest_client(client, wedding):
    response = client.post("/api/guest/login", json={"full_name": "Alice Tan"})
    assert response.status_code == 200
    return client

@pytest.fixture
def admin_client(client, wedding):
    response = client.post("/api/admin/login", json={"username": "admin", "password": "s3cret"})
    assert response.status_code == 200
    return client

# -------- In-memory Firestore --------

class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None

class FakeDocument:
    def __init__(self, store, doc_id):
        self._store = store
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self._store.get(self.id))

    def set(self, data, merge=False):
        if merge and self.id in self._store:
            self._store[self.id].update(data)
        else:
            self._store[self.id] = dict(data)

    def delete(self):
        self._store.pop(self.id, None)

class FakeQuery:
    def __init__(self, store, filters=(), max_results=None):
        self._store = store
        self._filters = filters
        self._limit = max_results

    def where(self, field, op, value):
        assert op == "=="
        return FakeQuery(self._store, self._filters + ((field, value),), self._limit)

    def limit(self, count):
        return FakeQuery(self._store, self._filters, count)

    def get(self):
        docs = [
            FakeSnapshot(doc_id, data)
            for doc_id, data in self._store.items()
            if all(data.get(field) == value for field, value in self._filters)
        ]
        return docs[:self._limit] if self._limit is not None else docs

class FakeCollection(FakeQuery):
    def document(self, doc_id=None):
        if doc_id is None:
            doc_id = uuid.uuid4().hex
        return FakeDocument(self._store, doc_id)

class FakeFirestore:
    """Just enough of the Firestore client API for the repositories"""

    def __init__(self):
        self.data = {}

    def collection(self, name):
        return FakeCollection(self.data.setdefault(name, {}))

@pytest.fixture
def firestore(monkeypatch):
    """Switch the repositories to an in-memory Firestore"""
    fake = FakeFirestore()
    monkeypatch.setattr(settings, "USE_FIREBASE", True)
    monkeypatch.setattr("app.services.repositories.get_firestore_client", lambda: fake)
    return fake
