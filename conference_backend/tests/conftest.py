"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for:
- In-memory and SQLite-backed document stores
- Bearer credential factory
- Sample document factories (conference, session, person, activity, ...)
- FastAPI test client with dependency overrides
"""

import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

_TEST_JWT_SECRET = "test-secret-key-for-conference-backend-0123456789"

# Set test environment variables before importing app modules
os.environ['JWT_SECRET_KEY'] = _TEST_JWT_SECRET
os.environ['CONFERENCE_STORE_BACKEND'] = 'memory'
os.environ['CONFERENCE_DB_URL'] = 'sqlite:///:memory:'
os.environ['DASHBOARD_SCHEDULER_ENABLED'] = 'false'

from conference_backend.src.models import Base
from conference_backend.src.services.authorization_service import CredentialResolver
from conference_backend.src.store import collections
from conference_backend.src.store.memory_store import InMemoryDocumentStore
from conference_backend.src.store.sql_store import SqlDocumentStore


ORGANIZER_EMAIL = "organizer@example.com"


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def store():
    """Create an empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def sql_store(test_db_engine):
    """Create a SqlDocumentStore over the test engine."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )
    return SqlDocumentStore(TestingSessionLocal)


# ============================================================================
# Credential Fixtures
# ============================================================================

@pytest.fixture
def credential_resolver():
    """CredentialResolver using the test secret."""
    return CredentialResolver(jwt_secret=_TEST_JWT_SECRET)


@pytest.fixture
def auth_header(credential_resolver):
    """Factory for Authorization headers."""
    def _create(email=ORGANIZER_EMAIL, expires_in_minutes=30):
        token = credential_resolver.issue_token(email, expires_in_minutes=expires_in_minutes)
        return {"Authorization": f"Bearer {token}"}
    return _create


# ============================================================================
# Sample Data Factories
# ============================================================================

def make_days(dates=("2024-01-10", "2024-01-11", "2024-01-12"), with_slots=True):
    """Build conference days with one session slot and one break per day."""
    days = []
    for index, day_date in enumerate(dates):
        days.append({
            "id": f"day-{index + 1}",
            "dayIndex": index,
            "date": day_date,
            "beginTime": "08:30",
            "endTime": "19:00",
            "slots": [
                {
                    "id": f"slot-{index + 1}-a",
                    "roomId": "room-1",
                    "slotTypeId": "Session",
                    "sessionTypeId": "talk",
                    "startTime": "09:00",
                    "duration": 45,
                    "overflowRoomIds": [],
                },
                {
                    "id": f"slot-{index + 1}-b",
                    "roomId": "room-1",
                    "slotTypeId": "break",
                    "startTime": "10:00",
                    "duration": 15,
                    "overflowRoomIds": [],
                },
            ] if with_slots else [],
            "disabledRoomIds": ["room-2"] if with_slots else [],
        })
    return days


@pytest.fixture
def day_factory():
    """The make_days helper as a fixture."""
    return make_days


@pytest.fixture
def sample_conference(store):
    """Factory for conference documents."""
    def _create(
        conference_id="conf-1",
        name="DevCon",
        edition=5,
        organizer_emails=(ORGANIZER_EMAIL,),
        days=None,
        **extra
    ):
        data = {
            "id": conference_id,
            "name": name,
            "edition": edition,
            "organizerEmails": list(organizer_emails),
            "days": make_days() if days is None else days,
            "rooms": [{"id": "room-1", "name": "Main"}, {"id": "room-2", "name": "Side"}],
            "tracks": [{"id": "track-1", "name": "Cloud"}],
            "sessionTypes": [{"id": "talk", "name": "Talk"}],
            "sponsoring": {"levels": ["gold"]},
        }
        data.update(extra)
        store.set(collections.CONFERENCE, conference_id, data)
        return data
    return _create


@pytest.fixture
def sample_session(store):
    """Factory for session documents."""
    counter = {"n": 0}

    def _create(
        conference_id="conf-1",
        status="SUBMITTED",
        session_type_id="talk",
        speakers=("sp-1",),
        session_id=None,
    ):
        counter["n"] += 1
        session_id = session_id or f"session-{counter['n']}"
        data = {
            "title": f"Session {counter['n']}",
            "conference": {
                "conferenceId": conference_id,
                "status": status,
                "sessionTypeId": session_type_id,
                "trackId": "track-1",
            },
        }
        for index, speaker_id in enumerate(speakers, start=1):
            data[f"speaker{index}Id"] = speaker_id
        store.set(collections.SESSION, session_id, data)
        return session_id
    return _create


@pytest.fixture
def sample_person(store):
    """Factory for person documents with their email index."""
    def _create(person_id, email, submitted_conference_ids, has_account=False):
        store.set(collections.PERSON, person_id, {
            "id": person_id,
            "email": email,
            "hasAccount": has_account,
            "speaker": {"submittedConferenceIds": list(submitted_conference_ids)},
        })
        store.set(collections.PERSON_EMAILS, email.strip().lower(), {"personId": person_id})
        return person_id
    return _create


@pytest.fixture
def sample_activity(store):
    """Factory for activity documents."""
    def _create(activity_id, conference_id="conf-1", start="2024-01-10T18:30:00Z",
                end="2024-01-10T20:00:00Z", slot_id="slot-1-a"):
        store.set(collections.ACTIVITY, activity_id, {
            "id": activity_id,
            "conferenceId": conference_id,
            "name": f"Activity {activity_id}",
            "start": start,
            "end": end,
            "slotId": slot_id,
        })
        return activity_id
    return _create


@pytest.fixture
def populated_conference(store, sample_conference, sample_session, sample_person, sample_activity):
    """A conference with one record in every dependent collection."""
    conference = sample_conference()
    conference_id = conference["id"]
    session_id = sample_session(conference_id=conference_id, speakers=("sp-1", "sp-2"))
    sample_person("sp-1", "Alice@Example.com ", [conference_id])
    sample_activity("act-1", conference_id=conference_id)
    store.set(collections.CONFERENCE_SPEAKER, "cs-1", {"conferenceId": conference_id, "personId": "sp-1"})
    store.set(collections.ACTIVITY_PARTICIPATION, "ap-1", {"conferenceId": conference_id, "activityId": "act-1"})
    store.set(collections.SESSION_ALLOCATION, "alloc-1", {
        "conferenceId": conference_id, "dayId": "day-1", "slotId": "slot-1-a",
        "roomId": "room-1", "sessionId": session_id,
    })
    store.set(collections.CONFERENCE_SECRET, "secret-1", {"conferenceId": conference_id, "secretName": "api"})
    store.set(collections.CONFERENCE_HALL_CONFIG, "hall-1", {
        "conferenceId": conference_id, "lastCommunication": "2024-01-02T10:00:00Z",
    })
    store.set(collections.VOXXRIN_CONFIG, conference_id, {"id": conference_id, "conferenceId": conference_id})
    return conference


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def test_client(store, credential_resolver):
    """Create a test client for FastAPI application."""
    from fastapi.testclient import TestClient
    from conference_backend.src.main import app
    from conference_backend.src.dependencies import get_credential_resolver, get_document_store

    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_credential_resolver] = lambda: credential_resolver

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
