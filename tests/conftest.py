"""
Shared test fixtures and configuration.

Provides reusable fixtures for all test files including database instances,
sessions for both roles, a seeded competition, and FastAPI test clients.
"""

import pytest
import os
import shutil
import tempfile
from datetime import date, datetime, timezone
from unittest.mock import patch

from fastapi.testclient import TestClient

from challenge.api.dependencies import get_db, get_identity
from challenge.api.rate_limit import test_data_rate_limiter
from challenge.auth.local import LocalIdentityProvider
from challenge.auth.session_store import SessionStore
from challenge.main import app
from challenge.models import CompetitionStatus, Session, UserRole
from challenge.services import CompetitionService
from challenge.storage import get_database, reset_database


COMPETITION_YEAR = 2025
COMPETITION_START = date(2025, 1, 6)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def test_data_dir():
    """Provide a temporary directory for test data."""
    temp_dir = tempfile.mkdtemp(prefix="challenge_test_")
    yield temp_dir

    # Cleanup
    if os.path.exists(temp_dir):
        try:
            shutil.rmtree(temp_dir)
        except PermissionError:
            pass  # Windows file locking, ignore


@pytest.fixture
def db_fixture(test_data_dir):
    """Provide a clean test database instance."""
    with patch.dict(os.environ, {'DB_TYPE': 'sqlite', 'DATA_DIR': test_data_dir}, clear=False):
        reset_database()
        db = get_database()
        yield db
        reset_database()  # Close connection before cleanup


# =============================================================================
# SESSION FIXTURES
# =============================================================================

def _user_doc(uid: str, email: str, name: str, role: UserRole) -> dict:
    return {
        'uid': uid,
        'email': email,
        'displayName': name,
        'role': role.value,
        'createdAt': datetime(2025, 1, 1, tzinfo=timezone.utc).isoformat(),
        'lastLoginAt': None,
    }


@pytest.fixture
def admin_session() -> Session:
    return Session(uid='admin-1', email='admin@example.com', display_name='Admin', role=UserRole.ADMIN)


@pytest.fixture
def alice_session() -> Session:
    return Session(uid='alice-1', email='alice@example.com', display_name='Alice', role=UserRole.REGULAR)


@pytest.fixture
def bob_session() -> Session:
    return Session(uid='bob-1', email='bob@example.com', display_name='Bob', role=UserRole.REGULAR)


@pytest.fixture
def seeded_users(db_fixture, admin_session, alice_session, bob_session):
    """Store user documents for the three sessions."""
    for session in (admin_session, alice_session, bob_session):
        db_fixture.save_user(_user_doc(session.uid, session.email, session.display_name, session.role))
    return db_fixture


@pytest.fixture
def competition(db_fixture, admin_session):
    """An active competition starting on a Monday in January."""
    return CompetitionService(db_fixture).create_competition(
        admin_session,
        COMPETITION_YEAR,
        COMPETITION_START,
        status=CompetitionStatus.ACTIVE,
    )


# =============================================================================
# AUTH FIXTURES
# =============================================================================

@pytest.fixture
def identity():
    """Local identity provider with cheap password hashing."""
    provider = LocalIdentityProvider(store=SessionStore(), iterations=1000)
    yield provider
    provider.close()


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture
def client(db_fixture, identity):
    """Test client wired to the temporary database and local identity provider."""
    app.dependency_overrides[get_db] = lambda: db_fixture
    app.dependency_overrides[get_identity] = lambda: identity
    test_data_rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    test_data_rate_limiter.reset()


def register(client, email: str, name: str, password: str = "secret123") -> dict:
    """Register through the API and return the session payload."""
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "displayName": name},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_header(payload: dict) -> dict:
    return {"Authorization": f"Bearer {payload['token']}"}


@pytest.fixture
def admin_auth(client, db_fixture):
    """Registered admin account; returns its Authorization header."""
    payload = register(client, "admin@example.com", "Admin")
    db_fixture.update_user(payload['user']['uid'], {'role': 'admin'})
    return auth_header(payload)


@pytest.fixture
def alice(client):
    """Registered regular account: (payload, header)."""
    payload = register(client, "alice@example.com", "Alice")
    return payload, auth_header(payload)


@pytest.fixture
def bob(client):
    """Registered regular account: (payload, header)."""
    payload = register(client, "bob@example.com", "Bob")
    return payload, auth_header(payload)
