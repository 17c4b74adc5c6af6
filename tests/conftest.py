"""
Taskboard API - Test Configuration

Shared fixtures for CI-safe testing without MongoDB.
"""

import pytest
from datetime import datetime, timezone, timedelta
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from taskboard.main import app
from taskboard.auth.dependencies import get_auth_service, get_user_repository
from taskboard.auth.repository import InMemoryUserRepository
from taskboard.auth.service import AuthService
from taskboard.auth.tokens import TokenCodec, TokenSettings, get_token_codec
from taskboard.database import get_database
from taskboard.tasks.repository import InMemoryTaskRepository
from taskboard.tasks.router import get_task_repository
from taskboard.tasks.service import TaskService


TEST_SECRET = "test-secret-key-with-at-least-32-characters"

# Lowest bcrypt work factor, keeps hashing fast in tests
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def token_codec() -> TokenCodec:
    """Codec signing with a per-suite test secret."""
    return TokenCodec(TokenSettings(secret_key=TEST_SECRET))


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    """Provide a fresh in-memory user repository for each test."""
    return InMemoryUserRepository()


@pytest.fixture
def task_repository(user_repository) -> InMemoryTaskRepository:
    """Provide a fresh in-memory task repository joined to the user repository."""
    return InMemoryTaskRepository(users=user_repository)


@pytest.fixture
def auth_service(user_repository, token_codec) -> AuthService:
    return AuthService(user_repository, token_codec, rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def client(user_repository, task_repository, token_codec, auth_service):
    """Create test client with in-memory repositories."""
    app.dependency_overrides[get_user_repository] = lambda: user_repository
    app.dependency_overrides[get_task_repository] = lambda: task_repository
    app.dependency_overrides[get_token_codec] = lambda: token_codec
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    # Nothing should reach MongoDB; a mock keeps stray dependencies resolvable
    app.dependency_overrides[get_database] = lambda: MagicMock()

    yield TestClient(app)
    # Clean up override after test
    app.dependency_overrides.clear()


@pytest.fixture
def registered_user(client):
    """Register a test user and return credentials."""
    credentials = {
        "firstname": "Test",
        "lastname": "User",
        "email": "test@example.com",
        "password": "testpassword123",
    }
    response = client.post("/auth/register", json=credentials)
    assert response.status_code == 201
    return {**credentials, "id": response.json()["user"]["id"]}


@pytest.fixture
def auth_token(client, registered_user):
    """Get an auth token for the registered user."""
    response = client.post(
        "/auth/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )
    return response.json()["token"]


@pytest.fixture
def auth_headers(auth_token):
    """Create Authorization headers for authenticated requests."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def second_user(client):
    """Register a second user, e.g. to assign tasks to."""
    response = client.post(
        "/auth/register",
        json={
            "firstname": "Second",
            "lastname": "User",
            "email": "second@example.com",
            "password": "secondpassword123",
        },
    )
    return response.json()["user"]


# Time control fixtures for deterministic deadline testing
class FrozenClock:
    """A clock that returns a fixed time for deterministic testing."""

    def __init__(self, frozen_time: datetime):
        self._frozen_time = frozen_time

    def __call__(self) -> datetime:
        return self._frozen_time

    def set(self, new_time: datetime) -> None:
        self._frozen_time = new_time

    def advance(self, delta: timedelta) -> None:
        self._frozen_time += delta


@pytest.fixture
def frozen_now() -> datetime:
    """A fixed 'now' time for testing."""
    return datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def frozen_clock(frozen_now) -> FrozenClock:
    """A controllable clock for deadline testing."""
    return FrozenClock(frozen_now)


@pytest.fixture
def task_service(task_repository, user_repository, frozen_clock) -> TaskService:
    """Task service running on the frozen clock."""
    return TaskService(task_repository, user_repository, clock=frozen_clock)


@pytest.fixture
def user_fields():
    """Build repository-level fields for creating a user directly."""

    def build(email: str = "someone@example.com", **overrides) -> dict:
        fields = {
            "firstname": "Some",
            "lastname": "One",
            "email": email,
            "password_hash": "$2b$04$notarealhashnotarealhashnotarealhashnotarealhas",
        }
        fields.update(overrides)
        return fields

    return build
