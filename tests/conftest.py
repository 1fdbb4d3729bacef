"""Shared test fixtures: in-memory database, API client and a fake clock."""

import os

# Must be set before fxrates.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from fxrates.database import Base, get_db  # noqa: E402
from fxrates.main import app  # noqa: E402
from fxrates.rate_limiter import limiter  # noqa: E402

TEST_USERNAME = "alice"
TEST_PASSWORD = "Secure-pass-123"


class FakeClock:
    """Manually advanced monotonic clock for cache expiry tests."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    # Use StaticPool to share same connection across all threads
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_maker(engine):
    """Session factory configured like SessionLocal, bound to the test engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_maker):
    """Database session for direct repository/service tests."""
    session = session_maker()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_maker):
    """Test client with the in-memory database swapped in for get_db."""
    # Clear rate limiter storage between tests
    limiter.reset()

    def override_get_db():
        db = session_maker()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def register_and_login(test_client: TestClient, username: str, password: str) -> str:
    """Register a user and return a fresh access token."""
    test_client.post("/register", json={"username": username, "password": password})
    response = test_client.post("/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def auth_headers(client):
    token = register_and_login(client, TEST_USERNAME, TEST_PASSWORD)
    return {"Authorization": f"Bearer {token}"}
