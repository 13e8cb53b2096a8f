"""Pytest configuration and fixtures."""

import os

# Keep the app from synchronizing the development database schema on startup
os.environ["ENVIRONMENT"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.database import Base, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.models.user import User  # noqa: E402


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


STRATOCASTER = {
    "model": "Stratocaster",
    "brandName": "Fender",
    "type": "Electric",
    "strings": 6,
    "condition": "New",
    "price": 733,
}


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/guitars_db", "/guitars_db_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    # Rebuild so a test.db left by an older schema never leaks in
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email: str, password: str = "testpass123", name: str = "Test User"):
    """Register a user and return auth headers for them."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201
    data = response.json()
    return AuthHeaders(
        {"Authorization": f"Bearer {data['access_token']}"},
        user_id=data["user"]["id"],
        email=email,
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register(client, "test@example.com")


@pytest.fixture
def other_auth_headers(client):
    """A second user, for checking that inventories are kept apart."""
    return register(client, "other@example.com", name="Other User")


@pytest.fixture
def create_guitar(client, auth_headers):
    """Create guitars through the API for the default user."""

    def _create(headers=None, **overrides):
        response = client.post(
            "/api/v1/guitars",
            headers=headers or auth_headers,
            json={**STRATOCASTER, **overrides},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def owner(db):
    """A user row for service-level tests."""
    user = User(email="owner@example.com", password_hash="not-a-real-hash", name="Owner")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
