"""Pytest fixtures and configuration for attentiontower tests."""

import os

# Keep the app's module-level engine off the developer database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
import uuid

from attentiontower.database.database import Base
from attentiontower.database.repository import TowerItemRepository
from attentiontower.models.tower_item import TowerItem, TowerStatus


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Fixed "today" used throughout the engine tests
FIXED_NOW = datetime(2026, 1, 20, 9, 0, 0)


@pytest.fixture(scope="function")
def db_session(test_user_id):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    Also creates a test user in the database.
    """
    from attentiontower.database import models  # noqa: F401
    from attentiontower.database.models import UserDB

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    # Create test user (required for foreign key constraints)
    now = datetime.utcnow()
    session.add(UserDB(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    ))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def item_repository(db_session: Session):
    """Create a TowerItemRepository instance for testing."""
    return TowerItemRepository(db_session)


@pytest.fixture
def test_user_id():
    """Test user ID for owner scoping."""
    return "test-user-123"


@pytest.fixture
def now():
    """Frozen current time: 2026-01-20 09:00 (naive UTC)."""
    return FIXED_NOW


@pytest.fixture
def sample_item_base(test_user_id, now):
    """Base item data for creating test items.

    Returns a dict with default item attributes that can be overridden.
    """
    return {
        "id": str(uuid.uuid4()),
        "user_id": test_user_id,
        "text": "Test item",
        "status": TowerStatus.ACTIVE,
        "is_event": False,
        "expects_by": None,
        "waiting_on": None,
        "effort": None,
        "last_touched": now,
        "created_at": now,
        "done_at": None,
    }


@pytest.fixture
def make_item(sample_item_base):
    """Factory fixture: build a TowerItem from overrides with a fresh id."""
    def _make(**overrides) -> TowerItem:
        return TowerItem(**{**sample_item_base, "id": str(uuid.uuid4()), **overrides})
    return _make


@pytest.fixture
def sample_item(make_item):
    """Create a sample active action with no date."""
    return make_item()


@pytest.fixture
def days_ago(now):
    """Helper returning a timestamp N days before the frozen now."""
    def _days_ago(days: float) -> datetime:
        return now - timedelta(days=days)
    return _days_ago


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    from attentiontower.models.user import User
    now = datetime.utcnow()
    return User(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def test_client(db_session: Session, test_user):
    """Create a FastAPI test client with overridden database, auth and AI dependencies."""
    from attentiontower.api.app import app, get_ai_client
    from attentiontower.database.database import get_db
    from attentiontower.auth.dependencies import get_current_user

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    def override_get_current_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_ai_client] = lambda: None

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
