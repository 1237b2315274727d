import os
from datetime import timedelta
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from roomres.main import app
from roomres.db import Base, enable_sqlite_foreign_keys, get_db
from roomres.live import LiveQueryHub, get_hub
from roomres.models.reservation import Reservation  # noqa: F401
from roomres.models.room import Room
from roomres.utils.auth import Identity, create_access_token
from roomres.utils.timeutils import utcnow

# Test database setup
if not os.path.exists("./out"):
    os.makedirs("./out")

SQLALCHEMY_DATABASE_URL = "sqlite:///./out/tests.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create test tables
Base.metadata.create_all(bind=engine)

test_hub = LiveQueryHub(TestingSessionLocal)


# Dependency override
def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_hub] = lambda: test_hub

client = TestClient(app)


# Fixtures
@pytest.fixture(autouse=True)
def clear_db():
    """Clear all data from all tables after each test"""
    with engine.connect() as conn:
        trans = conn.begin()
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
        trans.commit()


@pytest.fixture
def test_db():
    """Provide a database session for testing"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def hub():
    return test_hub


def get_next_user():
    """Helper function to generate unique user ids"""
    if not hasattr(get_next_user, "user_count"):
        get_next_user.user_count = 0
    get_next_user.user_count += 1
    return get_next_user.user_count


@pytest.fixture
def test_identity():
    """Fixture for a signed-in identity with a unique id"""
    number = get_next_user()
    return Identity(id=f"user_{number}", email=f"user_{number}@example.com")


@pytest.fixture
def auth_headers(test_identity):
    """Fixture to get authentication headers for test_identity"""
    token = create_access_token({"sub": test_identity.id, "email": test_identity.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_room(test_db):
    room = Room(
        id="conference-a",
        name="Conference Room A",
        building="Main Building",
        floor="Floor 1",
        capacity=10,
        amenities=["Whiteboard"],
    )
    test_db.add(room)
    test_db.commit()
    test_db.refresh(room)
    return room


def slot(hours_from_now: float, length_hours: float = 1):
    """Return a (start, end) pair on a whole hour, some hours from now."""
    base = utcnow().replace(minute=0, second=0, microsecond=0)
    start = base + timedelta(hours=hours_from_now)
    return start, start + timedelta(hours=length_hours)
