"""
Pytest configuration and fixtures

Tests run against a throwaway SQLite database (override with
TEST_DATABASE_URL). The schema is built once per session from the Alembic
migrations, and every table is emptied after each test.
"""
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

_DB_DIR = tempfile.mkdtemp(prefix="bpm-tracker-tests-")
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", f"sqlite:///{_DB_DIR}/test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-at-least-32-chars")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FORMAT", "text")

from fastapi.testclient import TestClient

from core.database import Base, SessionLocal, engine
from core.security import create_access_token, get_password_hash
from models import User, Exercise, History


@pytest.fixture(scope="session", autouse=True)
def _ensure_db_schema_is_at_head():
    """Build the test database schema from the Alembic migrations."""
    try:
        from alembic import command
        from alembic.config import Config

        api_root = Path(__file__).resolve().parents[1]
        cfg = Config(str(api_root / "alembic.ini"))
        # script_location in alembic.ini is relative ("alembic")
        cfg.set_main_option("script_location", str(api_root / "alembic"))
        command.upgrade(cfg, "head")
    except Exception as e:
        # Tests should fail loudly if migrations cannot be applied.
        raise RuntimeError(f"Failed to upgrade DB to Alembic head: {e}") from e


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty every table after each test (children first)."""
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def client():
    from main import app
    return TestClient(app)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_user(db_session):
    """Insert a user directly; returns the ORM row."""
    def _make(username="alice", email="alice@x.com", password="pw12345") -> User:
        user = User(username=username, email=email, password_hash=get_password_hash(password))
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_exercise(db_session):
    def _make(user: User, name="Run", **fields) -> Exercise:
        exercise = Exercise(name=name, user_id=user.id, **fields)
        db_session.add(exercise)
        db_session.commit()
        db_session.refresh(exercise)
        return exercise
    return _make


@pytest.fixture
def make_history(db_session):
    def _make(exercise: Exercise, bpm=120, **fields) -> History:
        entry = History(bpm=bpm, exercise_id=exercise.id, **fields)
        db_session.add(entry)
        db_session.commit()
        db_session.refresh(entry)
        return entry
    return _make


def get_auth_headers(user: User) -> dict:
    """Generate auth headers for a test user"""
    token = create_access_token({"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return get_auth_headers
