"""
Shared pytest fixtures: isolated in-memory database, API client, signed-in headers
and a patient record factory.
"""
import os
import tempfile

# Configure before any odontoflow import so module-level settings pick it up
_TMP_DIR = tempfile.mkdtemp(prefix="odontoflow-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP_DIR}/odontoflow-test.db")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("LOCAL_CACHE_DIR", os.path.join(_TMP_DIR, "cache"))

import uuid  # noqa: E402
from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from odontoflow.main import app  # noqa: E402
from odontoflow.models.base import Base, get_db  # noqa: E402
from odontoflow.schemas import PatientRecord  # noqa: E402

TEST_EMAIL = "staff@clinic.test"
TEST_PASSWORD = "secret-pass"


def local_dt(year, month, day, hour=12, minute=0):
    """Timezone-aware datetime at the given wall-clock time in the local zone."""
    return datetime(year, month, day, hour, minute).astimezone()


@pytest.fixture()
def session_factory():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield TestSession
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def client(session_factory):
    """FastAPI TestClient bound to the per-test database."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def tokens(client):
    """Sign up and log in the test user; returns the token pair."""
    resp = client.post("/api/v1/auth/signup", json={"email": TEST_EMAIL, "password": TEST_PASSWORD})
    assert resp.status_code == 201
    resp = client.post("/api/v1/auth/login", json={"email": TEST_EMAIL, "password": TEST_PASSWORD})
    assert resp.status_code == 200
    return resp.json()


@pytest.fixture()
def auth_headers(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture()
def make_record():
    """Build a PatientRecord with sensible defaults."""
    def _make(name="Paciente", classification="MA", procedures=None, notes=None, created_at=None, id=None):
        return PatientRecord(
            id=id or str(uuid.uuid4()),
            name=name,
            classification=classification,
            procedures=procedures if procedures is not None else ["Urgência"],
            notes=notes,
            created_at=created_at or local_dt(2026, 3, 10),
        )
    return _make
