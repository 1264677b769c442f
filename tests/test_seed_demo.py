"""Tests for the demo data seeder."""
import pytest

from odontoflow.models.user import User
from odontoflow.models.patient import Patient, Classification, PROCEDURES
from odontoflow.seed_demo import seed_demo_data, DEMO_EMAIL, DEMO_PASSWORD, DEMO_PATIENTS


@pytest.fixture()
def in_memory_db(monkeypatch, session_factory):
    """Point the seeder at the isolated per-test database."""
    import odontoflow.seed_demo as sd

    engine = session_factory.kw["bind"]
    monkeypatch.setattr(sd, "engine", engine)
    monkeypatch.setattr(sd, "SessionLocal", session_factory)

    db = session_factory()
    yield db
    db.close()


class TestSeedDemoData:
    def test_creates_demo_user(self, in_memory_db):
        seed_demo_data()
        user = in_memory_db.query(User).filter(User.email == DEMO_EMAIL).first()
        assert user is not None
        assert user.is_active is True

    def test_creates_demo_patients(self, in_memory_db):
        seed_demo_data()
        patients = in_memory_db.query(Patient).all()
        assert len(patients) == len(DEMO_PATIENTS)
        for patient in patients:
            assert patient.classification in Classification.ALL
            assert patient.procedures
            assert all(p in PROCEDURES for p in patient.procedures)

    def test_idempotent_on_second_call(self, in_memory_db):
        """Calling seed_demo_data twice must not create duplicate records."""
        seed_demo_data()
        seed_demo_data()
        assert in_memory_db.query(User).filter(User.email == DEMO_EMAIL).count() == 1
        assert in_memory_db.query(Patient).count() == len(DEMO_PATIENTS)

    def test_demo_password_is_hashed(self, in_memory_db):
        """Passwords must be stored as bcrypt hashes, not plain text."""
        seed_demo_data()
        from odontoflow.core.security import verify_password

        user = in_memory_db.query(User).filter(User.email == DEMO_EMAIL).first()
        assert user.hashed_password != DEMO_PASSWORD
        assert verify_password(DEMO_PASSWORD, user.hashed_password)
