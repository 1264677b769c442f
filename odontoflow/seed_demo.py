"""
Demo data seeder for OdontoFlow.

Creates a demo staff account with known credentials plus a handful of patient
records so the dashboard has something to show right after a fresh start.

Credentials (printed to stdout on first run):
  Staff: demo@odontoflow.demo / Demo1234!

This seeder is idempotent — it is safe to call on every startup.
"""
from datetime import timedelta

from .models.base import SessionLocal, Base, engine, generate_uuid, utcnow
from .models.user import User
from .models.patient import Patient, Classification
from .core.security import get_password_hash

DEMO_EMAIL = "demo@odontoflow.demo"
DEMO_PASSWORD = "Demo1234!"

DEMO_PATIENTS = [
    # (name, classification, procedures, notes, days ago)
    ("Maria Souza", Classification.MA,
     ["Avaliação odontológica inicial", "Profilaxia (polimento coronário)"], None, 6),
    ("João Pereira", Classification.MI,
     ["Urgência", "Exodontia simples"], "Dor intensa no 36.", 3),
    ("Ana Lima", Classification.DD,
     ["Restauração de resina (até 3 faces)", "Orientação de higiene oral"], None, 1),
    ("Carlos Mendes", Classification.FAB_EB,
     ["Raspagem supragengival", "Profilaxia (polimento coronário)"], None, 0),
]


def seed_demo_data() -> None:
    """Create the demo account and patients if they do not already exist."""
    # Ensure tables exist (no-op when already created by main.py)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        _seed_user(db)
        _seed_patients(db)
    finally:
        db.close()


# ── helpers ──────────────────────────────────────────────────────────────────

def _seed_user(db) -> None:
    if not db.query(User).filter(User.email == DEMO_EMAIL).first():
        user = User(
            id=generate_uuid(),
            email=DEMO_EMAIL,
            hashed_password=get_password_hash(DEMO_PASSWORD),
        )
        db.add(user)
        db.commit()
        print(f"[seed] Created demo user   : {DEMO_EMAIL} / {DEMO_PASSWORD}")


def _seed_patients(db) -> None:
    now = utcnow()
    created = 0
    for name, classification, procedures, notes, days_ago in DEMO_PATIENTS:
        if db.query(Patient).filter(Patient.name == name).first():
            continue
        db.add(Patient(
            id=generate_uuid(),
            name=name,
            classification=classification,
            procedures=procedures,
            notes=notes,
            created_at=now - timedelta(days=days_ago),
        ))
        created += 1
    if created:
        db.commit()
        print(f"[seed] Created {created} demo patient(s)")
