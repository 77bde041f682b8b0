"""Shared fixtures: a throwaway SQLite database seeded with reference data."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_school_records.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date

import pytest

from app.config import Settings
from app.database import SessionLocal, create_tables, drop_tables
from app.errors import NotificationError
from app.models import Role, User, SchoolClass, Section
from app.schemas.student import shift_years
from app.services.student_service import StudentService

ADMIN_ID = 1
TEACHER_ID = 2


class FakeNotifier:
    """Records verification emails instead of sending them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send_account_verification_email(self, user_id, email):
        if self.fail:
            raise NotificationError("SMTP unreachable")
        self.sent.append((user_id, email))


@pytest.fixture(autouse=True)
def setup_database():
    create_tables()
    yield
    drop_tables()


@pytest.fixture()
def seeded(setup_database):
    db = SessionLocal()
    try:
        db.add_all([Role(id=1, name="Admin"), Role(id=2, name="Teacher"), Role(id=3, name="Student")])
        db.flush()
        db.add_all([
            User(id=ADMIN_ID, name="Admin", email="admin@school.test", role_id=1, is_active=True),
            User(id=TEACHER_ID, name="Teacher", email="teacher@school.test", role_id=2, is_active=True),
        ])
        db.add_all([Section(name="A"), Section(name="B"), Section(name="C")])
        db.add_all([
            SchoolClass(name="Grade 1", sections="A, B"),
            SchoolClass(name="Grade 2", sections="A"),
            SchoolClass(name="Grade 3", sections=""),
        ])
        db.commit()
    finally:
        db.close()


@pytest.fixture()
def db(seeded):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def settings():
    return Settings(status_reviewer_ids=frozenset({ADMIN_ID}))


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def service(db, notifier, settings):
    return StudentService(db, notifier, settings)


@pytest.fixture()
def student_payload():
    return {
        "name": "  Asha Verma ",
        "email": " Asha.Verma@Example.COM ",
        "gender": "Female",
        "phone": "+91 98765 43210",
        "dob": shift_years(date.today(), -10).isoformat(),
        "class": "Grade 1",
        "section": "B",
        "roll": "7",
        "fatherName": "Raj Verma",
        "fatherPhone": "",
        "motherName": "Meera Verma",
        "motherPhone": None,
        "guardianName": "Raj Verma",
        "guardianPhone": "98765-43211",
        "relationOfGuardian": "Father",
        "currentAddress": "12 Lake Road",
        "permanentAddress": "12 Lake Road",
        "admissionDate": "2024-04-01",
        "systemAccess": True,
    }
