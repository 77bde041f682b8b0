"""
Student Record Repository - persistence for the two-row student entity.

A student is a `users` row (role = student) plus exactly one
`user_profiles` row. The single-row helpers (create_user,
create_user_profile, update_user, update_user_profile) only flush; the
compound operations (create_student, update_student, delete_student)
wrap them in one transaction so both rows are written or removed
together.
"""

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from app.database import transaction
from app.errors import InternalError
from app.models.role import Role
from app.models.user import User
from app.models.user_profile import UserProfile
from app.schemas.student import StudentRecord
from app.logging_config import get_logger, log_with_context

logger = get_logger("db")


def _profile_columns(record: StudentRecord) -> dict:
    return {
        "gender": record.gender,
        "phone": record.phone,
        "dob": record.dob,
        "admission_date": record.admission_date,
        "class_name": record.class_name,
        "section_name": record.section_name,
        "roll": record.roll,
        "current_address": record.current_address,
        "permanent_address": record.permanent_address,
        "father_name": record.father_name,
        "father_phone": record.father_phone,
        "mother_name": record.mother_name,
        "mother_phone": record.mother_phone,
        "guardian_name": record.guardian_name,
        "guardian_phone": record.guardian_phone,
        "relation_of_guardian": record.relation_of_guardian,
    }


# ── Lookups ──────────────────────────────────────────────────

def get_role_id(db: Session, role_name: str) -> Optional[int]:
    """Id of the role whose name matches case-insensitively, or None."""
    role = db.query(Role).filter(func.lower(Role.name) == role_name.strip().lower()).first()
    return role.id if role else None


def find_all_students(db: Session, student_role_id: int, filters: dict = None) -> list:
    """
    List student summaries matching all given filters, ordered by id.

    Args:
        filters: any of name, class_name, section_name, roll; empty
                 values are ignored

    Returns:
        List of {id, name, email, lastLogin, systemAccess} dicts
    """
    filters = filters or {}
    query = (
        db.query(User.id, User.name, User.email, User.last_login, User.is_active)
        .outerjoin(UserProfile, UserProfile.user_id == User.id)
        .filter(User.role_id == student_role_id)
    )
    if filters.get("name"):
        query = query.filter(User.name == filters["name"])
    if filters.get("class_name"):
        query = query.filter(UserProfile.class_name == filters["class_name"])
    if filters.get("section_name"):
        query = query.filter(UserProfile.section_name == filters["section_name"])
    if filters.get("roll"):
        query = query.filter(UserProfile.roll == filters["roll"])

    return [
        {
            "id": row.id,
            "name": row.name,
            "email": row.email,
            "lastLogin": row.last_login,
            "systemAccess": row.is_active,
        }
        for row in query.order_by(User.id.asc()).all()
    ]


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    """Any user (student or staff) with this email, compared case-insensitively."""
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def find_student_by_id(db: Session, user_id: int, student_role_id: int) -> Optional[User]:
    return (
        db.query(User)
        .filter(User.id == user_id, User.role_id == student_role_id)
        .first()
    )


def find_student_detail(db: Session, user_id: int) -> Optional[dict]:
    """
    Joined view of user, profile and the reporter's name, keyed by the
    frontend's field names. None when the user row does not exist.
    """
    reporter = aliased(User)
    row = (
        db.query(User, UserProfile, reporter.name.label("reporter_name"))
        .outerjoin(UserProfile, UserProfile.user_id == User.id)
        .outerjoin(reporter, User.reporter_id == reporter.id)
        .filter(User.id == user_id)
        .first()
    )
    if row is None:
        return None

    user, profile, reporter_name = row
    detail = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "systemAccess": user.is_active,
        "reporterName": reporter_name,
        "statusLastReviewedDt": user.status_last_reviewed_dt,
        "statusLastReviewerId": user.status_last_reviewer_id,
    }
    profile_fields = {
        "phone": "phone", "gender": "gender", "dob": "dob",
        "class": "class_name", "section": "section_name", "roll": "roll",
        "fatherName": "father_name", "fatherPhone": "father_phone",
        "motherName": "mother_name", "motherPhone": "mother_phone",
        "guardianName": "guardian_name", "guardianPhone": "guardian_phone",
        "relationOfGuardian": "relation_of_guardian",
        "currentAddress": "current_address", "permanentAddress": "permanent_address",
        "admissionDate": "admission_date",
    }
    for key, column in profile_fields.items():
        detail[key] = getattr(profile, column) if profile else None
    return detail


# ── Single-row steps (flush only, caller owns the transaction) ─

def create_user(db: Session, record: StudentRecord, role_id: int, reporter_id: Optional[int]) -> int:
    user = User(
        name=record.name,
        email=record.email,
        role_id=role_id,
        is_active=record.system_access,
        reporter_id=reporter_id,
        created_at=datetime.now(timezone.utc),
    )
    db.add(user)
    db.flush()
    return user.id


def create_user_profile(db: Session, user_id: int, record: StudentRecord) -> None:
    db.add(UserProfile(user_id=user_id, **_profile_columns(record)))
    db.flush()


def update_user(db: Session, user_id: int, record: StudentRecord, role_id: int) -> int:
    return db.query(User).filter(User.id == user_id).update({
        User.name: record.name,
        User.email: record.email,
        User.role_id: role_id,
        User.is_active: record.system_access,
        User.updated_at: datetime.now(timezone.utc),
    }, synchronize_session=False)


def update_user_profile(db: Session, user_id: int, record: StudentRecord) -> int:
    columns = {getattr(UserProfile, name): value for name, value in _profile_columns(record).items()}
    return db.query(UserProfile).filter(UserProfile.user_id == user_id).update(
        columns, synchronize_session=False)


# ── Compound operations (one transaction each) ───────────────

def create_student(db: Session, record: StudentRecord, role_id: int, reporter_id: Optional[int]) -> int:
    """Insert the user row and its profile row atomically. Returns the new user id."""
    with transaction(db):
        user_id = create_user(db, record, role_id, reporter_id)
        create_user_profile(db, user_id, record)

    log_with_context(logger, "INFO", "Student rows created",
                     context={"user_id": user_id, "reporter_id": reporter_id})
    return user_id


def update_student(db: Session, user_id: int, record: StudentRecord, role_id: int) -> None:
    """
    Replace the user row and profile row atomically.

    A student missing its profile row gets one, restoring the one-profile
    invariant instead of silently updating only the user row.
    """
    with transaction(db):
        update_user(db, user_id, record, role_id)
        if update_user_profile(db, user_id, record) == 0:
            create_user_profile(db, user_id, record)

    log_with_context(logger, "INFO", "Student rows updated", context={"user_id": user_id})


def set_status(db: Session, user_id: int, reviewer_id: int, status: bool) -> int:
    """
    Set is_active together with the review audit columns in one UPDATE.

    Returns:
        Number of user rows affected (0 or 1)
    """
    with transaction(db):
        affected = db.query(User).filter(User.id == user_id).update({
            User.is_active: status,
            User.status_last_reviewed_dt: datetime.now(timezone.utc),
            User.status_last_reviewer_id: reviewer_id,
        }, synchronize_session=False)

    log_with_context(logger, "INFO", "Student status set to {}".format(status),
                     context={"user_id": user_id, "reviewer_id": reviewer_id},
                     extra_data={"affected_rows": affected})
    return affected


def delete_student(db: Session, user_id: int) -> str:
    """
    Delete the profile row, then the user row, in one transaction.

    Raises:
        InternalError: when no user row was deleted (the profile delete is
                       rolled back with it)
    """
    with transaction(db):
        db.query(UserProfile).filter(UserProfile.user_id == user_id).delete(synchronize_session=False)
        deleted = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        if deleted <= 0:
            raise InternalError("Unable to delete student")

    log_with_context(logger, "INFO", "Student rows deleted", context={"user_id": user_id})
    return "Student deleted successfully"
