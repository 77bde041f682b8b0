"""Tests for the StudentService operations against a SQLite database."""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from app.config import Settings
from app.errors import (
    AuthorizationError, ConflictError, InternalError, NotFoundError, ValidationError,
)
from app.models import User, UserProfile
from app.services.student_service import (
    ADD_STUDENT_AND_EMAIL_SEND_SUCCESS, ADD_STUDENT_BUT_EMAIL_SEND_FAIL, StudentService,
)

from conftest import ADMIN_ID, TEACHER_ID, FakeNotifier


def _count(db, model):
    db.expire_all()
    return db.query(model).count()


def test_add_student_creates_user_and_profile(service, db, notifier, student_payload):
    result = service.add_student(student_payload, reporter_id=ADMIN_ID)

    assert result["message"] == ADD_STUDENT_AND_EMAIL_SEND_SUCCESS
    user = db.get(User, result["userId"])
    assert user.email == "asha.verma@example.com"
    assert user.role_id == 3
    assert user.reporter_id == ADMIN_ID
    assert user.is_active is True
    assert user.profile.section_name == "B"
    assert user.profile.roll == 7
    assert notifier.sent == [(result["userId"], "asha.verma@example.com")]


def test_add_then_detail_round_trips_normalized_fields(service, student_payload):
    user_id = service.add_student(student_payload, reporter_id=ADMIN_ID)["userId"]

    detail = service.get_student_detail(user_id)

    assert detail["id"] == user_id
    assert detail["name"] == "Asha Verma"
    assert detail["email"] == "asha.verma@example.com"
    assert detail["gender"] == "female"
    assert detail["phone"] == "+91 98765 43210"
    assert detail["dob"] == date.fromisoformat(student_payload["dob"])
    assert detail["class"] == "Grade 1"
    assert detail["section"] == "B"
    assert detail["roll"] == 7
    assert detail["fatherName"] == "Raj Verma"
    assert detail["fatherPhone"] is None
    assert detail["motherName"] == "Meera Verma"
    assert detail["guardianPhone"] == "98765-43211"
    assert detail["relationOfGuardian"] == "Father"
    assert detail["currentAddress"] == "12 Lake Road"
    assert detail["admissionDate"] == date(2024, 4, 1)
    assert detail["systemAccess"] is True
    assert detail["reporterName"] == "Admin"


def test_add_student_with_duplicate_email_conflicts_without_writes(service, db, student_payload):
    service.add_student(student_payload)
    users_before = _count(db, User)

    duplicate = dict(student_payload, email="ASHA.VERMA@example.com ", name="Someone Else")
    with pytest.raises(ConflictError) as exc_info:
        service.add_student(duplicate)

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "Email already exists"
    assert _count(db, User) == users_before
    assert _count(db, UserProfile) == 1


def test_add_student_email_failure_is_not_fatal(db, settings, student_payload):
    service = StudentService(db, FakeNotifier(fail=True), settings)

    result = service.add_student(student_payload)

    assert result["message"] == ADD_STUDENT_BUT_EMAIL_SEND_FAIL
    assert db.get(User, result["userId"]) is not None


def test_add_student_defaults_reporter_from_settings(service, db, student_payload):
    user_id = service.add_student(student_payload)["userId"]

    assert db.get(User, user_id).reporter_id == ADMIN_ID


def test_add_student_rejects_unknown_class_without_writes(service, db, student_payload):
    with pytest.raises(ValidationError) as exc_info:
        service.add_student(dict(student_payload, **{"class": "Grade 9"}))

    assert exc_info.value.fields() == ["class"]
    assert _count(db, UserProfile) == 0


def test_add_student_rejects_invalid_payload(service, notifier):
    with pytest.raises(ValidationError) as exc_info:
        service.add_student({"name": "Only a name"})

    assert "email" in exc_info.value.fields()
    assert notifier.sent == []


def test_update_student_replaces_both_rows(service, db, student_payload):
    user_id = service.add_student(student_payload)["userId"]

    changed = dict(student_payload, name="Asha V.", section="A", roll=9,
                   systemAccess=False, motherName="")
    result = service.update_student(user_id, changed)

    assert result == {"userId": user_id, "message": "Student updated successfully"}
    detail = service.get_student_detail(user_id)
    assert detail["name"] == "Asha V."
    assert detail["section"] == "A"
    assert detail["roll"] == 9
    assert detail["motherName"] is None
    assert detail["systemAccess"] is False


def test_update_missing_student_is_not_found(service, student_payload):
    with pytest.raises(NotFoundError):
        service.update_student(404, student_payload)


def test_update_staff_user_is_not_found(service, student_payload):
    with pytest.raises(NotFoundError):
        service.update_student(TEACHER_ID, student_payload)


def test_update_with_another_users_email_conflicts(service, student_payload):
    user_id = service.add_student(student_payload)["userId"]

    with pytest.raises(ConflictError):
        service.update_student(user_id, dict(student_payload, email="teacher@school.test"))


def test_update_keeping_own_email_is_allowed(service, student_payload):
    user_id = service.add_student(student_payload)["userId"]

    result = service.update_student(user_id, dict(student_payload, email="ASHA.VERMA@EXAMPLE.COM"))

    assert result["userId"] == user_id


def test_detail_missing_student_is_not_found(service):
    with pytest.raises(NotFoundError) as exc_info:
        service.get_student_detail(999)

    assert exc_info.value.status_code == 404


def test_list_students_filters_and_orders_by_id(service, student_payload):
    first = service.add_student(student_payload)["userId"]
    second = service.add_student(dict(student_payload, email="b@example.com",
                                      section="A", roll=2))["userId"]

    everyone = service.list_students({})
    section_a = service.list_students({"class_name": "Grade 1", "section_name": "A"})

    assert [s["id"] for s in everyone] == [first, second]
    assert [s["id"] for s in section_a] == [second]
    assert set(everyone[0]) == {"id", "name", "email", "lastLogin", "systemAccess"}


def test_list_students_empty_is_not_found(service):
    with pytest.raises(NotFoundError) as exc_info:
        service.list_students({"name": "Nobody"})

    assert exc_info.value.message == "Students not found"


def test_list_students_empty_returns_list_when_policy_off(db, notifier):
    service = StudentService(db, notifier, Settings(list_empty_as_not_found=False))

    assert service.list_students({"roll": 99}) == []


def test_status_change_by_self_is_rejected(db, notifier, student_payload):
    user_id = StudentService(db, notifier, Settings()).add_student(student_payload)["userId"]
    service = StudentService(db, notifier, Settings(status_reviewer_ids=frozenset({user_id})))

    for status in (True, False):
        with pytest.raises(AuthorizationError) as exc_info:
            service.set_student_status(user_id, user_id, status)
        assert exc_info.value.status_code == 400


def test_status_change_by_non_reviewer_is_forbidden(service, student_payload):
    user_id = service.add_student(student_payload)["userId"]

    with pytest.raises(AuthorizationError) as exc_info:
        service.set_student_status(user_id, TEACHER_ID, False)

    assert exc_info.value.status_code == 403


def test_status_change_by_reviewer_updates_audit_fields(service, db, student_payload):
    user_id = service.add_student(student_payload)["userId"]

    result = service.set_student_status(user_id, ADMIN_ID, False)

    assert result == {"message": "Student status changed successfully"}
    db.expire_all()
    user = db.get(User, user_id)
    assert user.is_active is False
    assert user.status_last_reviewer_id == ADMIN_ID
    assert user.status_last_reviewed_dt is not None


def test_status_change_on_missing_student_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.set_student_status(999, ADMIN_ID, True)


def test_delete_missing_student_is_not_found_and_writes_nothing(service, db, student_payload):
    service.add_student(student_payload)

    with pytest.raises(NotFoundError):
        service.delete_student(999)

    assert _count(db, User) == 3
    assert _count(db, UserProfile) == 1


def test_delete_student_removes_profile_and_user(service, db, student_payload):
    user_id = service.add_student(student_payload)["userId"]

    result = service.delete_student(user_id)

    assert result == {"message": "Student deleted successfully"}
    assert db.get(User, user_id) is None
    assert _count(db, UserProfile) == 0
    with pytest.raises(NotFoundError):
        service.get_student_detail(user_id)


def test_database_errors_become_internal_errors(service, monkeypatch, student_payload):
    from app.repositories import students as repo

    def broken(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(repo, "create_student", broken)

    with pytest.raises(InternalError) as exc_info:
        service.add_student(student_payload)

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Unable to add student"


def test_failed_profile_insert_rolls_back_user_row(service, db, monkeypatch, student_payload):
    from app.repositories import students as repo

    def broken_profile(*args, **kwargs):
        raise OperationalError("INSERT INTO user_profiles", {}, Exception("disk I/O error"))

    monkeypatch.setattr(repo, "create_user_profile", broken_profile)

    with pytest.raises(InternalError):
        service.add_student(student_payload)

    db.expire_all()
    assert db.query(User).filter(User.email == "asha.verma@example.com").count() == 0
    assert _count(db, UserProfile) == 0


def test_failed_profile_update_keeps_user_row_unchanged(service, db, monkeypatch, student_payload):
    from app.repositories import students as repo

    user_id = service.add_student(student_payload)["userId"]

    def broken_profile(*args, **kwargs):
        raise OperationalError("UPDATE user_profiles", {}, Exception("disk I/O error"))

    monkeypatch.setattr(repo, "update_user_profile", broken_profile)

    with pytest.raises(InternalError):
        service.update_student(user_id, dict(student_payload, name="Renamed", systemAccess=False))

    db.expire_all()
    user = db.get(User, user_id)
    assert user.name == "Asha Verma"
    assert user.is_active is True
    assert user.updated_at is None


def test_unique_email_race_is_reported_as_conflict(service, db, monkeypatch, student_payload):
    from app.repositories import students as repo

    service.add_student(student_payload)
    monkeypatch.setattr(repo, "find_user_by_email", lambda *args, **kwargs: None)

    with pytest.raises(ConflictError) as exc_info:
        service.add_student(dict(student_payload, name="Second Asha"))

    assert exc_info.value.status_code == 409
    assert _count(db, User) == 3
    assert _count(db, UserProfile) == 1
