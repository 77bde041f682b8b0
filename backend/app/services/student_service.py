"""
Student Service - orchestrates the request-facing student operations.

Each operation is a short sequential pipeline:

    add:     normalize -> class/section check -> email uniqueness
             -> create user+profile -> verification email (non-fatal)
    update:  normalize -> existence -> class/section check
             -> email ownership -> replace user+profile
    detail:  existence -> joined fetch
    list:    filtered fetch -> NotFound on empty (policy flag)
    status:  existence -> status policy -> audited status update
    delete:  existence -> delete profile+user

Steps are never run concurrently, even when independent. Database
errors are logged with their cause and re-raised as a sanitized
InternalError. Nothing is retried.
"""

import time
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings
from app.errors import ConflictError, InternalError, NotFoundError
from app.repositories import students as repo
from app.services.class_section import validate_class_and_section
from app.services.normalization import normalize
from app.services.notifications import Notifier
from app.services.policies import can_change_status, denial_error
from app.logging_config import get_logger, log_with_context

logger = get_logger("students")

ADD_STUDENT_AND_EMAIL_SEND_SUCCESS = "Student added and verification email sent successfully."
ADD_STUDENT_BUT_EMAIL_SEND_FAIL = "Student added, but failed to send verification email."
UPDATE_STUDENT_SUCCESS = "Student updated successfully"
STATUS_CHANGE_SUCCESS = "Student status changed successfully"


class StudentService:
    """Student operations bound to one request's database session."""

    def __init__(self, db: Session, notifier: Notifier, settings: Settings):
        self.db = db
        self.notifier = notifier
        self.settings = settings
        self._student_role_id = None

    @contextmanager
    def _persistence(self, failure_message: str, **context):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            log_with_context(logger, "ERROR", failure_message, context=context, exc_info=e)
            raise InternalError(failure_message) from e

    def _role_id(self) -> int:
        if self._student_role_id is None:
            role_id = repo.get_role_id(self.db, self.settings.student_role_name)
            if role_id is None:
                log_with_context(logger, "ERROR", "Student role missing from roles catalog",
                                 extra_data={"role_name": self.settings.student_role_name})
                raise InternalError("Student role is not configured")
            self._student_role_id = role_id
        return self._student_role_id

    def _check_student_id(self, user_id: int) -> None:
        if repo.find_student_by_id(self.db, user_id, self._role_id()) is None:
            raise NotFoundError("Student not found")

    # ── Queries ──────────────────────────────────────────────

    def list_students(self, filters: Optional[dict] = None) -> list:
        """
        Student summaries matching `filters` (name, class_name,
        section_name, roll).

        Raises:
            NotFoundError: no match, while list_empty_as_not_found is on
        """
        start_time = time.time()
        with self._persistence("Unable to list students"):
            students = repo.find_all_students(self.db, self._role_id(), filters)

        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "INFO", "Listed {} students".format(len(students)),
                         extra_data={"filters": filters or {}, "duration_ms": round(duration_ms, 2)})

        if not students and self.settings.list_empty_as_not_found:
            raise NotFoundError("Students not found")
        return students

    def get_student_detail(self, user_id: int) -> dict:
        with self._persistence("Unable to get student detail", user_id=user_id):
            self._check_student_id(user_id)
            student = repo.find_student_detail(self.db, user_id)
        if student is None:
            raise NotFoundError("Student not found")
        return student

    # ── Commands ─────────────────────────────────────────────

    def add_student(self, raw: dict, reporter_id: Optional[int] = None) -> dict:
        """
        Create a student account and send its verification email.

        A failed email does not fail the add; it changes the message.

        Returns:
            {"userId": int, "message": str}
        """
        start_time = time.time()
        record = normalize(raw)
        reporter_id = reporter_id if reporter_id is not None else self.settings.default_reporter_id

        with self._persistence("Unable to add student", email=record.email):
            validate_class_and_section(self.db, record.class_name, record.section_name)
            role_id = self._role_id()
            if repo.find_user_by_email(self.db, record.email) is not None:
                log_with_context(logger, "INFO", "Rejected duplicate email",
                                 context={"email": record.email})
                raise ConflictError("Email already exists")
            try:
                user_id = repo.create_student(self.db, record, role_id, reporter_id)
            except IntegrityError:
                # Lost a race with a concurrent add of the same email
                raise ConflictError("Email already exists")

        try:
            self.notifier.send_account_verification_email(user_id, record.email)
            message = ADD_STUDENT_AND_EMAIL_SEND_SUCCESS
        except Exception as e:
            log_with_context(logger, "WARNING", "Student added without verification email",
                             context={"user_id": user_id}, exc_info=e)
            message = ADD_STUDENT_BUT_EMAIL_SEND_FAIL

        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "INFO", "Student added",
                         context={"user_id": user_id, "reporter_id": reporter_id},
                         extra_data={"duration_ms": round(duration_ms, 2)})
        return {"userId": user_id, "message": message}

    def update_student(self, user_id: int, raw: dict) -> dict:
        """
        Replace a student's user and profile rows with a new payload.

        Returns:
            {"userId": int, "message": str}
        """
        start_time = time.time()
        record = normalize(raw, user_id=user_id)

        with self._persistence("Unable to update student", user_id=user_id):
            self._check_student_id(user_id)
            validate_class_and_section(self.db, record.class_name, record.section_name)
            owner = repo.find_user_by_email(self.db, record.email)
            if owner is not None and owner.id != user_id:
                raise ConflictError("Email already exists")
            try:
                repo.update_student(self.db, user_id, record, self._role_id())
            except IntegrityError:
                raise ConflictError("Email already exists")

        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "INFO", "Student updated", context={"user_id": user_id},
                         extra_data={"duration_ms": round(duration_ms, 2)})
        return {"userId": user_id, "message": UPDATE_STUDENT_SUCCESS}

    def set_student_status(self, user_id: int, reviewer_id: int, status: bool) -> dict:
        """
        Enable or disable a student account on behalf of `reviewer_id`.

        Raises:
            NotFoundError: unknown student
            AuthorizationError: self change (400) or non-reviewer (403)
            InternalError: no row updated
        """
        with self._persistence("Unable to change student status",
                               user_id=user_id, reviewer_id=reviewer_id):
            self._check_student_id(user_id)

            reason = can_change_status(reviewer_id, user_id, self.settings.status_reviewer_ids)
            if reason is not None:
                log_with_context(logger, "WARNING", "Status change denied: {}".format(reason.value),
                                 context={"user_id": user_id, "reviewer_id": reviewer_id})
                raise denial_error(reason)

            affected = repo.set_status(self.db, user_id, reviewer_id, status)

        if affected <= 0:
            raise InternalError("Unable to change student status")

        log_with_context(logger, "INFO", "Student status changed to {}".format(status),
                         context={"user_id": user_id, "reviewer_id": reviewer_id})
        return {"message": STATUS_CHANGE_SUCCESS}

    def delete_student(self, user_id: int) -> dict:
        """Permanently remove a student's profile and user rows."""
        with self._persistence("Unable to delete student", user_id=user_id):
            self._check_student_id(user_id)
            message = repo.delete_student(self.db, user_id)

        if not message:
            raise InternalError("Unable to delete student")

        log_with_context(logger, "INFO", "Student deleted", context={"user_id": user_id})
        return {"message": message}
