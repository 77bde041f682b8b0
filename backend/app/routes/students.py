"""
Students API routes - thin HTTP layer over StudentService.

Provides endpoints for:
- Listing students with filters
- Viewing a student's full record
- Adding and updating students
- Enabling/disabling a student account
- Deleting a student

Every route requires an authenticated caller. Errors are raised by the
service as typed HTTPExceptions (see app.errors).
"""

from typing import Optional
from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.auth import CurrentUser, get_current_user
from app.config import Settings, get_settings
from app.database import get_db
from app.services.notifications import Notifier, SmtpNotifier
from app.services.student_service import StudentService
from app.logging_config import get_logger, log_with_context

router = APIRouter(prefix="/api/v1/students")
logger = get_logger("http")


# ── Pydantic schemas ─────────────────────────────────────────

class StatusChangeRequest(BaseModel):
    """Desired account status: true enables, false disables."""
    status: bool


class StudentMutationResponse(BaseModel):
    userId: int
    message: str


class MessageResponse(BaseModel):
    message: str


# ── Dependencies ─────────────────────────────────────────────

def get_notifier(settings: Settings = Depends(get_settings)) -> Notifier:
    return SmtpNotifier(settings)


def get_student_service(
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> StudentService:
    return StudentService(db, notifier, settings)


# ── Routes ───────────────────────────────────────────────────

@router.get("")
def list_students(
    name: Optional[str] = Query(None, description="Exact student name"),
    class_name: Optional[str] = Query(None, alias="class", description="Class name"),
    section: Optional[str] = Query(None, description="Section name"),
    roll: Optional[int] = Query(None, ge=1, description="Roll number"),
    current_user: CurrentUser = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    """List students matching all given filters, ordered by id."""
    students = service.list_students({
        "name": name,
        "class_name": class_name,
        "section_name": section,
        "roll": roll,
    })
    return {"students": students}


@router.post("", status_code=status.HTTP_201_CREATED, response_model=StudentMutationResponse)
def add_student(
    payload: dict = Body(...),
    current_user: CurrentUser = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    """Add a student; the caller is recorded as the reporter."""
    result = service.add_student(payload, reporter_id=current_user.id)
    log_with_context(logger, "INFO", "Student {} added".format(result["userId"]),
                     context={"user_id": result["userId"], "reporter_id": current_user.id})
    return result


@router.get("/{student_id}")
def get_student_detail(
    student_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    return {"studentDetail": service.get_student_detail(student_id)}


@router.put("/{student_id}", response_model=StudentMutationResponse)
def update_student(
    student_id: int,
    payload: dict = Body(...),
    current_user: CurrentUser = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    """Replace a student's record; the path id wins over any id in the body."""
    return service.update_student(student_id, payload)


@router.post("/{student_id}/status", response_model=MessageResponse)
def set_student_status(
    student_id: int,
    request: StatusChangeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    """Enable or disable a student account; the caller is the reviewer."""
    return service.set_student_status(student_id, current_user.id, request.status)


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(
    student_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    return service.delete_student(student_id)
