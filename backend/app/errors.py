"""
Typed errors raised by the student-records service layer.

Each error is an HTTPException with a fixed status code, so FastAPI
renders it directly as {"detail": ...} without extra handlers:

- ValidationError     400  user-correctable input, all field errors at once
- NotFoundError       404  referenced student absent
- ConflictError       409  email already used by another account
- AuthorizationError  400 (self change) / 403 (not privileged)
- InternalError       500  persistence or unexpected failure, sanitized
"""

from typing import List, Optional
from fastapi import HTTPException, status


class StudentServiceError(HTTPException):
    """Base class for all errors surfaced by the student service."""

    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None, detail=None):
        self.message = message
        super().__init__(
            status_code=status_code or self.status_code_default,
            detail=detail if detail is not None else message,
        )


class ValidationError(StudentServiceError):
    """
    Aggregated field-level validation failure.

    `errors` is a list of {"field": <wire name>, "message": <text>} dicts,
    one per offending field.
    """

    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: List[dict], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(message, detail={"message": message, "errors": errors})

    def fields(self) -> List[str]:
        return [e["field"] for e in self.errors]


class NotFoundError(StudentServiceError):
    status_code_default = status.HTTP_404_NOT_FOUND


class ConflictError(StudentServiceError):
    status_code_default = status.HTTP_409_CONFLICT


class AuthorizationError(StudentServiceError):
    status_code_default = status.HTTP_403_FORBIDDEN


class InternalError(StudentServiceError):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR


class NotificationError(Exception):
    """Raised by a notifier when the verification email cannot be sent."""
