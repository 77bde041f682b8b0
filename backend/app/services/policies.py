"""
Authorization policy for student status changes.

Enabling or disabling a student account is reserved for configured
reviewer accounts (STATUS_REVIEWER_IDS), and nobody may change the
status of their own account.
"""

from enum import Enum
from typing import Iterable, Optional

from fastapi import status

from app.errors import AuthorizationError


class DenialReason(str, Enum):
    SELF_CHANGE = "self_change"
    NOT_PRIVILEGED = "not_privileged"


DENIAL_RESPONSES = {
    DenialReason.SELF_CHANGE: (status.HTTP_400_BAD_REQUEST, "You cannot change your own status"),
    DenialReason.NOT_PRIVILEGED: (status.HTTP_403_FORBIDDEN,
                                  "You do not have permission to change student status"),
}


def can_change_status(reviewer_id: int, subject_id: int,
                      privileged_ids: Iterable[int]) -> Optional[DenialReason]:
    """
    Decide whether `reviewer_id` may change the status of `subject_id`.

    Returns:
        None when allowed, otherwise the DenialReason. Self change is
        checked first, so a privileged reviewer acting on their own
        account is still refused as SELF_CHANGE.
    """
    if reviewer_id == subject_id:
        return DenialReason.SELF_CHANGE
    if reviewer_id not in set(privileged_ids):
        return DenialReason.NOT_PRIVILEGED
    return None


def denial_error(reason: DenialReason) -> AuthorizationError:
    """AuthorizationError carrying the status code for a denial reason."""
    status_code, message = DENIAL_RESPONSES[reason]
    return AuthorizationError(message, status_code=status_code)
