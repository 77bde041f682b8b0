"""
Input Normalizer & Validator - turns an untrusted request payload into a
canonical StudentRecord.

Validation is not fail-fast: every field is checked independently and all
violations come back together in a single ValidationError, one entry per
offending field. The function is pure (no database access, no logging).
"""

from datetime import date
from typing import Optional

from pydantic import ValidationError as SchemaValidationError

from app.errors import ValidationError
from app.schemas.student import StudentRecord

# Field name -> wire name ("class_name" -> "class", "father_name" -> "fatherName")
WIRE_NAMES = {
    name: (info.alias or name) for name, info in StudentRecord.model_fields.items()
}


def _field_errors(exc: SchemaValidationError) -> list:
    errors = []
    seen = set()
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "payload"
        field = WIRE_NAMES.get(field, field)
        if field in seen:
            continue
        seen.add(field)

        if err["type"] == "missing":
            message = f"{field} is required"
        elif err["type"] == "value_error":
            message = f"{field} {err['ctx']['error']}"
        else:
            message = f"{field}: {err['msg']}"
        errors.append({"field": field, "message": message})
    return errors


def normalize(raw, user_id: Optional[int] = None, today: Optional[date] = None) -> StudentRecord:
    """
    Validate and normalize a raw student payload.

    Args:
        raw: Request body (dict) as received from the client
        user_id: Identity to inject on update; overrides any userId in `raw`
        today: Reference day for the date-of-birth age check (defaults to today)

    Returns:
        StudentRecord with trimmed text, lower-cased email/gender,
        int roll and parsed dates.

    Raises:
        ValidationError: with one {"field", "message"} entry per invalid field
    """
    if not isinstance(raw, dict):
        raise ValidationError([{"field": "payload", "message": "payload must be a JSON object"}])

    data = dict(raw)
    data.pop("user_id", None)
    data["userId"] = user_id

    try:
        return StudentRecord.model_validate(data, context={"today": today or date.today()})
    except SchemaValidationError as exc:
        raise ValidationError(_field_errors(exc))
