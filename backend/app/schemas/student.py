"""
Student record schema - the canonical, normalized shape of a student.

Field names follow the wire format used by the admin frontend
(camelCase, with `class` and `section` for the academic placement).
Each field validates independently, so a bad payload reports every
offending field in one pass.
"""

import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-()]+$")
PHONE_MIN_DIGITS = 7
PHONE_MAX_DIGITS = 15

GENDERS = ("male", "female", "other")

MIN_AGE_YEARS = 3
MAX_AGE_YEARS = 25

REQUIRED_TEXT_FIELDS = (
    "name", "class_name", "section_name", "father_name", "guardian_name",
    "relation_of_guardian", "current_address", "permanent_address",
)
OPTIONAL_PHONE_FIELDS = ("phone", "father_phone", "mother_phone")


def shift_years(day: date, years: int) -> date:
    """Same calendar day `years` later (or earlier); Feb 29 falls back to Feb 28."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_date(value) -> date:
    """
    Parse a calendar date from a date, datetime or ISO string.

    For an ISO datetime the date part is taken as written, with no
    timezone conversion: "2014-05-01T18:30:00.000Z" gives 2014-05-01.
    A browser east of UTC that serializes local midnight as the previous
    day in UTC will therefore land one day early; clients should send
    plain "YYYY-MM-DD" dates.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError("must be a valid date")
    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        # ISO datetimes as sent by browser date pickers: 2012-05-01T00:00:00.000Z
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError("must be a valid date")


def _check_phone(value: str) -> str:
    text = value.strip()
    digits = re.sub(r"\D", "", text)
    if not PHONE_PATTERN.match(text) or not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
        raise ValueError("must be a valid phone number")
    return text


class StudentRecord(BaseModel):
    """
    Canonical student record.

    Produced only through validation (see app.services.normalization):
    text trimmed, email and gender lower-cased, roll an int, dates parsed.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: Optional[int] = None
    name: str
    email: str
    gender: str
    phone: Optional[str] = None
    dob: date
    class_name: str = Field(alias="class")
    section_name: str = Field(alias="section")
    roll: int
    father_name: str
    father_phone: Optional[str] = None
    mother_name: Optional[str] = None
    mother_phone: Optional[str] = None
    guardian_name: str
    guardian_phone: str
    relation_of_guardian: str
    current_address: str
    permanent_address: str
    admission_date: Optional[date] = None
    system_access: bool = False

    @field_validator(*REQUIRED_TEXT_FIELDS, mode="before")
    @classmethod
    def _required_text(cls, value):
        if _blank(value):
            raise ValueError("is required")
        if not isinstance(value, str):
            raise ValueError("must be text")
        return value.strip()

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value):
        if _blank(value):
            raise ValueError("is required")
        if not isinstance(value, str):
            raise ValueError("must be a valid email address")
        email = value.strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise ValueError("must be a valid email address")
        return email

    @field_validator("gender", mode="before")
    @classmethod
    def _gender(cls, value):
        if _blank(value):
            raise ValueError("is required")
        gender = str(value).strip().lower()
        if gender not in GENDERS:
            raise ValueError("must be one of: " + ", ".join(GENDERS))
        return gender

    @field_validator("roll", mode="before")
    @classmethod
    def _roll(cls, value):
        if _blank(value):
            raise ValueError("is required")
        if isinstance(value, bool):
            raise ValueError("must be a positive integer")
        if isinstance(value, int):
            roll = value
        elif isinstance(value, str) and re.fullmatch(r"[0-9]+", value.strip()):
            roll = int(value.strip())
        else:
            raise ValueError("must be a positive integer")
        if roll <= 0:
            raise ValueError("must be a positive integer")
        return roll

    @field_validator("guardian_phone", mode="before")
    @classmethod
    def _guardian_phone(cls, value):
        if _blank(value):
            raise ValueError("is required")
        if not isinstance(value, str):
            raise ValueError("must be a valid phone number")
        return _check_phone(value)

    @field_validator(*OPTIONAL_PHONE_FIELDS, mode="before")
    @classmethod
    def _optional_phone(cls, value):
        if _blank(value):
            return None
        if not isinstance(value, str):
            raise ValueError("must be a valid phone number")
        return _check_phone(value)

    @field_validator("mother_name", mode="before")
    @classmethod
    def _optional_text(cls, value):
        if _blank(value):
            return None
        if not isinstance(value, str):
            raise ValueError("must be text")
        return value.strip()

    @field_validator("dob", mode="before")
    @classmethod
    def _dob_date(cls, value):
        if _blank(value):
            raise ValueError("is required")
        return _parse_date(value)

    @field_validator("dob")
    @classmethod
    def _dob_age(cls, value: date, info: ValidationInfo):
        # Coarse age check: compares calendar anniversaries, not day counts.
        today = (info.context or {}).get("today") or date.today()
        if value > today:
            raise ValueError("cannot be in the future")
        oldest = shift_years(today, -MAX_AGE_YEARS)
        youngest = shift_years(today, -MIN_AGE_YEARS)
        if not oldest <= value <= youngest:
            raise ValueError(
                f"must give an age between {MIN_AGE_YEARS} and {MAX_AGE_YEARS} years"
            )
        return value

    @field_validator("admission_date", mode="before")
    @classmethod
    def _admission_date(cls, value):
        if _blank(value):
            return None
        return _parse_date(value)

    @field_validator("system_access", mode="before")
    @classmethod
    def _system_access(cls, value):
        return False if value is None else value

    def to_wire(self) -> dict:
        """JSON-ready dict using the frontend's field names."""
        return self.model_dump(by_alias=True, mode="json")
