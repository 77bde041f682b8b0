"""Tests for student payload normalization and field validation."""

from datetime import date

import pytest

from app.errors import ValidationError
from app.services.normalization import normalize

TODAY = date(2024, 6, 15)

REQUIRED_FIELDS = {
    "name", "email", "gender", "dob", "class", "section", "roll", "fatherName",
    "guardianName", "guardianPhone", "relationOfGuardian", "currentAddress",
    "permanentAddress",
}


def _errors(payload, today=TODAY):
    with pytest.raises(ValidationError) as exc_info:
        normalize(payload, today=today)
    return {e["field"]: e["message"] for e in exc_info.value.errors}


def _valid(**overrides):
    payload = {
        "name": "Asha Verma",
        "email": "asha@example.com",
        "gender": "female",
        "dob": "2014-03-02",
        "class": "Grade 1",
        "section": "A",
        "roll": 4,
        "fatherName": "Raj Verma",
        "guardianName": "Raj Verma",
        "guardianPhone": "9876543210",
        "relationOfGuardian": "Father",
        "currentAddress": "12 Lake Road",
        "permanentAddress": "12 Lake Road",
    }
    payload.update(overrides)
    return payload


def test_empty_payload_reports_every_required_field():
    errors = _errors({})

    assert set(errors) == REQUIRED_FIELDS
    assert errors["fatherName"] == "fatherName is required"


def test_blank_strings_count_as_missing():
    errors = _errors(_valid(name="   ", currentAddress="", guardianName=None))

    assert set(errors) == {"name", "currentAddress", "guardianName"}
    assert errors["name"] == "name is required"


def test_all_violations_are_reported_together():
    errors = _errors(_valid(email="not-an-email", gender="unknown", roll="abc",
                            dob="2014-02-30", guardianPhone="call me"))

    assert set(errors) == {"email", "gender", "roll", "dob", "guardianPhone"}
    assert len(errors) == 5


def test_trims_text_and_lowercases_email_and_gender():
    record = normalize(_valid(name="  Asha Verma ", email="  Asha@Example.COM ",
                              gender=" FEMALE ", fatherName=" Raj "), today=TODAY)

    assert record.name == "Asha Verma"
    assert record.email == "asha@example.com"
    assert record.gender == "female"
    assert record.father_name == "Raj"


def test_roll_accepts_digit_string():
    assert normalize(_valid(roll=" 12 "), today=TODAY).roll == 12


@pytest.mark.parametrize("roll", [0, -3, "1.5", 2.5, True, "x12"])
def test_roll_must_be_positive_integer(roll):
    errors = _errors(_valid(roll=roll))

    assert errors == {"roll": "roll must be a positive integer"}


def test_gender_is_restricted_to_known_values():
    errors = _errors(_valid(gender="robot"))

    assert errors["gender"] == "gender must be one of: male, female, other"


@pytest.mark.parametrize("dob", ["2021-06-15", "1999-06-15"])
def test_dob_at_exact_age_bounds_passes(dob):
    assert normalize(_valid(dob=dob), today=TODAY).dob == date.fromisoformat(dob)


@pytest.mark.parametrize("dob", ["2021-06-16", "1999-06-14"])
def test_dob_just_outside_age_bounds_fails(dob):
    errors = _errors(_valid(dob=dob))

    assert errors == {"dob": "dob must give an age between 3 and 25 years"}


def test_dob_in_future_fails():
    errors = _errors(_valid(dob="2024-06-16"))

    assert errors == {"dob": "dob cannot be in the future"}


def test_dob_accepts_iso_datetime():
    record = normalize(_valid(dob="2014-03-02T00:00:00.000Z"), today=TODAY)

    assert record.dob == date(2014, 3, 2)


def test_optional_fields_may_be_absent_or_blank():
    record = normalize(_valid(phone="", motherName="  ", fatherPhone=None), today=TODAY)

    assert record.phone is None
    assert record.mother_name is None
    assert record.father_phone is None
    assert record.mother_phone is None
    assert record.admission_date is None
    assert record.system_access is False


def test_optional_fields_are_shape_checked_when_present():
    errors = _errors(_valid(motherPhone="12", admissionDate="someday"))

    assert errors == {
        "motherPhone": "motherPhone must be a valid phone number",
        "admissionDate": "admissionDate must be a valid date",
    }


def test_user_id_is_injected_over_payload_value():
    record = normalize(_valid(userId=99), user_id=5, today=TODAY)

    assert record.user_id == 5


def test_wire_output_uses_frontend_names():
    wire = normalize(_valid(), today=TODAY).to_wire()

    assert wire["class"] == "Grade 1"
    assert wire["section"] == "A"
    assert wire["relationOfGuardian"] == "Father"
    assert wire["dob"] == "2014-03-02"


def test_non_object_payload_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        normalize(["not", "a", "dict"])

    assert exc_info.value.status_code == 400
    assert exc_info.value.fields() == ["payload"]


def test_zoned_datetime_keeps_written_date_part():
    record = normalize(_valid(dob="2014-05-01T18:30:00.000Z",
                              admissionDate="2024-04-01T23:59:00+05:30"), today=TODAY)

    assert record.dob == date(2014, 5, 1)
    assert record.admission_date == date(2024, 4, 1)
