"""
Class/Section Cross-Validator.

A student's (class, section) pair is accepted only when:
1. the class exists in the class catalog,
2. the section exists in the global section catalog,
3. the section is assigned to that class (the class row's section list).

Each stage fails with its own message so the user can tell "no such
section anywhere" from "section exists but this class doesn't run it".
All three are input errors (400), never internal errors.
"""

import time
from typing import NamedTuple
from sqlalchemy.orm import Session

from app.errors import ValidationError
from app.models.school_class import SchoolClass, Section
from app.repositories import reference_data
from app.logging_config import get_logger, log_with_context

logger = get_logger("reference")


class ClassSectionMatch(NamedTuple):
    class_data: SchoolClass
    section_data: Section


def _names(items) -> str:
    return ", ".join(items) if items else "None"


def validate_class_and_section(db: Session, class_name: str, section_name: str) -> ClassSectionMatch:
    """
    Check a class/section pair against the reference catalogs.

    Returns:
        ClassSectionMatch with the matching catalog rows

    Raises:
        ValidationError: on `class` or `section`, listing the valid options
    """
    start_time = time.time()

    class_data = reference_data.get_class_by_name(db, class_name)
    if class_data is None:
        available = [c.name for c in reference_data.list_classes(db)]
        log_with_context(logger, "INFO", "Unknown class: {}".format(class_name),
                         extra_data={"available": available})
        raise ValidationError([{
            "field": "class",
            "message": "Class '{}' does not exist. Available classes: {}".format(
                class_name, _names(available)),
        }])

    section_data = reference_data.get_section_by_name(db, section_name)
    if section_data is None:
        available = [s.name for s in reference_data.list_sections(db)]
        log_with_context(logger, "INFO", "Unknown section: {}".format(section_name),
                         extra_data={"available": available})
        raise ValidationError([{
            "field": "section",
            "message": "Section '{}' does not exist. Available sections: {}".format(
                section_name, _names(available)),
        }])

    assigned = class_data.section_names
    if section_name not in assigned:
        log_with_context(logger, "INFO",
                         "Section {} not assigned to class {}".format(section_name, class_name),
                         extra_data={"assigned": assigned})
        raise ValidationError([{
            "field": "section",
            "message": "Section '{}' is not assigned to class '{}'. Assigned sections: {}".format(
                section_name, class_name, _names(assigned)),
        }])

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "DEBUG",
                     "Class/section validated: {}/{}".format(class_name, section_name),
                     extra_data={"duration_ms": round(duration_ms, 2)})
    return ClassSectionMatch(class_data, section_data)
