"""
Reference Data Provider - read-only access to the class and section catalogs.

The catalogs are maintained by administrators elsewhere; the student
pipeline only reads them to check that a (class, section) pair exists.
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.school_class import SchoolClass, Section


def list_classes(db: Session) -> List[SchoolClass]:
    """All classes ordered by name."""
    return db.query(SchoolClass).order_by(SchoolClass.name.asc()).all()


def get_class_by_name(db: Session, name: str) -> Optional[SchoolClass]:
    return db.query(SchoolClass).filter(SchoolClass.name == name).first()


def list_sections(db: Session) -> List[Section]:
    """All sections in the global catalog ordered by name."""
    return db.query(Section).order_by(Section.name.asc()).all()


def get_section_by_name(db: Session, name: str) -> Optional[Section]:
    return db.query(Section).filter(Section.name == name).first()
