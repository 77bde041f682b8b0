"""
Seed Script - loads roles, the admin account and the class/section catalogs.

The student routes need a "student" role, at least one reviewer account
(STATUS_REVIEWER_IDS, default id 1) and reference catalogs to validate
against. Existing rows are left untouched, so the script can be re-run.

Usage:
    python seed_data.py                      # built-in defaults
    python seed_data.py seed.json            # {"classes": {"Grade 1": ["A", "B"]}, ...}
"""

import json
import sys

from app.database import SessionLocal, create_tables
from app.logging_config import setup_logging, get_logger, log_with_context
from app.models import Role, User, SchoolClass, Section
from app.models.school_class import SECTION_DELIMITER

DEFAULT_SEED = {
    "roles": ["Admin", "Teacher", "Student"],
    "admin": {"name": "Administrator", "email": "admin@school.local"},
    "classes": {
        "Grade 1": ["A", "B"],
        "Grade 2": ["A", "B"],
        "Grade 3": ["A", "B", "C"],
        "Grade 4": ["A"],
    },
    "sections": ["A", "B", "C", "D"],
}


def seed(db, data):
    """Insert missing catalog rows. Returns counts of rows created."""
    created = {"roles": 0, "users": 0, "classes": 0, "sections": 0}

    for name in data.get("roles", []):
        if not db.query(Role).filter(Role.name == name).first():
            db.add(Role(name=name))
            created["roles"] += 1
    db.flush()

    admin = data.get("admin")
    if admin and not db.query(User).filter(User.email == admin["email"]).first():
        admin_role = db.query(Role).filter(Role.name == "Admin").first()
        db.add(User(name=admin["name"], email=admin["email"],
                    role_id=admin_role.id, is_active=True))
        created["users"] += 1

    for name in data.get("sections", []):
        if not db.query(Section).filter(Section.name == name).first():
            db.add(Section(name=name))
            created["sections"] += 1

    for name, sections in data.get("classes", {}).items():
        if not db.query(SchoolClass).filter(SchoolClass.name == name).first():
            db.add(SchoolClass(name=name, sections=SECTION_DELIMITER.join(sections)))
            created["classes"] += 1

    db.commit()
    return created


def main():
    setup_logging()
    logger = get_logger("db")

    data = DEFAULT_SEED
    if len(sys.argv) > 1:
        with open(sys.argv[1], "r", encoding="utf-8") as f:
            data = json.load(f)

    create_tables()
    db = SessionLocal()
    try:
        created = seed(db, data)
    finally:
        db.close()

    log_with_context(logger, "INFO", "Seed complete", extra_data=created)
    print(f"Seed complete: {created}")


if __name__ == "__main__":
    main()
