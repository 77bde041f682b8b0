"""
Reference data API routes - read-only class and section catalogs.

Used by the admin frontend to populate the class/section pickers of the
student form. The catalogs themselves are managed elsewhere.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth import CurrentUser, get_current_user
from app.database import get_db
from app.repositories import reference_data

router = APIRouter(prefix="/api/v1")


@router.get("/classes")
def list_classes(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """All classes with their assigned sections."""
    return {
        "classes": [
            {"id": c.id, "name": c.name, "sections": c.section_names}
            for c in reference_data.list_classes(db)
        ]
    }


@router.get("/sections")
def list_sections(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {
        "sections": [{"id": s.id, "name": s.name} for s in reference_data.list_sections(db)]
    }
