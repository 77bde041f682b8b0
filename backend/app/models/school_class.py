"""
Class and Section models - administrator-maintained reference catalogs.

Sections live in a global catalog; which sections a class runs is stored
on the class row itself as a comma-separated list of section names.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime
from app.database import Base

SECTION_DELIMITER = ","


class SchoolClass(Base):
    """SQLAlchemy model for the classes table."""
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True,
                  doc="Class name, e.g. 'Grade 5'")
    sections = Column(Text, nullable=True,
                      doc="Assigned section names, comma-separated: 'A,B,C'")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    @property
    def section_names(self):
        """Assigned section names as a list, blanks dropped."""
        if not self.sections:
            return []
        return [s.strip() for s in self.sections.split(SECTION_DELIMITER) if s.strip()]

    def __repr__(self):
        return f"<SchoolClass(id={self.id}, name='{self.name}', sections='{self.sections}')>"


class Section(Base):
    """SQLAlchemy model for the sections table."""
    __tablename__ = "sections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True,
                  doc="Section name, e.g. 'A'")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<Section(id={self.id}, name='{self.name}')>"
