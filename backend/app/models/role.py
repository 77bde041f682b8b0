"""
Role model - the role catalog users are tagged with (admin, teacher, student).

Students are identified by their role, looked up by name rather than by a
fixed id so that the catalog can be seeded in any order.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from app.database import Base


class Role(Base):
    """SQLAlchemy model for the roles table."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Role identifier")
    name = Column(String(50), nullable=False, unique=True,
                  doc="Role name, matched case-insensitively (e.g. 'Student')")

    users = relationship("User", back_populates="role")

    def __repr__(self):
        return f"<Role(id={self.id}, name='{self.name}')>"
