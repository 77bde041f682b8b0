"""
UserProfile model - demographic, academic and guardian details of a student.

One-to-one with User: user_id is both the primary key and the foreign key,
so a user can never own more than one profile row.
"""

from sqlalchemy import Column, Integer, String, Date, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.database import Base


class UserProfile(Base):
    """SQLAlchemy model for the user_profiles table."""
    __tablename__ = "user_profiles"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True,
                     doc="Owning user (also serves as PK)")
    gender = Column(String(10), nullable=False,
                    doc="male | female | other")
    phone = Column(String(20), nullable=True)
    dob = Column(Date, nullable=False,
                 doc="Date of birth")
    admission_date = Column(Date, nullable=True)
    class_name = Column(String(50), nullable=False,
                        doc="Class name, must exist in the classes catalog")
    section_name = Column(String(50), nullable=False,
                          doc="Section name, must be assigned to class_name")
    roll = Column(Integer, nullable=False,
                  doc="Roll number within the class")
    current_address = Column(String(255), nullable=False)
    permanent_address = Column(String(255), nullable=False)
    father_name = Column(String(100), nullable=False)
    father_phone = Column(String(20), nullable=True)
    mother_name = Column(String(100), nullable=True)
    mother_phone = Column(String(20), nullable=True)
    guardian_name = Column(String(100), nullable=False)
    guardian_phone = Column(String(20), nullable=False)
    relation_of_guardian = Column(String(30), nullable=False)

    user = relationship("User", back_populates="profile")

    __table_args__ = (
        Index("ix_user_profiles_class_section", "class_name", "section_name"),
    )

    def __repr__(self):
        return (f"<UserProfile(user={self.user_id}, class='{self.class_name}', "
                f"section='{self.section_name}', roll={self.roll})>")
