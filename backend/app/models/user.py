"""
User model - the core identity row of every account, students included.

A student account is a User tagged with the student role plus exactly one
UserProfile row. The status audit columns (status_last_reviewed_dt,
status_last_reviewer_id) are written together with is_active whenever a
reviewer enables or disables the account.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.database import Base


class User(Base):
    """
    SQLAlchemy model for the users table.

    is_active doubles as the student's "system access" flag.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="User identifier")
    name = Column(String(100), nullable=False,
                  doc="Full name")
    email = Column(String(100), nullable=False, unique=True,
                   doc="Login email, stored trimmed and lower-cased")
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False,
                     doc="Reference to the user's role")
    is_active = Column(Boolean, nullable=False, default=False,
                       doc="Whether the account may sign in (systemAccess)")
    reporter_id = Column(Integer, ForeignKey("users.id"), nullable=True,
                         doc="Staff user who created this account")
    last_login = Column(DateTime, nullable=True,
                        doc="Last successful sign-in")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        doc="Timestamp when the account was created")
    updated_at = Column(DateTime, nullable=True,
                        doc="Timestamp of the last full update")
    status_last_reviewed_dt = Column(DateTime, nullable=True,
                                     doc="When is_active was last changed by a reviewer")
    status_last_reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=True,
                                     doc="Reviewer who last changed is_active")

    role = relationship("Role", back_populates="users")
    profile = relationship("UserProfile", back_populates="user", uselist=False)
    reporter = relationship("User", remote_side="User.id", foreign_keys=[reporter_id])

    __table_args__ = (
        Index("ix_users_role_id", "role_id"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role_id}, active={self.is_active})>"
