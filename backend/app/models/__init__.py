from app.models.role import Role
from app.models.user import User
from app.models.user_profile import UserProfile
from app.models.school_class import SchoolClass, Section

__all__ = ["Role", "User", "UserProfile", "SchoolClass", "Section"]
