"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.role import Role, UserRole, user_roles
from app.models.user import User

__all__ = ["Base", "Role", "User", "UserRole", "user_roles"]
