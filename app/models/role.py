"""ORM model and fixed name set for authorization roles."""

import enum
import uuid

from sqlalchemy import Column, ForeignKey, String, Table

from app.models.base import Base


class UserRole(str, enum.Enum):
    """Fixed set of role names. The value is the name stored in the roles table."""

    USER = "USER"
    ADMIN = "ADMIN"
    OWNER = "OWNER"
    STAFF = "STAFF"


# Many-to-many link between users and roles; the composite key makes each
# membership unique.
user_roles = Table(
    "user_roles",
    Base.metadata,
    Column(
        "user_id",
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "role_id",
        String(36),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Role(Base):
    """
    Global authorization role, created once by role seeding.

    normalized_name carries the unique index so a seeding race fails on the
    second insert instead of duplicating the role.
    """

    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(64), nullable=False)
    normalized_name = Column(String(64), nullable=False, unique=True, index=True)
