"""ORM model for application users (auth and RBAC)."""

import uuid

from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.orm import relationship

from app.models.base import Base
from app.models.role import user_roles


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    Username and email are compared through their upper-cased normalized
    columns, which carry the unique indexes.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(255), nullable=False)
    normalized_username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(320), nullable=False)
    normalized_email = Column(String(320), nullable=False, unique=True, index=True)
    first_name = Column(String(255), nullable=False, default="")
    last_name = Column(String(255), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    security_stamp = Column(
        String(36), nullable=False, default=lambda: str(uuid.uuid4())
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    roles = relationship("Role", secondary=user_roles, lazy="selectin")
