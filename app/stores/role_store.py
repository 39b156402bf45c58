"""Role persistence: existence checks, creation and user membership."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.role import Role
from app.models.user import User
from app.stores.base import StoreFailure, StoreResult, normalize, store_errors

logger = logging.getLogger(__name__)


class RoleStore:
    """
    Reads and writes Role rows and user_roles memberships.

    Writes are flushed, not committed. When a write loses a uniqueness race
    the whole session is rolled back, discarding the caller's other
    uncommitted changes along with it.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_name(self, name: str) -> Role | None:
        with store_errors("find_role"):
            return self.db.scalars(
                select(Role).where(Role.normalized_name == normalize(name))
            ).first()

    def role_exists(self, name: str) -> bool:
        return self.find_by_name(name) is not None

    def create_role(self, name: str) -> StoreResult:
        if self.role_exists(name):
            return StoreResult.failed(
                StoreFailure.ALREADY_EXISTS, [f"Role name '{name}' is already taken."]
            )
        with store_errors("create_role"):
            try:
                self.db.add(Role(name=name, normalized_name=normalize(name)))
                self.db.flush()
            except IntegrityError:
                self.db.rollback()
                logger.info("Role creation lost a uniqueness race role=%s", name)
                return StoreResult.failed(
                    StoreFailure.ALREADY_EXISTS, [f"Role name '{name}' is already taken."]
                )
        return StoreResult.ok()

    def add_role_to_user(self, user: User, name: str) -> StoreResult:
        """Add a membership. Adding a role the user already holds is a no-op success."""
        role = self.find_by_name(name)
        if role is None:
            return StoreResult.failed(StoreFailure.NOT_FOUND, [f"Role {name} does not exist."])
        with store_errors("add_role_to_user"):
            if any(r.id == role.id for r in user.roles):
                return StoreResult.ok()
            try:
                user.roles.append(role)
                self.db.flush()
            except IntegrityError:
                # A concurrent grant inserted the same membership first.
                self.db.rollback()
                logger.info("Role membership already present user_id=%s role=%s", user.id, name)
        return StoreResult.ok()
