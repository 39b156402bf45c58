"""User persistence: case-insensitive lookup and validated creation."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import PasswordPolicy, hash_password, validate_username
from app.models.user import User
from app.stores.base import StoreFailure, StoreResult, normalize, store_errors

logger = logging.getLogger(__name__)


class UserStore:
    """
    Reads and writes User rows through a SQLAlchemy session.

    Writes are flushed, not committed; the caller owns the transaction. A
    uniqueness violation raised by the database (a concurrent registration
    that slipped past the existence checks) is reported as ALREADY_EXISTS
    after rolling back the whole session: every uncommitted change the caller
    made on it is discarded too, so commit anything that must survive before
    calling create.
    """

    def __init__(self, db: Session, password_policy: PasswordPolicy) -> None:
        self.db = db
        self.password_policy = password_policy

    def find_by_username(self, username: str) -> User | None:
        with store_errors("find_by_username"):
            return self.db.scalars(
                select(User).where(User.normalized_username == normalize(username))
            ).first()

    def find_by_id(self, user_id: str) -> User | None:
        with store_errors("find_by_id"):
            return self.db.get(User, user_id)

    def username_exists(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def email_exists(self, email: str) -> bool:
        with store_errors("email_exists"):
            found = self.db.scalars(
                select(User.id).where(User.normalized_email == normalize(email))
            ).first()
        return found is not None

    def create(self, user: User, password: str) -> StoreResult:
        """
        Validate and insert a new user with a hashed password.

        All validation failures are collected so the caller can show every
        reason at once.
        """
        errors = validate_username(user.username or "")
        if not user.email or not user.email.strip():
            errors.append("Email is required.")
        if not errors and self.username_exists(user.username):
            logger.info("User creation rejected: username taken username=%s", user.username)
            return StoreResult.failed(
                StoreFailure.ALREADY_EXISTS,
                [f"Username '{user.username}' is already taken."],
            )
        if user.email and user.email.strip() and self.email_exists(user.email):
            errors.append(f"Email '{user.email}' is already taken.")
        errors.extend(self.password_policy.validate(password))
        if errors:
            return StoreResult.failed(StoreFailure.VALIDATION_FAILED, errors)

        user.normalized_username = normalize(user.username)
        user.email = user.email.strip()
        user.normalized_email = normalize(user.email)
        user.password_hash = hash_password(password)
        with store_errors("create_user"):
            try:
                self.db.add(user)
                self.db.flush()
            except IntegrityError:
                self.db.rollback()
                logger.info("User creation lost a uniqueness race username=%s", user.username)
                return StoreResult.failed(
                    StoreFailure.ALREADY_EXISTS,
                    [f"Username '{user.username}' or email '{user.email}' is already taken."],
                )
        return StoreResult.ok()

    def get_roles(self, user: User) -> list[str]:
        """Names of the roles currently assigned to the user, sorted."""
        with store_errors("get_roles"):
            return sorted(role.name for role in user.roles)
